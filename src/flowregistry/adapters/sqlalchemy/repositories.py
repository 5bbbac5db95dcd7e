"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import Select, and_, insert, or_, select, update

from flowregistry.adapters.sqlalchemy.mappings import (
    active_application_id_selector,
    logical_flow_table,
)
from flowregistry.adapters.sqlalchemy.names import entity_name_field
from flowregistry.domain.dedup import exclude_matching, index_by_endpoints
from flowregistry.domain.model import (
    EntityKind,
    EntityReference,
    LifecycleStatus,
    LogicalFlow,
    UserTimestamp,
    utcnow,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Sequence
    from datetime import datetime

    from sqlalchemy import ColumnElement, CursorResult, RowMapping
    from sqlalchemy.orm import Session
    from sqlalchemy.sql.dml import Update

    from flowregistry.domain.ports.persistence import EndpointPair

log = logging.getLogger(__name__)

type ApplicationIdSource = Select[Any] | Collection[int]

_flow = logical_flow_table

_ACTIVE = LifecycleStatus.ACTIVE.value
_REMOVED = LifecycleStatus.REMOVED.value

SOURCE_NAME = entity_name_field(_flow.c.source_entity_id, _flow.c.source_entity_kind).label(
    "source_name"
)
TARGET_NAME = entity_name_field(_flow.c.target_entity_id, _flow.c.target_entity_kind).label(
    "target_name"
)

# Both lifecycle columns are checked: legacy rows may carry only one of them.
NOT_REMOVED = and_(
    _flow.c.is_removed.is_(False),
    _flow.c.entity_lifecycle_status != _REMOVED,
)
IS_REMOVED = or_(
    _flow.c.entity_lifecycle_status == _REMOVED,
    _flow.c.is_removed.is_(True),
)


def flow_from_row(row: RowMapping) -> LogicalFlow:
    """Map a ``logical_flow`` row (plus resolved names) to a domain snapshot."""

    status = (
        LifecycleStatus.REMOVED
        if row["is_removed"]
        else LifecycleStatus.read(row["entity_lifecycle_status"])
    )
    return LogicalFlow(
        id=row["id"],
        source=EntityReference(
            kind=EntityKind(row["source_entity_kind"]),
            id=row["source_entity_id"],
            name=row.get("source_name"),
        ),
        target=EntityReference(
            kind=EntityKind(row["target_entity_kind"]),
            id=row["target_entity_id"],
            name=row.get("target_name"),
        ),
        lifecycle_status=status,
        last_updated_by=row["last_updated_by"],
        last_updated_at=row["last_updated_at"],
        last_attested_by=row["last_attested_by"],
        last_attested_at=row["last_attested_at"],
        created=UserTimestamp(by=row["created_by"], at=row["created_at"]),
        provenance=row["provenance"],
    )


def flow_to_values(flow: LogicalFlow) -> dict[str, object]:
    """Column values for inserting ``flow``; the legacy ``is_removed`` flag is derived."""

    created = flow.created or UserTimestamp(by=flow.last_updated_by, at=flow.last_updated_at)
    return {
        "source_entity_kind": flow.source.kind,
        "source_entity_id": flow.source.id,
        "target_entity_kind": flow.target.kind,
        "target_entity_id": flow.target.id,
        "entity_lifecycle_status": flow.lifecycle_status.value,
        "is_removed": flow.is_removed,
        "last_updated_by": flow.last_updated_by,
        "last_updated_at": flow.last_updated_at,
        "last_attested_by": flow.last_attested_by,
        "last_attested_at": flow.last_attested_at,
        "created_by": created.by,
        "created_at": created.at,
        "provenance": flow.provenance,
    }


class SqlAlchemyLogicalFlowRepository:
    """Store of logical flows with soft-delete and restore semantics.

    Uniqueness of ACTIVE ``(source, target)`` pairs is enforced by the
    ``uq_logical_flow_active_pair`` partial index, not by this class. A
    concurrent duplicate insert surfaces as ``IntegrityError``.
    """

    def __init__(
        self,
        session: Session,
        *,
        active_application_ids: ApplicationIdSource | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session = session
        self._clock = clock
        if active_application_ids is None:
            self._active_application_ids: ApplicationIdSource = active_application_id_selector()
        elif isinstance(active_application_ids, Select):
            self._active_application_ids = active_application_ids
        else:
            self._active_application_ids = sorted(active_application_ids)

    # -- lookups -------------------------------------------------------------

    def find_by_entity_reference(self, ref: EntityReference) -> list[LogicalFlow]:
        stmt = self._base_query().where(
            or_(_is_source(ref), _is_target(ref)),
            NOT_REMOVED,
        )
        return self._fetch(stmt)

    def get_by_source_and_target(
        self, source: EntityReference, target: EntityReference
    ) -> LogicalFlow | None:
        stmt = self._base_query().where(_is_source(source), _is_target(target), NOT_REMOVED)
        row = self.session.execute(stmt).mappings().one_or_none()
        return flow_from_row(row) if row is not None else None

    def find_by_sources_and_targets(self, pairs: Sequence[EndpointPair]) -> list[LogicalFlow]:
        if not pairs:
            return []
        condition = or_(
            *(and_(_is_source(source), _is_target(target), NOT_REMOVED) for source, target in pairs)
        )
        return self._fetch(self._base_query().where(condition))

    def find_upstream_flows_for_entity_references(
        self, refs: Sequence[EntityReference]
    ) -> list[LogicalFlow]:
        if not refs:
            return []
        ids_by_kind: defaultdict[EntityKind, set[int]] = defaultdict(set)
        for ref in refs:
            ids_by_kind[ref.kind].add(ref.id)
        any_target_matches = or_(
            *(
                and_(
                    _flow.c.target_entity_kind == kind,
                    _flow.c.target_entity_id.in_(sorted(ids)),
                )
                for kind, ids in ids_by_kind.items()
            )
        )
        return self._fetch(self._base_query().where(any_target_matches, NOT_REMOVED))

    def get_by_flow_id(self, flow_id: int) -> LogicalFlow | None:
        stmt = self._base_query().where(_flow.c.id == flow_id)
        row = self.session.execute(stmt).mappings().one_or_none()
        return flow_from_row(row) if row is not None else None

    def find_all_active(self) -> list[LogicalFlow]:
        return self._fetch(self._base_query().where(NOT_REMOVED))

    def find_active_by_flow_ids(self, flow_ids: Collection[int]) -> list[LogicalFlow]:
        if not flow_ids:
            return []
        return self._fetch(self._base_query().where(_flow.c.id.in_(sorted(flow_ids)), NOT_REMOVED))

    def find_all_by_flow_ids(self, flow_ids: Collection[int]) -> list[LogicalFlow]:
        if not flow_ids:
            return []
        return self._fetch(self._base_query().where(_flow.c.id.in_(sorted(flow_ids))))

    def find_by_selector(self, selector: Select[Any]) -> list[LogicalFlow]:
        """Return flows whose id is produced by ``selector``, whatever their status."""

        return self._fetch(self._base_query().where(_flow.c.id.in_(selector)))

    # -- lifecycle -----------------------------------------------------------

    def remove_flow(self, flow_id: int, user: str) -> int:
        stmt = (
            update(_flow)
            .where(_flow.c.id == flow_id, NOT_REMOVED)
            .values(
                entity_lifecycle_status=_REMOVED,
                is_removed=True,
                last_updated_at=self._clock(),
                last_updated_by=user,
            )
        )
        return self._execute_update(stmt)

    def restore_flow(self, flow_id: int, user: str) -> bool:
        stmt = _restore_statement(user, self._clock()).where(_flow.c.id == flow_id)
        return self._execute_update(stmt) == 1

    def add_flow(self, flow: LogicalFlow) -> LogicalFlow:
        """Restore the flow with the same endpoints if one exists, else insert it.

        ``flow.id`` is ignored. The restore is always attempted first.
        """

        if self._restore_by_endpoints(flow.source, flow.target, flow.last_updated_by):
            restored = self.get_by_source_and_target(flow.source, flow.target)
            if restored is None:
                raise RuntimeError(f"Restored flow {flow.source} -> {flow.target} is not active")
            return restored
        return self._insert(flow)

    def add_flows(self, flows: Sequence[LogicalFlow], user: str) -> list[LogicalFlow]:
        """Restore removed flows matching the batch and insert the rest.

        Returns the inserted flows followed by the restored ones.
        """

        if not flows:
            return []
        matches_removed = or_(
            *(and_(_is_source(flow.source), _is_target(flow.target), IS_REMOVED) for flow in flows)
        )
        removed = self._fetch(self._base_query().where(matches_removed))

        now = self._clock()
        if removed:
            self._restore_by_ids([flow.id for flow in removed if flow.id is not None], user, now)

        restored_by_pair = index_by_endpoints(removed)
        added = [self._insert(flow) for flow in exclude_matching(flows, restored_by_pair)]
        return added + [flow.restored(by=user, at=now) for flow in removed]

    # -- reconciliation ------------------------------------------------------

    def cleanup_orphans(self) -> int:
        app_ids = self._active_application_ids
        source_app_not_found = and_(
            _flow.c.source_entity_kind == EntityKind.APPLICATION,
            _flow.c.source_entity_id.not_in(app_ids),
        )
        target_app_not_found = and_(
            _flow.c.target_entity_kind == EntityKind.APPLICATION,
            _flow.c.target_entity_id.not_in(app_ids),
        )
        requiring_cleanup = and_(
            _flow.c.entity_lifecycle_status != _REMOVED,
            or_(source_app_not_found, target_app_not_found),
        )
        return self._mark_removed(
            requiring_cleanup,
            sweep="cleanup_orphans",
            reason="one or both endpoints no longer exist",
        )

    def cleanup_self_referencing_flows(self) -> int:
        # TODO(flows): compare source kind with target kind; the target kind is
        # compared with itself, so any flow with equal ids matches.
        self_referencing = and_(
            _flow.c.source_entity_id == _flow.c.target_entity_id,
            _flow.c.target_entity_kind == _flow.c.target_entity_kind,
        )
        requiring_cleanup = and_(_flow.c.entity_lifecycle_status != _REMOVED, self_referencing)
        return self._mark_removed(
            requiring_cleanup,
            sweep="cleanup_self_referencing_flows",
            reason="source and target are the same entity",
        )

    # -- helpers -------------------------------------------------------------

    def _base_query(self) -> Select[Any]:
        return select(_flow, SOURCE_NAME, TARGET_NAME)

    def _fetch(self, stmt: Select[Any]) -> list[LogicalFlow]:
        rows = self.session.execute(stmt.order_by(_flow.c.id)).mappings()
        return [flow_from_row(row) for row in rows]

    def _execute_update(self, stmt: Update) -> int:
        result = cast("CursorResult[Any]", self.session.execute(stmt))
        return result.rowcount

    def _insert(self, flow: LogicalFlow) -> LogicalFlow:
        record = flow.with_created_defaults()
        result = cast(
            "CursorResult[Any]",
            self.session.execute(insert(_flow).values(**flow_to_values(record))),
        )
        flow_id = result.inserted_primary_key[0]
        return record.with_id(int(flow_id))

    def _restore_by_endpoints(
        self, source: EntityReference, target: EntityReference, user: str
    ) -> bool:
        stmt = _restore_statement(user, self._clock()).where(_is_source(source), _is_target(target))
        return self._execute_update(stmt) > 0

    def _restore_by_ids(self, flow_ids: list[int], user: str, at: datetime) -> int:
        if not flow_ids:
            return 0
        stmt = _restore_statement(user, at).where(_flow.c.id.in_(flow_ids))
        return self._execute_update(stmt)

    def _mark_removed(self, condition: ColumnElement[bool], *, sweep: str, reason: str) -> int:
        flow_ids = list(
            self.session.execute(
                select(_flow.c.id).where(condition).order_by(_flow.c.id)
            ).scalars()
        )
        log.info(
            "Logical flow %s. The following flows will be marked as removed as %s: %s",
            sweep,
            reason,
            flow_ids,
        )
        stmt = (
            update(_flow)
            .where(condition)
            .values(entity_lifecycle_status=_REMOVED, is_removed=True)
        )
        return self._execute_update(stmt)


def _is_source(ref: EntityReference) -> ColumnElement[bool]:
    return and_(_flow.c.source_entity_id == ref.id, _flow.c.source_entity_kind == ref.kind)


def _is_target(ref: EntityReference) -> ColumnElement[bool]:
    return and_(_flow.c.target_entity_id == ref.id, _flow.c.target_entity_kind == ref.kind)


def _restore_statement(user: str, at: datetime) -> Update:
    return update(_flow).values(
        entity_lifecycle_status=_ACTIVE,
        is_removed=False,
        last_updated_by=user,
        last_updated_at=at,
    )


if TYPE_CHECKING:
    from flowregistry.domain.ports.persistence import LogicalFlowRepository

    _session_stub = cast("Session", object())
    _repo_check: LogicalFlowRepository = SqlAlchemyLogicalFlowRepository(_session_stub)
