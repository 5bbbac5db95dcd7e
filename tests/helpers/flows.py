"""Reusable builders and fakes for logical-flow tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import func, insert, select

from flowregistry.adapters.sqlalchemy.mappings import (
    actor_table,
    application_table,
    logical_flow_table,
)
from flowregistry.domain.model import EntityKind, EntityReference, LifecycleStatus, LogicalFlow
from flowregistry.domain.ports.unit_of_work import FlowRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.orm import Session


def app_ref(entity_id: int, name: str | None = None) -> EntityReference:
    return EntityReference(kind=EntityKind.APPLICATION, id=entity_id, name=name)


def actor_ref(entity_id: int, name: str | None = None) -> EntityReference:
    return EntityReference(kind=EntityKind.ACTOR, id=entity_id, name=name)


def make_flow(
    source: EntityReference,
    target: EntityReference,
    *,
    user: str = "alice",
    at: datetime | None = None,
    provenance: str = "manual",
) -> LogicalFlow:
    return LogicalFlow(
        source=source,
        target=target,
        last_updated_by=user,
        last_updated_at=at or datetime(2024, 1, 1, 12, 0, tzinfo=UTC),
        provenance=provenance,
    )


class FakeClock:
    """Deterministic UTC clock; each call returns the current instant."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


def insert_application(
    session: Session,
    app_id: int,
    name: str,
    *,
    is_removed: bool = False,
    status: LifecycleStatus = LifecycleStatus.ACTIVE,
) -> None:
    session.execute(
        insert(application_table).values(
            id=app_id,
            name=name,
            is_removed=is_removed,
            entity_lifecycle_status=status.value,
        )
    )


def insert_actor(session: Session, actor_id: int, name: str) -> None:
    session.execute(insert(actor_table).values(id=actor_id, name=name))


def count_flow_rows(session: Session) -> int:
    return session.execute(select(func.count()).select_from(logical_flow_table)).scalar_one()


class ExplodingSession:
    """Session stand-in that fails on any statement execution."""

    def execute(self, *_: Any, **__: Any) -> Any:
        raise AssertionError("store must not be queried")


class FakeLogicalFlowRepository:
    """In-memory stand-in for the reconciliation primitives of the flow repository."""

    def __init__(self, *, orphans: list[int] | None = None, self_refs: list[int] | None = None):
        self.pending_orphans = list(orphans or [])
        self.pending_self_refs = list(self_refs or [])
        self.calls: list[str] = []

    def cleanup_orphans(self) -> int:
        self.calls.append("cleanup_orphans")
        affected = len(self.pending_orphans)
        self.pending_orphans.clear()
        return affected

    def cleanup_self_referencing_flows(self) -> int:
        self.calls.append("cleanup_self_referencing_flows")
        affected = len(self.pending_self_refs)
        self.pending_self_refs.clear()
        return affected


class FakeFlowUnitOfWork:
    def __init__(self, repository: FakeLogicalFlowRepository) -> None:
        self.repositories = FlowRepositories(logical_flows=repository)  # type: ignore[arg-type]
        self.commits = 0
        self.rolled_back = False

    def __enter__(self) -> FakeFlowUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rolled_back = True
