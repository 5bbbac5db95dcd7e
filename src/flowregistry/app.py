"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from flowregistry.adapters.flow_file import load_flow_file, translate_flow_file
from flowregistry.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyFlowUnitOfWork,
    is_started,
    startup,
)
from flowregistry.domain import reconciliation
from flowregistry.domain.ports.unit_of_work import FlowUnitOfWork

if TYPE_CHECKING:
    from pathlib import Path

    from flowregistry.domain.model import EntityReference, LogicalFlow
    from flowregistry.domain.reconciliation import ReconciliationResult

UnitOfWorkFactory = Callable[[], FlowUnitOfWork]


log = getLogger(__name__)


def _resolve_unit_of_work(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyFlowUnitOfWork


def import_flows(
    path: Path,
    *,
    user: str,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[LogicalFlow]:
    """Add every flow in a JSON import document, restoring removed ones."""

    document = load_flow_file(path)
    flows = translate_flow_file(document, user=user)
    effective_uow = _resolve_unit_of_work(unit_of_work_factory)
    log.info("Importing %s flow(s) from %s as %s", len(flows), path, user)

    with effective_uow() as uow:
        stored = uow.repositories.logical_flows.add_flows(flows, user)
        uow.commit()

    log.info("Finished flow import: stored=%s", len(stored))
    return stored


def remove_flow(
    flow_id: int,
    *,
    user: str,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> bool:
    """Soft-delete a flow; returns whether an active flow was removed."""

    effective_uow = _resolve_unit_of_work(unit_of_work_factory)
    with effective_uow() as uow:
        removed = uow.repositories.logical_flows.remove_flow(flow_id, user)
        uow.commit()

    if not removed:
        log.info("No active flow with id %s to remove", flow_id)
    return removed == 1


def restore_flow(
    flow_id: int,
    *,
    user: str,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> bool:
    """Reactivate a flow by id; returns whether it was restored."""

    effective_uow = _resolve_unit_of_work(unit_of_work_factory)
    with effective_uow() as uow:
        restored = uow.repositories.logical_flows.restore_flow(flow_id, user)
        uow.commit()

    if not restored:
        log.info("No flow with id %s to restore", flow_id)
    return restored


def list_flows(
    reference: EntityReference,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[LogicalFlow]:
    """Return the active flows where ``reference`` is the source or the target."""

    effective_uow = _resolve_unit_of_work(unit_of_work_factory)
    with effective_uow() as uow:
        return uow.repositories.logical_flows.find_by_entity_reference(reference)


def cleanup_orphan_flows(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> int:
    return reconciliation.cleanup_orphan_flows(
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory)
    )


def cleanup_self_referencing_flows(
    *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> int:
    return reconciliation.cleanup_self_referencing_flows(
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory)
    )


def reconcile(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> ReconciliationResult:
    """Run all reconciliation sweeps."""

    result = reconciliation.run_reconciliation(
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory)
    )
    log.info(
        "Finished reconciliation: orphans=%s, self_references=%s",
        result.orphans,
        result.self_references,
    )
    return result
