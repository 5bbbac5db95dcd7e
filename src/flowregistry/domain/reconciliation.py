"""Reconciliation sweeps over stored logical flows.

Sweeps are stateless and safe to re-run: a flow already marked REMOVED is not
matched again, so a repeated sweep with no intervening change affects no rows.
Scheduling is left to the caller (cron, operator, CLI).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from flowregistry.domain.ports.persistence import LogicalFlowRepository
    from flowregistry.domain.ports.unit_of_work import FlowUnitOfWork

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Rows transitioned to REMOVED by each sweep."""

    orphans: int
    self_references: int

    @property
    def total(self) -> int:
        return self.orphans + self.self_references


def cleanup_orphan_flows(*, unit_of_work_factory: Callable[[], FlowUnitOfWork]) -> int:
    """Mark flows whose application endpoint is no longer active as REMOVED."""

    return _run_sweep(
        "orphan",
        lambda repository: repository.cleanup_orphans(),
        unit_of_work_factory,
    )


def cleanup_self_referencing_flows(*, unit_of_work_factory: Callable[[], FlowUnitOfWork]) -> int:
    """Mark flows whose source and target ids coincide as REMOVED."""

    return _run_sweep(
        "self-reference",
        lambda repository: repository.cleanup_self_referencing_flows(),
        unit_of_work_factory,
    )


def run_reconciliation(
    *, unit_of_work_factory: Callable[[], FlowUnitOfWork]
) -> ReconciliationResult:
    """Run every sweep, orphans first, each in its own unit of work."""

    orphans = cleanup_orphan_flows(unit_of_work_factory=unit_of_work_factory)
    self_references = cleanup_self_referencing_flows(unit_of_work_factory=unit_of_work_factory)
    return ReconciliationResult(orphans=orphans, self_references=self_references)


def _run_sweep(
    name: str,
    sweep: Callable[[LogicalFlowRepository], int],
    unit_of_work_factory: Callable[[], FlowUnitOfWork],
) -> int:
    with unit_of_work_factory() as uow:
        affected = sweep(uow.repositories.logical_flows)
        uow.commit()

    if affected:
        log.info("Logical flow %s cleanup marked %s flow(s) as removed", name, affected)
    else:
        log.info("Logical flow %s cleanup: nothing to clean up", name)
    return affected
