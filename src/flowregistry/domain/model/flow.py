"""Logical flows: directed edges between entities with a soft-delete lifecycle.

Flows are immutable snapshots. Lifecycle changes produce new snapshots that
the repository persists explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from .enums import LifecycleStatus

if TYPE_CHECKING:
    from .reference import EntityIdentity, EntityReference

DEFAULT_PROVENANCE: Final[str] = "manual"


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True, slots=True)
class UserTimestamp:
    by: str
    at: datetime


@dataclass(frozen=True, kw_only=True)
class LogicalFlow:
    source: EntityReference
    target: EntityReference
    last_updated_by: str
    last_updated_at: datetime = field(default_factory=utcnow)
    id: int | None = None
    lifecycle_status: LifecycleStatus = LifecycleStatus.ACTIVE
    last_attested_by: str | None = None
    last_attested_at: datetime | None = None
    created: UserTimestamp | None = None
    provenance: str = DEFAULT_PROVENANCE

    @property
    def is_removed(self) -> bool:
        """Legacy boolean view of the lifecycle status."""
        return self.lifecycle_status is LifecycleStatus.REMOVED

    @property
    def endpoints(self) -> tuple[EntityIdentity, EntityIdentity]:
        return (self.source.identity, self.target.identity)

    def with_id(self, flow_id: int) -> LogicalFlow:
        return replace(self, id=flow_id)

    def with_created_defaults(self) -> LogicalFlow:
        """Return a snapshot whose ``created`` falls back to the last update."""
        if self.created is not None:
            return self
        return replace(self, created=UserTimestamp(by=self.last_updated_by, at=self.last_updated_at))

    def restored(self, *, by: str, at: datetime) -> LogicalFlow:
        return replace(
            self,
            lifecycle_status=LifecycleStatus.ACTIVE,
            last_updated_by=by,
            last_updated_at=at,
        )
