"""Public domain model surface."""

from __future__ import annotations

from flowregistry.domain.model.enums import EntityKind, LifecycleStatus
from flowregistry.domain.model.flow import (
    DEFAULT_PROVENANCE,
    LogicalFlow,
    UserTimestamp,
    utcnow,
)
from flowregistry.domain.model.reference import EntityIdentity, EntityReference

__all__ = [  # noqa: RUF022
    # enums
    "EntityKind",
    "LifecycleStatus",
    # references
    "EntityIdentity",
    "EntityReference",
    # flows
    "DEFAULT_PROVENANCE",
    "LogicalFlow",
    "UserTimestamp",
    "utcnow",
]
