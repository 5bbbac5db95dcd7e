"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Kinds of architectural entity a flow endpoint may reference."""

    APPLICATION = "APPLICATION"
    ACTOR = "ACTOR"
    END_USER_APPLICATION = "END_USER_APPLICATION"


class LifecycleStatus(StrEnum):
    ACTIVE = "ACTIVE"
    REMOVED = "REMOVED"

    @classmethod
    def read(cls, value: str | None, *, default: LifecycleStatus | None = None) -> LifecycleStatus:
        """Parse a stored status, falling back to ``default`` (ACTIVE) for unknown values."""

        fallback = default or cls.ACTIVE
        if value is None:
            return fallback
        try:
            return cls(value)
        except ValueError:
            return fallback
