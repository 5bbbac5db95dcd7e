"""Typed references to architectural entities."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import EntityKind

type EntityIdentity = tuple[EntityKind, int]


@dataclass(frozen=True, slots=True)
class EntityReference:
    """Identity of an entity (kind + id).

    ``name`` is a display convenience resolved at read time and takes no part
    in equality or hashing.
    """

    kind: EntityKind
    id: int
    name: str | None = field(default=None, compare=False)

    @property
    def identity(self) -> EntityIdentity:
        return (self.kind, self.id)

    @classmethod
    def parse(cls, value: str) -> EntityReference:
        """Build a reference from ``KIND:ID`` text, e.g. ``APPLICATION:12``."""

        kind_text, sep, id_text = value.strip().partition(":")
        if not sep:
            raise ValueError(f"Invalid entity reference (expected KIND:ID): {value}")
        try:
            kind = EntityKind(kind_text.strip().upper())
        except ValueError as exc:
            raise ValueError(f"Unknown entity kind: {kind_text}") from exc
        try:
            entity_id = int(id_text)
        except ValueError as exc:
            raise ValueError(f"Invalid entity id: {id_text}") from exc
        return cls(kind=kind, id=entity_id)

    def __str__(self) -> str:
        return f"{self.kind}:{self.id}"
