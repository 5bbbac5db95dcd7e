"""Read-time name resolution for flow endpoints.

Names are looked up inline, as correlated sub-selects inside the query that
reads the flows, and are never written to the flow table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from sqlalchemy import case, null, select

from flowregistry.adapters.sqlalchemy.mappings import NAME_TABLES
from flowregistry.domain.model import EntityKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import ColumnElement

NAMED_KINDS: Final[tuple[EntityKind, ...]] = (EntityKind.APPLICATION, EntityKind.ACTOR)


def entity_name_field(
    id_column: ColumnElement[Any],
    kind_column: ColumnElement[Any],
    kinds: Iterable[EntityKind] = NAMED_KINDS,
) -> ColumnElement[Any]:
    """Return a column expression yielding the display name of a typed reference.

    Kinds without a name table (or not listed in ``kinds``) resolve to NULL.
    """

    whens: list[tuple[ColumnElement[bool], Any]] = []
    for kind in kinds:
        table = NAME_TABLES.get(kind)
        if table is None:
            continue
        name_lookup = (
            select(table.c.name)
            .where(table.c.id == id_column)
            .correlate_except(table)
            .scalar_subquery()
        )
        whens.append((kind_column == kind, name_lookup))
    if not whens:
        return null()
    return case(*whens, else_=null())
