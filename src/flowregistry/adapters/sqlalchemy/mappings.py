"""SQLAlchemy table metadata for logical flows and the entities they reference."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
    and_,
    select,
    text,
)

from flowregistry.domain.model import EntityKind, LifecycleStatus

if TYPE_CHECKING:
    from sqlalchemy import Select


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


def _kind_type() -> Enum:
    return Enum(EntityKind, native_enum=False, length=64)


# Statuses are stored as plain strings and parsed leniently on read.
def _status_type() -> String:
    return String(64)


# The active-pair index only covers rows that are not REMOVED, so any number of
# removed rows may share a pair while at most one active row can.
ACTIVE_PAIR_PREDICATE = text("entity_lifecycle_status != 'REMOVED'")

logical_flow_table = Table(
    "logical_flow",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("source_entity_kind", _kind_type(), nullable=False),
    Column("source_entity_id", Integer, nullable=False),
    Column("target_entity_kind", _kind_type(), nullable=False),
    Column("target_entity_id", Integer, nullable=False),
    Column("entity_lifecycle_status", _status_type(), nullable=False),
    Column("is_removed", Boolean, nullable=False, default=False),
    Column("last_updated_at", UTCDateTime(), nullable=False),
    Column("last_updated_by", String(255), nullable=False),
    Column("last_attested_at", UTCDateTime(), nullable=True),
    Column("last_attested_by", String(255), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("created_by", String(255), nullable=False),
    Column("provenance", String(64), nullable=False),
    Index(
        "uq_logical_flow_active_pair",
        "source_entity_kind",
        "source_entity_id",
        "target_entity_kind",
        "target_entity_id",
        unique=True,
        sqlite_where=ACTIVE_PAIR_PREDICATE,
        postgresql_where=ACTIVE_PAIR_PREDICATE,
    ),
    Index("ix_logical_flow_target", "target_entity_kind", "target_entity_id"),
)

# Reference tables -------------------------------------------------------------
# Owned and maintained by other components; read here for name resolution and
# orphan detection only.

application_table = Table(
    "application",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("is_removed", Boolean, nullable=False, default=False),
    Column(
        "entity_lifecycle_status",
        _status_type(),
        nullable=False,
        default=LifecycleStatus.ACTIVE.value,
    ),
)

actor_table = Table(
    "actor",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
)

NAME_TABLES: dict[EntityKind, Table] = {
    EntityKind.APPLICATION: application_table,
    EntityKind.ACTOR: actor_table,
}


def active_application_id_selector() -> Select[Any]:
    """Sub-select of the ids of applications that are currently active."""

    return select(application_table.c.id).where(
        and_(
            application_table.c.is_removed.is_(False),
            application_table.c.entity_lifecycle_status == LifecycleStatus.ACTIVE.value,
        )
    )

