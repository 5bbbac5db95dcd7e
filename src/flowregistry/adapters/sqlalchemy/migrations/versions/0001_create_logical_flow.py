"""Create logical flow and reference entity tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_ENTITY_KINDS = ("APPLICATION", "ACTOR", "END_USER_APPLICATION")
_ACTIVE_PAIR = sa.text("entity_lifecycle_status != 'REMOVED'")


def _kind_type() -> sa.Enum:
    return sa.Enum(*_ENTITY_KINDS, name="entitykind", native_enum=False, length=64)


def upgrade() -> None:
    op.create_table(
        "application",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_removed", sa.Boolean(), nullable=False),
        sa.Column("entity_lifecycle_status", sa.String(length=64), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_application")),
    )
    op.create_table(
        "actor",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_actor")),
    )
    op.create_table(
        "logical_flow",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("source_entity_kind", _kind_type(), nullable=False),
        sa.Column("source_entity_id", sa.Integer(), nullable=False),
        sa.Column("target_entity_kind", _kind_type(), nullable=False),
        sa.Column("target_entity_id", sa.Integer(), nullable=False),
        sa.Column("entity_lifecycle_status", sa.String(length=64), nullable=False),
        sa.Column("is_removed", sa.Boolean(), nullable=False),
        sa.Column("last_updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_updated_by", sa.String(length=255), nullable=False),
        sa.Column("last_attested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_attested_by", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=False),
        sa.Column("provenance", sa.String(length=64), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_logical_flow")),
    )
    op.create_index(
        "uq_logical_flow_active_pair",
        "logical_flow",
        ["source_entity_kind", "source_entity_id", "target_entity_kind", "target_entity_id"],
        unique=True,
        sqlite_where=_ACTIVE_PAIR,
        postgresql_where=_ACTIVE_PAIR,
    )
    op.create_index(
        "ix_logical_flow_target",
        "logical_flow",
        ["target_entity_kind", "target_entity_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_logical_flow_target", table_name="logical_flow")
    op.drop_index("uq_logical_flow_active_pair", table_name="logical_flow")
    op.drop_table("logical_flow")
    op.drop_table("actor")
    op.drop_table("application")
