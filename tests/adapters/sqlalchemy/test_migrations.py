from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import inspect

from flowregistry.adapters.sqlalchemy.migrations import upgrade_head

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_upgrade_head_creates_flow_schema(sqlite_engine: Engine) -> None:
    inspector = inspect(sqlite_engine)

    assert {"logical_flow", "application", "actor", "alembic_version"} <= set(
        inspector.get_table_names()
    )
    indexes = {index["name"]: index for index in inspector.get_indexes("logical_flow")}
    assert indexes["uq_logical_flow_active_pair"]["unique"]
    assert "ix_logical_flow_target" in indexes


def test_upgrade_head_is_repeatable(sqlite_engine: Engine) -> None:
    upgrade_head(engine=sqlite_engine)

    assert "logical_flow" in inspect(sqlite_engine).get_table_names()
