"""SQLAlchemy adapter package for flowregistry."""

from __future__ import annotations

from .mappings import (
    active_application_id_selector,
    actor_table,
    application_table,
    logical_flow_table,
    metadata,
)
from .names import entity_name_field
from .repositories import SqlAlchemyLogicalFlowRepository
from .unit_of_work import SqlAlchemyFlowUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyFlowUnitOfWork",
    "SqlAlchemyLogicalFlowRepository",
    "active_application_id_selector",
    "actor_table",
    "application_table",
    "entity_name_field",
    "logical_flow_table",
    "metadata",
    "shutdown",
    "startup",
]
