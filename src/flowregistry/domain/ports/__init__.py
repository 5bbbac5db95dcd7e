"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import EndpointPair, LogicalFlowRepository
from .unit_of_work import (
    FlowRepositories,
    FlowUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "EndpointPair",
    "FlowRepositories",
    "FlowUnitOfWork",
    "LogicalFlowRepository",
    "RepositoryCollection",
    "UnitOfWork",
]
