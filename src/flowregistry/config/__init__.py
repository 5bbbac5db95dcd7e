"""Application configuration helpers."""

from __future__ import annotations

from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DatabaseConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_storage_config",
]
