from __future__ import annotations

import logging
from pathlib import Path

import pytest

from flowregistry.config import (
    StorageConfig,
    configure_logging,
    get_database_config,
    get_storage_config,
)


def test_database_uri_env_takes_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://localhost/flows")

    assert get_database_config().uri == "postgresql+psycopg://localhost/flows"


def test_database_uri_falls_back_to_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("FLOWREGISTRY_DATA_DIR", str(tmp_path / "data"))

    uri = get_database_config().uri

    assert uri == f"sqlite+pysqlite:///{(tmp_path / 'data').resolve() / 'flowregistry.db'}"
    assert (tmp_path / "data").is_dir()


def test_storage_config_uses_env_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("FLOWREGISTRY_DATA_DIR", str(tmp_path))

    assert get_storage_config().resolve_data_dir() == tmp_path.resolve()


def test_storage_config_database_path_without_creating(tmp_path: Path) -> None:
    storage = StorageConfig(data_dir=tmp_path / "missing", database_filename="test.db")

    path = storage.database_path(ensure=False)

    assert path == (tmp_path / "missing").resolve() / "test.db"
    assert not path.parent.exists()


def test_configure_logging_uses_terse_format(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(logging, "basicConfig", fake_basic_config)

    configure_logging(level=logging.DEBUG, force=True)

    assert captured["level"] == logging.DEBUG
    assert captured["force"] is True
    assert captured["format"] == "%(asctime)s %(levelname)s [%(name)s] %(message)s"
