from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from flowregistry.adapters.sqlalchemy.migrations import upgrade_head
from flowregistry.adapters.sqlalchemy.repositories import SqlAlchemyLogicalFlowRepository
from flowregistry.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyFlowUnitOfWork,
    shutdown,
    startup,
)
from tests.helpers.flows import FakeClock

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=UTC))


@pytest.fixture
def flow_repository(sqlite_session: Session, clock: FakeClock) -> SqlAlchemyLogicalFlowRepository:
    return SqlAlchemyLogicalFlowRepository(sqlite_session, clock=clock)


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyFlowUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyFlowUnitOfWork:
        return SqlAlchemyFlowUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
