from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from flowregistry.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyFlowUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from tests.helpers.flows import app_ref, make_flow

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_flow_unit_of_work_requires_startup() -> None:
    assert is_started() is False
    with pytest.raises(StartupError):
        SqlAlchemyFlowUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_unit_of_work_commits_flows(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyFlowUnitOfWork() as uow:
        stored = uow.repositories.logical_flows.add_flow(make_flow(app_ref(1), app_ref(2)))
        uow.commit()

    with SqlAlchemyFlowUnitOfWork() as uow:
        assert stored.id is not None
        reloaded = uow.repositories.logical_flows.get_by_flow_id(stored.id)
        assert reloaded == stored


def test_unit_of_work_rolls_back_on_error(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError), SqlAlchemyFlowUnitOfWork() as uow:
        uow.repositories.logical_flows.add_flow(make_flow(app_ref(1), app_ref(2)))
        raise RuntimeError("boom")

    with SqlAlchemyFlowUnitOfWork() as uow:
        assert uow.repositories.logical_flows.find_all_active() == []


def test_repositories_unavailable_outside_context(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyFlowUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories
