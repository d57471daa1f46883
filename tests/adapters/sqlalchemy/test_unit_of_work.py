from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError

from housing_registry.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from housing_registry.domain.errors import StoreError
from housing_registry.domain.model import House

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_before_startup_is_rejected() -> None:
    assert not is_started()

    with pytest.raises(StartupError, match="startup"):
        SqlAlchemyUnitOfWork()


def test_rebinding_needs_force() -> None:
    first = create_engine("sqlite+pysqlite:///:memory:")
    second = create_engine("sqlite+pysqlite:///:memory:")
    startup(engine=first)

    with pytest.raises(StartupError, match="force=True"):
        startup(engine=second)
    assert configured_engine() is first

    startup(engine=second, force=True)
    assert configured_engine() is second


def test_sqlite_engines_enforce_foreign_keys() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:")
    startup(engine=engine)

    with engine.connect() as connection:
        assert connection.exec_driver_sql("PRAGMA foreign_keys").scalar_one() == 1


def test_startup_from_database_uri() -> None:
    startup(database_uri="sqlite+pysqlite:///:memory:")

    assert is_started()


def test_repositories_require_an_open_session(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_unit_of_work_persists_houses(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyUnitOfWork() as uow:
        house = uow.repositories.houses.add(House(microdistrict="Sunrise", house_number="5"))
        uow.commit()
        house_id = house.require_id()

    with SqlAlchemyUnitOfWork() as uow:
        (stored,) = uow.repositories.houses.find("Sunrise", "5")
        assert stored.id == house_id


def test_uncommitted_work_is_rolled_back_on_error(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError), SqlAlchemyUnitOfWork() as uow:
        uow.repositories.houses.add(House(microdistrict="Sunrise", house_number="5"))
        raise RuntimeError("boom")

    with SqlAlchemyUnitOfWork() as uow:
        assert uow.repositories.houses.find("Sunrise", "5") == []


def test_commit_failure_is_reported_as_store_error(
    sqlite_engine: Engine, monkeypatch: pytest.MonkeyPatch
) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyUnitOfWork() as uow:

        def failing_commit() -> None:
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(uow.session, "commit", failing_commit)

        with pytest.raises(StoreError) as exc:
            uow.commit()

    assert exc.value.operation == "commit"
    assert "database is locked" in exc.value.message
