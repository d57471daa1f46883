"""Engine lifecycle and the SQLAlchemy unit of work for the registry.

``startup`` binds one engine per process and creates the schema. Each
``SqlAlchemyUnitOfWork`` then opens its own session from that engine when entered
and closes it on exit. ``commit`` may be called many times inside one unit of work;
every call makes the writes so far durable.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from housing_registry.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from housing_registry.adapters.sqlalchemy.repositories import (
    SqlAlchemyApartmentRepository,
    SqlAlchemyHouseRepository,
    SqlAlchemyResidentRepository,
    store_errors,
)
from housing_registry.config.storage import get_database_config
from housing_registry.domain.ports.unit_of_work import RegistryRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used out of order (before startup, twice, outside ``with``)."""


class _Binding:
    """The engine bound by ``startup`` and the session factory built on it."""

    def __init__(self) -> None:
        self.engine: Engine | None = None
        self._sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine | None) -> None:
        self.engine = engine
        self._sessions = (
            None if engine is None else sessionmaker(bind=engine, expire_on_commit=False)
        )

    def sessions(self) -> sessionmaker[Session]:
        if self._sessions is None:
            raise StartupError(
                "No registry database is bound; call "
                "housing_registry.adapters.sqlalchemy.startup() first"
            )
        return self._sessions


_BINDING = _Binding()


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: object) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the registry to a database and make sure its tables exist.

    Without ``engine`` the URI comes from ``database_uri`` or the environment.
    Rebinding an already started adapter requires ``force=True``.
    """

    if _BINDING.engine is not None and not force:
        raise StartupError("Registry database already bound; pass force=True to rebind")

    if engine is None:
        config = get_database_config()
        engine = create_engine(database_uri or config.uri, echo=config.echo)
    if engine.dialect.name == "sqlite" and not event.contains(
        engine, "connect", _enable_sqlite_foreign_keys
    ):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    start_mappers()
    create_all_tables(engine)
    _BINDING.bind(engine)
    log.info("Registry database bound to %s", engine.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _BINDING.engine


def is_started() -> bool:
    return _BINDING.engine is not None


def shutdown() -> None:
    """Dispose the bound engine, if any, and forget it."""

    if _BINDING.engine is not None:
        _BINDING.engine.dispose()
    _BINDING.bind(None)


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """One session per ``with`` block; subclasses decide which repositories it serves."""

    def __init__(self) -> None:
        self._sessions = _BINDING.sessions()
        self._session: Session | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._sessions()
        self._repositories = self._build_repositories(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open; use it in a with-block")
        return self._session

    @property
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open; use it in a with-block")
        return self._repositories

    def commit(self) -> None:
        session = self.session
        try:
            with store_errors("commit"):
                session.commit()
        except Exception:
            session.rollback()
            raise

    def rollback(self) -> None:
        self.session.rollback()


class SqlAlchemyUnitOfWork(BaseSqlAlchemyUnitOfWork[RegistryRepositories]):
    def _build_repositories(self, session: Session) -> RegistryRepositories:
        return RegistryRepositories(
            houses=SqlAlchemyHouseRepository(session),
            apartments=SqlAlchemyApartmentRepository(session),
            residents=SqlAlchemyResidentRepository(session),
        )


if TYPE_CHECKING:
    from housing_registry.domain.ports.unit_of_work import RegistryUnitOfWork

    _uow_check: RegistryUnitOfWork = SqlAlchemyUnitOfWork()
