"""SQLAlchemy adapter package for the housing registry."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyApartmentRepository,
    SqlAlchemyHouseRepository,
    SqlAlchemyResidentRepository,
    store_errors,
)
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyApartmentRepository",
    "SqlAlchemyHouseRepository",
    "SqlAlchemyResidentRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
    "store_errors",
]
