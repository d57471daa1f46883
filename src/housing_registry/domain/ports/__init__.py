"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    ApartmentRepository,
    HouseRepository,
    Repository,
    ResidentRepository,
)
from .unit_of_work import (
    RegistryRepositories,
    RegistryUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ApartmentRepository",
    "HouseRepository",
    "RegistryRepositories",
    "RegistryUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "ResidentRepository",
    "UnitOfWork",
]
