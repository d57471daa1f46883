"""Transaction boundary around the registry repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from housing_registry.domain.ports.persistence import (
        ApartmentRepository,
        HouseRepository,
        ResidentRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Repositories sharing one session or connection."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Scope in which repositories read and write.

    ``commit`` can be called repeatedly; writes committed before a later failure stay.
    Leaving the block with an exception discards only the uncommitted writes.
    """

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True, frozen=True)
class RegistryRepositories(RepositoryCollection):
    houses: HouseRepository
    apartments: ApartmentRepository
    residents: ResidentRepository


type RegistryUnitOfWork = UnitOfWork[RegistryRepositories]
