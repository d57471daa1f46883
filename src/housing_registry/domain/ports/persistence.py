"""Ports for persisting the housing hierarchy.

Lookups by natural key return every matching row (callers narrow the result with
``single_or_none``); an empty list is the normal "not found" outcome. Adapters raise
``StoreError`` for any other failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from housing_registry.domain.model import Apartment, House, Resident

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from housing_registry.domain.model import ResidentListing


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> TEntity: ...


@runtime_checkable
class HouseRepository(Repository[House], Protocol):
    """Persistence contract for houses."""

    def find(self, microdistrict: str, house_number: str) -> Sequence[House]: ...

    def microdistricts(self) -> Sequence[str]: ...

    def in_microdistrict(self, microdistrict: str) -> Sequence[House]: ...


@runtime_checkable
class ApartmentRepository(Repository[Apartment], Protocol):
    """Persistence contract for apartments."""

    def get(self, apartment_id: int) -> Apartment | None: ...

    def find(self, house_id: int, apartment_num: int) -> Sequence[Apartment]: ...

    def add_all(self, apartments: Iterable[Apartment]) -> None: ...


@runtime_checkable
class ResidentRepository(Repository[Resident], Protocol):
    """Persistence contract for residents."""

    def remove(self, resident_id: int) -> None: ...

    def search(
        self,
        term: str | None = None,
        *,
        offset: int = 0,
        limit: int | None = None,
    ) -> Sequence[ResidentListing]: ...

    def count(self, term: str | None = None) -> int: ...

    def export_view(self) -> Sequence[ResidentListing]: ...
