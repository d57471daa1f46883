"""Housing hierarchy: houses own apartments, apartments own residents.

Microdistricts are not entities; they only exist as the ``microdistrict`` value
shared by houses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from housing_registry.domain.model.entity import Entity


@dataclass(eq=False, kw_only=True)
class House(Entity):
    microdistrict: str
    house_number: str
    # None for houses created by import, where the building height is unknown
    floors_count: int | None = None
    apartments: list[Apartment] = field(default_factory=list["Apartment"])

    def __post_init__(self) -> None:
        if self.floors_count is not None and self.floors_count <= 0:
            raise ValueError("floors_count must be a positive integer")

    def apartments_by_floor(self) -> dict[int, list[Apartment]]:
        """Group apartments by floor, both levels in ascending order."""

        grouped: dict[int, list[Apartment]] = {}
        for apartment in sorted(self.apartments, key=lambda a: (a.floor, a.apartment_num)):
            grouped.setdefault(apartment.floor, []).append(apartment)
        return grouped


@dataclass(eq=False, kw_only=True)
class Apartment(Entity):
    house_id: int
    floor: int
    apartment_num: int
    residents: list[Resident] = field(default_factory=list["Resident"])

    def __post_init__(self) -> None:
        if self.floor <= 0:
            raise ValueError("floor must be a positive integer")
        if self.apartment_num <= 0:
            raise ValueError("apartment_num must be a positive integer")

    @property
    def is_occupied(self) -> bool:
        return bool(self.residents)


@dataclass(eq=False, kw_only=True)
class Resident(Entity):
    apartment_id: int
    first_name: str
    last_name: str
    phone: str
    move_in_date: date | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
