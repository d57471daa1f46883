"""Apartment layout for freshly created houses."""

from __future__ import annotations

from typing import Final

from housing_registry.domain.model import Apartment

UNITS_PER_FLOOR: Final[int] = 6


def generate_grid(
    house_id: int,
    floors_count: int,
    units_per_floor: int = UNITS_PER_FLOOR,
) -> list[Apartment]:
    """Return the full apartment set of a house in floor-major order.

    Apartment numbers restart at 1 on every floor. The caller must only use this for
    a house that has no apartments yet; existing rows are not consulted.
    """

    if floors_count <= 0:
        raise ValueError("floors_count must be a positive integer")
    if units_per_floor <= 0:
        raise ValueError("units_per_floor must be a positive integer")

    return [
        Apartment(house_id=house_id, floor=floor, apartment_num=unit)
        for floor in range(1, floors_count + 1)
        for unit in range(1, units_per_floor + 1)
    ]
