"""Read-only projections assembled from joined rows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, slots=True, kw_only=True)
class ResidentListing:
    """A resident joined with its apartment and house.

    Apartment and house fields are ``None`` when the join could not be made.
    """

    resident_id: int
    first_name: str
    last_name: str
    phone: str
    move_in_date: date | None
    apartment_id: int | None = None
    apartment_num: int | None = None
    floor: int | None = None
    microdistrict: str | None = None
    house_number: str | None = None


@dataclass(frozen=True, slots=True)
class ResidentPage:
    """One page of a resident search together with the unpaged total."""

    items: tuple[ResidentListing, ...]
    total: int
    page: int
    page_size: int
