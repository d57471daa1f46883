"""Public domain model surface."""

from __future__ import annotations

from housing_registry.domain.model.entity import Entity
from housing_registry.domain.model.housing import Apartment, House, Resident
from housing_registry.domain.model.views import ResidentListing, ResidentPage

__all__ = [
    "Apartment",
    "Entity",
    "House",
    "Resident",
    "ResidentListing",
    "ResidentPage",
]
