"""Operator workflows on the housing hierarchy.

Every function works inside a unit of work opened by the caller and queries the
store directly; nothing here keeps houses or residents between calls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from housing_registry.domain.errors import DuplicateEntityError, NotFoundError
from housing_registry.domain.grid import generate_grid
from housing_registry.domain.importing.resolver import single_or_none
from housing_registry.domain.model import House, Resident, ResidentPage

if TYPE_CHECKING:
    from collections.abc import Sequence

    from housing_registry.domain.forms import HouseSubmission, ResidentSubmission
    from housing_registry.domain.ports.unit_of_work import RegistryUnitOfWork

log = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 5


def create_house(uow: RegistryUnitOfWork, submission: HouseSubmission) -> House:
    """Create a house and its full apartment grid.

    An existing house with the same microdistrict and number rejects the request
    before anything is written. The house and its grid are committed together, so a
    failing grid insert leaves no house behind once the unit of work rolls back.
    """

    repositories = uow.repositories
    existing = single_or_none(
        repositories.houses.find(submission.microdistrict, submission.house_number),
        "house",
        {"microdistrict": submission.microdistrict, "house_number": submission.house_number},
    )
    if existing is not None:
        raise DuplicateEntityError(
            f"House {submission.house_number!r} already exists in microdistrict "
            f"{submission.microdistrict!r}"
        )

    house = repositories.houses.add(
        House(
            microdistrict=submission.microdistrict,
            house_number=submission.house_number,
            floors_count=submission.floors_count,
        )
    )

    apartments = generate_grid(house.require_id(), submission.floors_count)
    repositories.apartments.add_all(apartments)
    uow.commit()
    log.info(
        "Created house %s/%s with %s apartments",
        house.microdistrict,
        house.house_number,
        len(apartments),
    )
    return house


def register_resident(
    uow: RegistryUnitOfWork,
    apartment_id: int,
    submission: ResidentSubmission,
) -> Resident:
    """Attach a new resident to an apartment.

    Occupied apartments are not refused; occupancy is the operator's call.
    """

    repositories = uow.repositories
    if repositories.apartments.get(apartment_id) is None:
        raise NotFoundError("apartment", apartment_id)

    resident = repositories.residents.add(
        Resident(
            apartment_id=apartment_id,
            first_name=submission.first_name,
            last_name=submission.last_name,
            phone=submission.phone,
            move_in_date=submission.move_in_date,
        )
    )
    uow.commit()
    log.info("Registered resident %s in apartment %s", resident.id, apartment_id)
    return resident


def evict_resident(uow: RegistryUnitOfWork, resident_id: int) -> None:
    uow.repositories.residents.remove(resident_id)
    uow.commit()
    log.info("Evicted resident %s", resident_id)


def list_microdistricts(uow: RegistryUnitOfWork) -> Sequence[str]:
    return uow.repositories.houses.microdistricts()


def load_microdistrict(uow: RegistryUnitOfWork, microdistrict: str) -> Sequence[House]:
    """Return the houses of a microdistrict with apartments and residents attached."""

    return uow.repositories.houses.in_microdistrict(microdistrict)


def search_residents(
    uow: RegistryUnitOfWork,
    term: str | None = None,
    *,
    page: int = 0,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ResidentPage:
    """Search residents by first name, last name or phone, one page at a time.

    ``page_size=0`` returns every match on a single page.
    """

    if page < 0:
        raise ValueError("page must not be negative")
    if page_size < 0:
        raise ValueError("page_size must not be negative")

    normalized = term.strip() if term else None
    repository = uow.repositories.residents
    if page_size == 0:
        items = repository.search(normalized or None)
    else:
        items = repository.search(normalized or None, offset=page * page_size, limit=page_size)
    return ResidentPage(
        items=tuple(items),
        total=repository.count(normalized or None),
        page=page,
        page_size=page_size,
    )
