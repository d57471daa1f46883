"""Find-or-create resolution of the house and apartment behind an import row."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from housing_registry.domain.errors import MultipleMatchError
from housing_registry.domain.model import Apartment, House

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from housing_registry.domain.ports.unit_of_work import RegistryUnitOfWork

log = logging.getLogger(__name__)


def single_or_none[T](
    matches: Sequence[T],
    entity: str,
    criteria: Mapping[str, object],
) -> T | None:
    """Narrow a natural-key lookup to zero or one row.

    More than one row means the uniqueness invariant is broken in the store; that is
    reported rather than resolved to the first match.
    """

    if not matches:
        return None
    if len(matches) > 1:
        raise MultipleMatchError(entity, criteria, len(matches))
    return matches[0]


@dataclass(slots=True)
class HierarchyResolver:
    """Resolve ``(microdistrict, house_number, apartment_num)`` to an apartment id.

    Missing houses and apartments are created and committed immediately, so they stay
    in the store even if the caller's next write fails and are visible to the lookups
    of later rows.
    """

    uow: RegistryUnitOfWork
    imported_house_floors: int | None = None
    houses_created: int = 0
    apartments_created: int = 0

    def resolve(
        self,
        microdistrict: str,
        house_number: str,
        apartment_num: int,
        floor: int,
    ) -> int:
        house_id = self._resolve_house(microdistrict, house_number)
        return self._resolve_apartment(house_id, apartment_num, floor)

    def _resolve_house(self, microdistrict: str, house_number: str) -> int:
        repositories = self.uow.repositories
        existing = single_or_none(
            repositories.houses.find(microdistrict, house_number),
            "house",
            {"microdistrict": microdistrict, "house_number": house_number},
        )
        if existing is not None:
            return existing.require_id()

        house = repositories.houses.add(
            House(
                microdistrict=microdistrict,
                house_number=house_number,
                floors_count=self.imported_house_floors,
            )
        )
        self.uow.commit()
        self.houses_created += 1
        log.debug("Created house %s/%s (id=%s)", microdistrict, house_number, house.id)
        return house.require_id()

    def _resolve_apartment(self, house_id: int, apartment_num: int, floor: int) -> int:
        repositories = self.uow.repositories
        existing = single_or_none(
            repositories.apartments.find(house_id, apartment_num),
            "apartment",
            {"house_id": house_id, "apartment_num": apartment_num},
        )
        if existing is not None:
            return existing.require_id()

        apartment = repositories.apartments.add(
            Apartment(house_id=house_id, floor=floor, apartment_num=apartment_num)
        )
        self.uow.commit()
        self.apartments_created += 1
        log.debug(
            "Created apartment %s on floor %s in house %s (id=%s)",
            apartment_num,
            floor,
            house_id,
            apartment.id,
        )
        return apartment.require_id()
