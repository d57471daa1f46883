from __future__ import annotations

import pytest

from housing_registry.domain.model import Apartment, House


@pytest.mark.parametrize(("floor", "apartment_num"), [(0, 1), (1, 0), (2, -3)])
def test_apartment_rejects_non_positive_coordinates(floor: int, apartment_num: int) -> None:
    with pytest.raises(ValueError, match="positive"):
        Apartment(house_id=1, floor=floor, apartment_num=apartment_num)


def test_house_rejects_non_positive_floors_count() -> None:
    with pytest.raises(ValueError, match="floors_count"):
        House(microdistrict="Sunrise", house_number="5", floors_count=0)


def test_house_floors_count_is_optional() -> None:
    house = House(microdistrict="Sunrise", house_number="5")

    assert house.floors_count is None
    assert house.id is None
    with pytest.raises(ValueError, match="not been stored"):
        house.require_id()
