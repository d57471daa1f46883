from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from housing_registry.adapters.sqlalchemy.mappings import (
    apartment_table,
    house_table,
    resident_table,
)
from housing_registry.adapters.sqlalchemy.repositories import (
    SqlAlchemyApartmentRepository,
    SqlAlchemyResidentRepository,
)
from housing_registry.app import (
    add_house,
    evict,
    export_residents,
    find_residents,
    import_residents,
    import_residents_file,
    microdistrict_houses,
    register,
)
from housing_registry.config.csv_format import ExportConfig, ImportConfig
from housing_registry.domain.errors import DuplicateEntityError, StoreError
from housing_registry.domain.importing import OutcomeStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from sqlalchemy import Table
    from sqlalchemy.engine import Engine

    from housing_registry.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
    from housing_registry.domain.model import Apartment, Resident

pytestmark = pytest.mark.integration

HEADER = "first_name,last_name,phone,microdistrict,house_number,apartment_num,floor,move_in_date\n"


def _count(engine: Engine, table: Table) -> int:
    with engine.connect() as connection:
        return int(connection.execute(select(func.count()).select_from(table)).scalar_one())


def test_sunrise_import_creates_hierarchy(
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    lines = [HEADER, "Anna,Petrova,111,Sunrise,5,12,3,2024-03-01\n"]

    summary = import_residents(
        lines, unit_of_work_factory=sqlite_unit_of_work, config=ImportConfig()
    )

    assert summary.completed
    assert summary.inserted == 1
    (house,) = microdistrict_houses("Sunrise", unit_of_work_factory=sqlite_unit_of_work)
    assert house.floors_count is None
    (apartment,) = house.apartments
    assert (apartment.apartment_num, apartment.floor) == (12, 3)
    assert [r.full_name for r in apartment.residents] == ["Anna Petrova"]
    assert _count(sqlite_engine, resident_table) == 1


def test_import_file_with_skips(
    tmp_path: Path,
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    source = tmp_path / "residents.csv"
    source.write_text(
        HEADER
        + "Anna,Petrova,111,Sunrise,5,12,3,2024-03-01\n"
        + "Ivan,Sidorov,222,Sunrise,5,twelve,3,2024-03-01\n"
        + "Olga,Ivanova,333,Sunrise,5,12,3,01.04.2024\n",
        encoding="utf-8",
    )

    summary = import_residents_file(
        source, unit_of_work_factory=sqlite_unit_of_work, config=ImportConfig()
    )

    assert [o.status for o in summary.outcomes] == [
        OutcomeStatus.INSERTED,
        OutcomeStatus.SKIPPED,
        OutcomeStatus.INSERTED,
    ]
    assert _count(sqlite_engine, house_table) == 1
    assert _count(sqlite_engine, apartment_table) == 1
    assert _count(sqlite_engine, resident_table) == 2


def test_export_then_reimport_reuses_hierarchy(
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    lines = [
        HEADER,
        "Anna,Petrova,111,Sunrise,5,12,3,2024-03-01\n",
        'Boris,"Pet""rov",222,"North, 7",12,4,1,2023-11-20\n',
    ]
    import_residents(lines, unit_of_work_factory=sqlite_unit_of_work, config=ImportConfig())

    exported = export_residents(unit_of_work_factory=sqlite_unit_of_work, config=ExportConfig())
    summary = import_residents(
        exported.splitlines(keepends=True),
        unit_of_work_factory=sqlite_unit_of_work,
        config=ImportConfig(),
    )

    assert summary.inserted == 2
    assert (summary.houses_created, summary.apartments_created) == (0, 0)
    assert _count(sqlite_engine, house_table) == 2
    assert _count(sqlite_engine, resident_table) == 4
    page = find_residents("pet", page_size=0, unit_of_work_factory=sqlite_unit_of_work)
    assert sorted(item.last_name for item in page.items) == [
        "Pet\"rov",
        "Pet\"rov",
        "Petrova",
        "Petrova",
    ]


def test_store_failure_keeps_parents_and_earlier_residents(
    monkeypatch: pytest.MonkeyPatch,
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    original_add = SqlAlchemyResidentRepository.add
    calls = 0

    def nulling_add(self: SqlAlchemyResidentRepository, entity: Resident) -> Resident:
        nonlocal calls
        calls += 1
        if calls == 3:
            # violates resident.phone NOT NULL at flush time
            entity.phone = None  # type: ignore[assignment]
        return original_add(self, entity)

    monkeypatch.setattr(SqlAlchemyResidentRepository, "add", nulling_add)
    lines = [HEADER] + [
        f"Resident,{index},{index},Sunrise,{index},1,1,2024-03-01\n" for index in range(1, 6)
    ]

    summary = import_residents(
        lines, unit_of_work_factory=sqlite_unit_of_work, config=ImportConfig()
    )

    assert summary.abort is not None
    assert summary.abort.line_number == 4
    assert isinstance(summary.abort.error, StoreError)
    assert isinstance(summary.abort.error.__cause__, IntegrityError)
    assert summary.inserted == 2
    assert _count(sqlite_engine, house_table) == 3
    assert _count(sqlite_engine, apartment_table) == 3
    assert _count(sqlite_engine, resident_table) == 2


def test_manual_house_creation_and_registration(
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    house = add_house("North-7", "12", 3, unit_of_work_factory=sqlite_unit_of_work)

    assert _count(sqlite_engine, apartment_table) == 18
    with pytest.raises(DuplicateEntityError):
        add_house("North-7", "12", 5, unit_of_work_factory=sqlite_unit_of_work)
    assert _count(sqlite_engine, house_table) == 1
    assert _count(sqlite_engine, apartment_table) == 18

    (loaded,) = microdistrict_houses("North-7", unit_of_work_factory=sqlite_unit_of_work)
    assert loaded.id == house.id
    target = loaded.apartments_by_floor()[2][0]
    resident = register(
        target.require_id(),
        first_name="Anna",
        last_name="Petrova",
        phone="111",
        unit_of_work_factory=sqlite_unit_of_work,
    )

    (reloaded,) = microdistrict_houses("North-7", unit_of_work_factory=sqlite_unit_of_work)
    occupied = [a for a in reloaded.apartments if a.is_occupied]
    assert [(a.floor, a.apartment_num) for a in occupied] == [(2, 1)]

    evict(resident.require_id(), unit_of_work_factory=sqlite_unit_of_work)
    assert _count(sqlite_engine, resident_table) == 0


def test_failed_grid_leaves_no_house(
    monkeypatch: pytest.MonkeyPatch,
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    def failing_add_all(
        self: SqlAlchemyApartmentRepository, apartments: Iterable[Apartment]
    ) -> None:
        raise StoreError("insert apartments", "disk full")

    monkeypatch.setattr(SqlAlchemyApartmentRepository, "add_all", failing_add_all)

    with pytest.raises(StoreError):
        add_house("North-7", "12", 3, unit_of_work_factory=sqlite_unit_of_work)

    assert _count(sqlite_engine, house_table) == 0
    assert _count(sqlite_engine, apartment_table) == 0
