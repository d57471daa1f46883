"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from housing_registry.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    is_started,
    startup,
)
from housing_registry.config.csv_format import get_export_config, get_import_config
from housing_registry.domain.export import project_rows, render_csv
from housing_registry.domain.forms import HouseSubmission, ResidentSubmission
from housing_registry.domain.housing import (
    DEFAULT_PAGE_SIZE,
    create_house,
    evict_resident,
    list_microdistricts,
    load_microdistrict,
    register_resident,
    search_residents,
)
from housing_registry.domain.importing import read_import_records, reconcile_batch
from housing_registry.domain.ports.unit_of_work import RegistryUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date

    from housing_registry.config.csv_format import ExportConfig, ImportConfig
    from housing_registry.domain.importing import ImportSummary
    from housing_registry.domain.model import House, Resident, ResidentPage

UnitOfWorkFactory = Callable[[], RegistryUnitOfWork]


log = getLogger(__name__)


def _unit_of_work(factory: UnitOfWorkFactory | None) -> RegistryUnitOfWork:
    if factory is not None:
        return factory()
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork()


def import_residents(
    lines: Iterable[str],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ImportConfig | None = None,
) -> ImportSummary:
    """Import resident rows from CSV text lines (header first).

    The returned summary carries the terminal error if the batch was aborted; rows
    written before the abort stay in the store.
    """

    effective_config = config or get_import_config()
    records = read_import_records(lines, delimiter=effective_config.delimiter)
    log.info("Starting resident import")
    with _unit_of_work(unit_of_work_factory) as uow:
        return reconcile_batch(records, uow, config=effective_config)


def import_residents_file(
    path: Path | str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ImportConfig | None = None,
) -> ImportSummary:
    with Path(path).open(encoding="utf-8-sig", newline="") as handle:
        return import_residents(
            handle,
            unit_of_work_factory=unit_of_work_factory,
            config=config,
        )


def export_residents(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ExportConfig | None = None,
) -> str:
    """Return every resident as BOM-prefixed, semicolon-separated CSV text."""

    effective_config = config or get_export_config()
    with _unit_of_work(unit_of_work_factory) as uow:
        listings = uow.repositories.residents.export_view()
    log.info("Exporting %s residents", len(listings))
    return render_csv(project_rows(listings, config=effective_config), config=effective_config)


def export_residents_file(
    path: Path | str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ExportConfig | None = None,
) -> None:
    content = export_residents(unit_of_work_factory=unit_of_work_factory, config=config)
    Path(path).write_text(content, encoding="utf-8", newline="")


def add_house(
    microdistrict: str,
    house_number: str,
    floors_count: int,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> House:
    submission = HouseSubmission.parse(
        {
            "microdistrict": microdistrict,
            "house_number": house_number,
            "floors_count": floors_count,
        }
    )
    with _unit_of_work(unit_of_work_factory) as uow:
        return create_house(uow, submission)


def register(
    apartment_id: int,
    *,
    first_name: str,
    last_name: str,
    phone: str,
    move_in_date: date | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Resident:
    payload: dict[str, object] = {
        "first_name": first_name,
        "last_name": last_name,
        "phone": phone,
    }
    if move_in_date is not None:
        payload["move_in_date"] = move_in_date
    submission = ResidentSubmission.parse(payload)
    with _unit_of_work(unit_of_work_factory) as uow:
        return register_resident(uow, apartment_id, submission)


def evict(resident_id: int, *, unit_of_work_factory: UnitOfWorkFactory | None = None) -> None:
    with _unit_of_work(unit_of_work_factory) as uow:
        evict_resident(uow, resident_id)


def microdistricts(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> Sequence[str]:
    with _unit_of_work(unit_of_work_factory) as uow:
        return list_microdistricts(uow)


def microdistrict_houses(
    microdistrict: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Sequence[House]:
    with _unit_of_work(unit_of_work_factory) as uow:
        return load_microdistrict(uow, microdistrict)


def find_residents(
    term: str | None = None,
    *,
    page: int = 0,
    page_size: int = DEFAULT_PAGE_SIZE,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ResidentPage:
    with _unit_of_work(unit_of_work_factory) as uow:
        return search_residents(uow, term, page=page, page_size=page_size)
