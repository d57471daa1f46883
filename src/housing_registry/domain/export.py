"""Flatten residents with their apartment and house into export rows."""

from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING, Final

from housing_registry.config.csv_format import ExportConfig
from housing_registry.domain.importing.records import BOM

if TYPE_CHECKING:
    from collections.abc import Iterable

    from housing_registry.domain.model import ResidentListing

type ExportRow = tuple[str, str, str, str, str, str, str, str]

HEADER: Final[tuple[str, ...]] = (
    "First name",
    "Last name",
    "Phone",
    "Microdistrict",
    "House",
    "Apartment",
    "Floor",
    "Move-in date",
)


def _text(value: object | None) -> str:
    return "" if value is None else str(value)


def project_row(listing: ResidentListing, *, date_format: str) -> ExportRow:
    """Render one resident in the fixed column order; unjoined fields stay empty."""

    move_in = listing.move_in_date.strftime(date_format) if listing.move_in_date else ""
    return (
        listing.first_name,
        listing.last_name,
        listing.phone,
        _text(listing.microdistrict),
        _text(listing.house_number),
        _text(listing.apartment_num),
        _text(listing.floor),
        move_in,
    )


def project_rows(
    listings: Iterable[ResidentListing],
    *,
    config: ExportConfig | None = None,
) -> list[ExportRow]:
    effective = config or ExportConfig()
    return [project_row(listing, date_format=effective.date_format) for listing in listings]


def render_csv(rows: Iterable[ExportRow], *, config: ExportConfig | None = None) -> str:
    """Render rows as quoted CSV text prefixed with a byte-order marker.

    Every field is quoted and inner quotes are doubled.
    """

    effective = config or ExportConfig()
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=effective.delimiter,
        quoting=csv.QUOTE_ALL,
        doublequote=True,
        lineterminator="\n",
    )
    writer.writerow(HEADER)
    writer.writerows(rows)
    return BOM + buffer.getvalue()
