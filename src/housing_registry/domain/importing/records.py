"""Turning raw CSV lines into typed import records.

Nothing in here touches the store. A row that cannot be typed becomes a
``ParseSkip`` value; it is never raised.
"""

from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Final

from housing_registry.config.csv_format import DEFAULT_DATE_FORMATS, DEFAULT_IMPORT_DELIMITER

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

log = logging.getLogger(__name__)

COLUMNS: Final[tuple[str, ...]] = (
    "first_name",
    "last_name",
    "phone",
    "microdistrict",
    "house_number",
    "apartment_num",
    "floor",
    "move_in_date",
)
BOM: Final[str] = "\ufeff"
_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportRecord:
    """One input row as plain strings, before any typing."""

    line_number: int
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    microdistrict: str = ""
    house_number: str = ""
    apartment_num: str = ""
    floor: str = ""
    move_in_date: str = ""
    # set when the line itself could not be tokenised
    defect: str | None = None

    @classmethod
    def from_fields(cls, fields: Sequence[str], *, line_number: int) -> ImportRecord:
        """Map positional fields onto the fixed column order.

        Short rows are padded with empty strings and surplus fields are dropped.
        """

        cleaned = [value.strip() for value in fields[: len(COLUMNS)]]
        cleaned.extend("" for _ in range(len(COLUMNS) - len(cleaned)))
        return cls(line_number=line_number, **dict(zip(COLUMNS, cleaned, strict=True)))


@dataclass(frozen=True, slots=True, kw_only=True)
class ParsedRecord:
    """A fully typed import intent."""

    line_number: int
    first_name: str
    last_name: str
    phone: str
    microdistrict: str
    house_number: str
    apartment_num: int
    floor: int
    move_in_date: date


@dataclass(frozen=True, slots=True)
class ParseSkip:
    """A row left out of the batch, with the reason it could not be typed."""

    record: ImportRecord
    reason: str

    @property
    def line_number(self) -> int:
        return self.record.line_number


def parse_int(value: str) -> int | None:
    if not _INTEGER.fullmatch(value):
        return None
    return int(value)


def parse_date(value: str, formats: Sequence[str] = DEFAULT_DATE_FORMATS) -> date | None:
    """Parse an ISO date/date-time or any of ``formats``; ``None`` if nothing fits."""

    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    return None


def parse_record(
    record: ImportRecord,
    *,
    date_formats: Sequence[str] = DEFAULT_DATE_FORMATS,
) -> ParsedRecord | ParseSkip:
    if record.defect is not None:
        return ParseSkip(record, record.defect)

    apartment_num = parse_int(record.apartment_num)
    floor = parse_int(record.floor)
    if apartment_num is None or floor is None:
        return ParseSkip(
            record,
            f"invalid apartment number {record.apartment_num!r} or floor {record.floor!r}",
        )
    if apartment_num <= 0 or floor <= 0:
        return ParseSkip(
            record,
            f"apartment number {apartment_num} and floor {floor} must be positive",
        )

    move_in_date = parse_date(record.move_in_date, date_formats)
    if move_in_date is None:
        return ParseSkip(record, f"invalid move-in date {record.move_in_date!r}")

    return ParsedRecord(
        line_number=record.line_number,
        first_name=record.first_name,
        last_name=record.last_name,
        phone=record.phone,
        microdistrict=record.microdistrict,
        house_number=record.house_number,
        apartment_num=apartment_num,
        floor=floor,
        move_in_date=move_in_date,
    )


def detect_delimiter(header: str, default: str = DEFAULT_IMPORT_DELIMITER) -> str:
    """Pick ``;`` for semicolon-separated headers, else ``default``."""

    if ";" in header and "," not in header:
        return ";"
    return default


def read_import_records(
    lines: Iterable[str],
    *,
    delimiter: str | None = None,
) -> Iterator[ImportRecord]:
    """Yield one ``ImportRecord`` per non-blank data row.

    The first line is the header and is always discarded; it is only used to detect
    the delimiter when none is given. Blank rows are dropped silently.

    Each physical line is tokenised on its own, so a stray quote damages only its
    own row. A line the csv module refuses outright still yields a record, flagged
    with a ``defect`` that ``parse_record`` turns into a skip.
    """

    iterator = iter(lines)
    header = next(iterator, None)
    if header is None:
        return
    header = header.removeprefix(BOM)
    effective_delimiter = delimiter or detect_delimiter(header)
    log.debug("Reading import rows with delimiter %r", effective_delimiter)

    for line_number, line in enumerate(iterator, start=2):
        raw = line.rstrip("\r\n")
        if not raw.strip():
            continue
        try:
            fields = next(csv.reader([raw], delimiter=effective_delimiter), [])
        except csv.Error as exc:
            log.debug("Line %d could not be tokenised: %s", line_number, exc)
            yield ImportRecord(line_number=line_number, defect=f"unreadable row: {exc}")
            continue
        if not any(field.strip() for field in fields):
            continue
        yield ImportRecord.from_fields(fields, line_number=line_number)
