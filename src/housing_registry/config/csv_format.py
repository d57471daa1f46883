"""CSV import/export defaults."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import optional_env_int, optional_env_list, optional_env_var
from .errors import ConfigurationError

DEFAULT_IMPORT_DELIMITER: Final[str] = ","
DEFAULT_EXPORT_DELIMITER: Final[str] = ";"
DEFAULT_SHORT_DATE_FORMAT: Final[str] = "%d.%m.%Y"
DEFAULT_DATE_FORMATS: Final[tuple[str, ...]] = (DEFAULT_SHORT_DATE_FORMAT, "%d/%m/%Y")

IMPORT_DELIMITER_ENV: Final[str] = "HOUSING_REGISTRY_IMPORT_DELIMITER"
DATE_FORMATS_ENV: Final[str] = "HOUSING_REGISTRY_DATE_FORMATS"
EXPORT_DATE_FORMAT_ENV: Final[str] = "HOUSING_REGISTRY_EXPORT_DATE_FORMAT"
IMPORTED_HOUSE_FLOORS_ENV: Final[str] = "HOUSING_REGISTRY_IMPORTED_HOUSE_FLOORS"


@dataclass(frozen=True, slots=True)
class ImportConfig:
    # None detects the delimiter from the header line
    delimiter: str | None = None
    date_formats: tuple[str, ...] = DEFAULT_DATE_FORMATS
    # floors_count stored on houses created by import; None leaves it unknown
    imported_house_floors: int | None = None

    def __post_init__(self) -> None:
        if self.delimiter is not None and len(self.delimiter) != 1:
            raise ConfigurationError("Import delimiter must be a single character")
        if self.imported_house_floors is not None and self.imported_house_floors <= 0:
            raise ConfigurationError("Imported house floors must be positive when set")


@dataclass(frozen=True, slots=True)
class ExportConfig:
    delimiter: str = DEFAULT_EXPORT_DELIMITER
    date_format: str = DEFAULT_SHORT_DATE_FORMAT

    def __post_init__(self) -> None:
        if len(self.delimiter) != 1:
            raise ConfigurationError("Export delimiter must be a single character")


def get_import_config() -> ImportConfig:
    delimiter = optional_env_var(IMPORT_DELIMITER_ENV)
    date_formats = optional_env_list(DATE_FORMATS_ENV) or DEFAULT_DATE_FORMATS
    return ImportConfig(
        delimiter=delimiter,
        date_formats=date_formats,
        imported_house_floors=optional_env_int(IMPORTED_HOUSE_FLOORS_ENV),
    )


def get_export_config() -> ExportConfig:
    date_format = optional_env_var(EXPORT_DATE_FORMAT_ENV) or DEFAULT_SHORT_DATE_FORMAT
    return ExportConfig(date_format=date_format)
