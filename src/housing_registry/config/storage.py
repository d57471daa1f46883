"""Location of the registry database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_flag, optional_env_var

APP_DIR_NAME: Final[str] = "housing-registry"
DEFAULT_DB_FILENAME: Final[str] = "registry.db"

DATA_DIR_ENV: Final[str] = "HOUSING_REGISTRY_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
SQL_ECHO_ENV: Final[str] = "HOUSING_REGISTRY_SQL_ECHO"


def _platform_data_home() -> Path:
    if os.name == "nt":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Directory holding the SQLite file used when no database URI is configured."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    @classmethod
    def from_env(cls) -> StorageConfig:
        override = optional_env_var(DATA_DIR_ENV)
        data_dir = Path(override) if override else _platform_data_home() / APP_DIR_NAME
        return cls(data_dir=data_dir)

    def database_path(self, *, create_dir: bool = True) -> Path:
        directory = self.data_dir.expanduser().resolve()
        if create_dir:
            directory.mkdir(parents=True, exist_ok=True)
        return directory / self.database_filename

    def sqlite_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    # log every SQL statement through the sqlalchemy.engine logger
    echo: bool = False


def get_storage_config() -> StorageConfig:
    return StorageConfig.from_env()


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """Prefer ``DATABASE_URI``; otherwise use the SQLite file in the data directory."""

    uri = optional_env_var(DATABASE_URI_ENV)
    if uri is None:
        uri = (storage or get_storage_config()).sqlite_uri()
    return DatabaseConfig(uri=uri.strip(), echo=env_flag(SQL_ECHO_ENV))
