"""Registry settings read from the environment."""

from __future__ import annotations

from .csv_format import ExportConfig, ImportConfig, get_export_config, get_import_config
from .errors import ConfigurationError, InvalidSettingError
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "ExportConfig",
    "ImportConfig",
    "InvalidSettingError",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_export_config",
    "get_import_config",
    "get_storage_config",
]
