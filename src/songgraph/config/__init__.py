"""Application configuration helpers."""

from __future__ import annotations

from .env import int_env_var, list_env_var, optional_env_var
from .errors import ConfigurationError, InvalidConfigurationError
from .importer import (
    DEFAULT_FEATURING_TOKENS,
    DEFAULT_IMPORT_CONCURRENCY,
    ImportConfig,
    get_import_config,
)
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_FEATURING_TOKENS",
    "DEFAULT_IMPORT_CONCURRENCY",
    "ConfigurationError",
    "DatabaseConfig",
    "ImportConfig",
    "InvalidConfigurationError",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_import_config",
    "get_storage_config",
    "int_env_var",
    "list_env_var",
    "optional_env_var",
]
