"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError, InvalidBackupNameError
from .logging import configure_logging
from .merge import MergeConfig, get_merge_config, parse_conflict_policy
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidBackupNameError",
    "MergeConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_database_uri",
    "get_merge_config",
    "get_storage_config",
    "parse_conflict_policy",
]
