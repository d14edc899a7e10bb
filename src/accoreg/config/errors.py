"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class InvalidBackupNameError(ConfigurationError):
    """Raised when a backup file name would escape the backup directory."""
