"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .errors import InvalidBackupNameError

APP_DIR_NAME: Final[str] = "accoreg"
DEFAULT_DB_FILENAME: Final[str] = "accoreg.db"
BACKUP_DIR_NAME: Final[str] = "backups"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME
    backup_dir_override: Path | None = None

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def database_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"

    def backup_dir(self, *, ensure: bool = True) -> Path:
        if self.backup_dir_override is not None:
            directory = self.backup_dir_override.expanduser().resolve()
        else:
            directory = self.resolve_data_dir() / BACKUP_DIR_NAME
        if ensure:
            directory.mkdir(parents=True, exist_ok=True)
        return directory

    def backup_path(self, filename: str, *, ensure: bool = True) -> Path:
        """Return the path of ``filename`` inside the backup directory."""

        if not filename or ".." in filename or "/" in filename or "\\" in filename:
            raise InvalidBackupNameError(f"Invalid backup file name: {filename!r}")
        return self.backup_dir(ensure=ensure) / filename


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("ACCOREG_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    backup_dir = os.getenv("BACKUP_DIR")
    return StorageConfig(
        data_dir=data_dir,
        backup_dir_override=Path(backup_dir) if backup_dir else None,
    )


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    storage_config = storage or get_storage_config()
    return DatabaseConfig(uri=storage_config.database_uri())


def get_database_uri() -> str:
    """Compute the database URI, respecting overrides."""

    return get_database_config().uri
