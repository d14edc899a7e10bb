from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from accoreg.config import (
    InvalidBackupNameError,
    StorageConfig,
    get_database_uri,
    get_storage_config,
)

if TYPE_CHECKING:
    from pathlib import Path


def test_backup_dir_defaults_below_data_dir(tmp_path: Path) -> None:
    config = StorageConfig(data_dir=tmp_path)

    backup_dir = config.backup_dir()

    assert backup_dir == tmp_path.resolve() / "backups"
    assert backup_dir.is_dir()


def test_backup_dir_override(tmp_path: Path) -> None:
    override = tmp_path / "elsewhere"
    config = StorageConfig(data_dir=tmp_path / "data", backup_dir_override=override)

    assert config.backup_path("a.json") == override.resolve() / "a.json"


def test_backup_path_without_ensure_does_not_create(tmp_path: Path) -> None:
    config = StorageConfig(data_dir=tmp_path / "data")

    path = config.backup_path("a.json", ensure=False)

    assert path.name == "a.json"
    assert not path.parent.exists()


@pytest.mark.parametrize("name", ["", "../a.json", "nested/a.json", "nested\\a.json", ".."])
def test_backup_path_rejects_escaping_names(tmp_path: Path, name: str) -> None:
    with pytest.raises(InvalidBackupNameError):
        StorageConfig(data_dir=tmp_path).backup_path(name)


def test_storage_config_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ACCOREG_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("BACKUP_DIR", str(tmp_path / "dumps"))

    config = get_storage_config()

    assert config.data_dir == tmp_path
    assert config.backup_dir(ensure=False) == (tmp_path / "dumps").resolve()


def test_database_uri_prefers_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///override.db")
    assert get_database_uri() == "sqlite+pysqlite:///override.db"

    monkeypatch.delenv("DATABASE_URI")
    monkeypatch.setenv("ACCOREG_DATA_DIR", str(tmp_path))
    assert get_database_uri() == f"sqlite+pysqlite:///{tmp_path.resolve() / 'accoreg.db'}"
