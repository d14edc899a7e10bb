from __future__ import annotations

import itertools
import random
import threading
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from accoreg import app as app_module
from accoreg.adapters.artifact import encode_snapshot
from accoreg.adapters.sqlalchemy import StartupError
from accoreg.app import (
    analyze_backup,
    build_merge_options,
    create_incremental_backup,
    default_backup_filename,
    merge_backup,
    save_incremental_backup,
)
from accoreg.config import InvalidBackupNameError, MergeConfig, StorageConfig
from accoreg.domain.backup import (
    ConflictPolicy,
    ManualResolution,
    MergeOptions,
    ResolutionAction,
    UnsupportedFormatError,
)
from tests.helpers.records import FakeStore, make_snapshot, registration_record, role_record

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def storage(tmp_path: Path) -> StorageConfig:
    return StorageConfig(data_dir=tmp_path)


def _write_backup(
    storage: StorageConfig, name: str, **collections: list[dict[str, object]]
) -> Path:
    path = storage.backup_path(name)
    path.write_bytes(encode_snapshot(make_snapshot(collections)))
    return path


def test_build_merge_options_uses_config_defaults() -> None:
    config = MergeConfig(
        conflict_resolution=ConflictPolicy.MERGE_FIELDS,
        preserve_newer=True,
        empty_is_missing=True,
    )

    options = build_merge_options(config=config)

    assert options == MergeOptions(
        conflict_resolution=ConflictPolicy.MERGE_FIELDS,
        preserve_newer=True,
        empty_is_missing=True,
    )


def test_build_merge_options_explicit_values_win() -> None:
    config = MergeConfig(preserve_newer=True, empty_is_missing=True)

    options = build_merge_options(
        conflict_resolution=ConflictPolicy.MANUAL,
        preserve_newer=False,
        only_tables=["Role"],
        skip_tables=["Room"],
        dry_run=True,
        empty_is_missing=False,
        config=config,
    )

    assert options.conflict_resolution is ConflictPolicy.MANUAL
    assert options.preserve_newer is False
    assert options.empty_is_missing is False
    assert options.only_tables == frozenset({"Role"})
    assert options.skip_tables == frozenset({"Room"})
    assert options.dry_run


def test_analyze_backup_by_name(storage: StorageConfig, fake_store: FakeStore) -> None:
    _write_backup(storage, "backup.json", Role=[role_record("r1"), role_record("r2")])

    result = analyze_backup(
        "backup.json",
        MergeOptions(),
        unit_of_work_factory=fake_store.unit_of_work,
        storage=storage,
    )

    assert result.summary.total_records == 2
    assert result.summary.new_records == 2
    assert fake_store.count("Role") == 0


def test_merge_backup_from_path(storage: StorageConfig) -> None:
    store = FakeStore.with_records({"Registration": [registration_record("a", branch="A")]})
    path = _write_backup(
        storage,
        "backup.json",
        Registration=[registration_record("a", branch="B"), registration_record("b")],
    )

    result = merge_backup(path, MergeOptions(), unit_of_work_factory=store.unit_of_work)

    assert result.success
    assert result.summary.records_added == 1
    assert result.summary.records_updated == 1
    assert store.repositories["Registration"].records["a"]["branch"] == "B"


def test_merge_backup_applies_manual_resolutions(storage: StorageConfig) -> None:
    store = FakeStore.with_records({"Registration": [registration_record("a", branch="A")]})
    _write_backup(
        storage,
        "backup.json",
        Registration=[registration_record("a", branch="B"), registration_record("b")],
    )

    result = merge_backup(
        "backup.json",
        MergeOptions(),
        {
            "Registration_a": ManualResolution(
                action=ResolutionAction.USE_CUSTOM, custom_data={"branch": "C"}
            ),
            "Registration_b": ManualResolution(action=ResolutionAction.SKIP),
        },
        unit_of_work_factory=store.unit_of_work,
        storage=storage,
    )

    assert result.success
    assert result.summary.records_added == 0
    assert result.summary.records_updated == 1
    assert store.repositories["Registration"].records["a"]["branch"] == "C"
    assert "b" not in store.repositories["Registration"].records


def test_merge_backup_rejects_unknown_artifacts(
    storage: StorageConfig, fake_store: FakeStore
) -> None:
    path = storage.backup_path("notes.txt")
    path.write_text("nothing to see here", encoding="utf-8")

    with pytest.raises(UnsupportedFormatError):
        merge_backup(path, unit_of_work_factory=fake_store.unit_of_work)


def test_analyze_backup_rejects_binary_artifacts(
    storage: StorageConfig, fake_store: FakeStore
) -> None:
    path = storage.backup_path("backup.bin")
    path.write_bytes(b"\xff" + random.Random(7).randbytes(2047))

    with pytest.raises(UnsupportedFormatError):
        analyze_backup(path, MergeOptions(), unit_of_work_factory=fake_store.unit_of_work)

    assert fake_store.commits == 0


def test_merge_backup_rejects_escaping_names(
    storage: StorageConfig, fake_store: FakeStore
) -> None:
    with pytest.raises(InvalidBackupNameError):
        merge_backup(
            "../secrets.json", unit_of_work_factory=fake_store.unit_of_work, storage=storage
        )


def test_create_and_save_incremental_backup(storage: StorageConfig) -> None:
    store = FakeStore.with_records({"Role": [role_record("r1")]})

    snapshot = create_incremental_backup(unit_of_work_factory=store.unit_of_work)
    path = save_incremental_backup(snapshot, "export.json.gz", compress=True, storage=storage)

    assert snapshot.total_records == 1
    assert path == storage.backup_dir() / "export.json.gz"
    result = analyze_backup(path, MergeOptions(), unit_of_work_factory=store.unit_of_work)
    assert result.summary.unchanged_records == 1


def test_default_backup_filename() -> None:
    now = datetime(2024, 6, 1, 12, 30, 5, 250000, tzinfo=UTC)

    assert (
        default_backup_filename(now=now)
        == "incremental-backup-2024-06-01T12-30-05-250Z.json"
    )
    assert default_backup_filename(compress=True, now=now).endswith(".json.gz")


def test_lazy_startup_runs_once_for_concurrent_callers(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    started = threading.Event()
    startups: list[str] = []
    calls = itertools.count()
    # Both callers must see the store as stopped before either starts it.
    first_checks = threading.Barrier(2, timeout=5)

    def is_started() -> bool:
        if next(calls) < 2:
            first_checks.wait()
        return started.is_set()

    def startup() -> None:
        if started.is_set():
            raise StartupError("Already started")
        startups.append(threading.current_thread().name)
        started.set()

    monkeypatch.setattr(app_module, "is_started", is_started)
    monkeypatch.setattr(app_module, "startup", startup)

    errors: list[BaseException] = []

    def resolve_factory() -> None:
        try:
            app_module._unit_of_work_factory(None)
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=resolve_factory) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert errors == []
    assert len(startups) == 1
