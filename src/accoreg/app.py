"""Application orchestration entry points."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from accoreg.adapters.artifact import read_backup_file, write_snapshot
from accoreg.adapters.sqlalchemy.mappings import persisted_collections
from accoreg.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyMergeUnitOfWork,
    is_started,
    startup,
)
from accoreg.config import get_merge_config, get_storage_config
from accoreg.domain.backup import (
    MergeExecutor,
    MergeOptions,
    apply_manual_resolutions,
    extract_current,
)
from accoreg.domain.backup.temporal import to_canonical
from accoreg.domain.model import TRACKED_COLLECTIONS
from accoreg.domain.ports.unit_of_work import MergeUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from accoreg.config import MergeConfig, StorageConfig
    from accoreg.domain.backup import (
        AnalysisResult,
        ConflictPolicy,
        ManualResolution,
        MergeResult,
        Snapshot,
    )

UnitOfWorkFactory = Callable[[], MergeUnitOfWork]

BACKUP_FILENAME_PREFIX = "incremental-backup"

log = getLogger(__name__)

# One merge at a time per process; the engine itself does not coordinate writers.
_MERGE_LOCK = threading.Lock()
_STARTUP_LOCK = threading.Lock()


def build_merge_options(
    *,
    conflict_resolution: ConflictPolicy | None = None,
    preserve_newer: bool | None = None,
    only_tables: Iterable[str] | None = None,
    skip_tables: Iterable[str] = (),
    dry_run: bool = False,
    empty_is_missing: bool | None = None,
    config: MergeConfig | None = None,
) -> MergeOptions:
    """Combine explicit choices with the environment defaults."""

    defaults = config or get_merge_config()
    return MergeOptions(
        conflict_resolution=conflict_resolution or defaults.conflict_resolution,
        preserve_newer=defaults.preserve_newer if preserve_newer is None else preserve_newer,
        only_tables=frozenset(only_tables) if only_tables is not None else None,
        skip_tables=frozenset(skip_tables),
        dry_run=dry_run,
        empty_is_missing=(
            defaults.empty_is_missing if empty_is_missing is None else empty_is_missing
        ),
    )


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        with _STARTUP_LOCK:
            if not is_started():
                startup()
    return SqlAlchemyMergeUnitOfWork


def _artifact_path(source: str | Path, storage: StorageConfig | None) -> Path:
    """Explicit paths are used as given; bare names live in the backup directory."""

    if isinstance(source, Path):
        return source
    return (storage or get_storage_config()).backup_path(source, ensure=False)


def analyze_backup(
    source: str | Path,
    options: MergeOptions | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    storage: StorageConfig | None = None,
) -> AnalysisResult:
    """Preview what merging ``source`` would change. Never writes."""

    path = _artifact_path(source, storage)
    effective_options = options or build_merge_options()
    log.info("Analysing backup %s with %s", path.name, effective_options)

    backup = read_backup_file(path, persisted_collections())
    executor = MergeExecutor(unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory))
    result = executor.analyze(backup, effective_options)

    summary = result.summary
    log.info(
        "Backup analysis completed: total=%s, new=%s, updated=%s, conflicts=%s",
        summary.total_records,
        summary.new_records,
        summary.updated_records,
        summary.conflicts,
    )
    return result


def merge_backup(
    source: str | Path,
    options: MergeOptions | None = None,
    manual_resolutions: Mapping[str, ManualResolution] | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    storage: StorageConfig | None = None,
) -> MergeResult:
    """Merge ``source`` into the live store; concurrent calls are serialised."""

    path = _artifact_path(source, storage)
    effective_options = options or build_merge_options()
    log.info("Merging backup %s with %s", path.name, effective_options)

    backup = read_backup_file(path, persisted_collections())
    if manual_resolutions:
        backup = apply_manual_resolutions(backup, manual_resolutions)

    executor = MergeExecutor(unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory))
    with _MERGE_LOCK:
        result = executor.merge(backup, effective_options)

    if result.success:
        log.info("Incremental merge completed successfully: %s", result.summary)
    else:
        log.error("Incremental merge finished with %s errors", len(result.errors))
    return result


def create_incremental_backup(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Snapshot:
    """Snapshot every tracked collection of the live store."""

    factory = _unit_of_work_factory(unit_of_work_factory)
    with factory() as uow:
        snapshot = extract_current(uow.repositories, TRACKED_COLLECTIONS)
    log.info(
        "Created incremental backup: %s records across %s collections",
        snapshot.total_records,
        len(snapshot.collections),
    )
    return snapshot


def default_backup_filename(*, compress: bool = False, now: datetime | None = None) -> str:
    stamp = to_canonical(now or datetime.now(UTC)).replace(":", "-").replace(".", "-")
    suffix = ".json.gz" if compress else ".json"
    return f"{BACKUP_FILENAME_PREFIX}-{stamp}{suffix}"


def save_incremental_backup(
    snapshot: Snapshot,
    filename: str | None = None,
    *,
    compress: bool = False,
    storage: StorageConfig | None = None,
) -> Path:
    """Write ``snapshot`` as a canonical artifact into the backup directory."""

    name = filename or default_backup_filename(compress=compress)
    path = (storage or get_storage_config()).backup_path(name)
    return write_snapshot(snapshot, path, compress=compress)
