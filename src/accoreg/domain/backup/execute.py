"""Merge a backup snapshot into the live store.

Responsibilities of this stage:
- extract the current snapshot and compare it against the backup
- report counts only for dry runs
- apply inserts and updates inside one unit of work, collecting per-record
  write failures without aborting sibling writes

Out of scope for this stage:
- decoding backup artifacts
- serialising concurrent merges (callers hold the lock)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from accoreg.domain.model import TRACKED_COLLECTIONS

from .contracts import MergeResult, MergeSummary
from .diff import compare
from .errors import RecordWriteError, TransactionError
from .extract import extract_current
from .report import analyze
from .temporal import restore_record

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from accoreg.domain.model import CollectionDescriptor
    from accoreg.domain.ports import CollectionRepository, MergeRepositories, MergeUnitOfWork

    from .contracts import (
        AnalysisResult,
        CollectionRecords,
        Comparison,
        MergeOptions,
        Snapshot,
    )

log = logging.getLogger(__name__)


@dataclass(slots=True)
class _WriteContext:
    repositories: MergeRepositories
    errors: list[str]
    missing: set[str]

    def repository(self, collection: str) -> CollectionRepository | None:
        repository = self.repositories.get(collection)
        if repository is None and collection not in self.missing:
            self.missing.add(collection)
            self.errors.append(f"Model {collection} not found")
            log.error("No repository registered for backup collection %s", collection)
        return repository


@dataclass(slots=True)
class MergeExecutor:
    """Run comparison and persistence for one backup snapshot."""

    unit_of_work_factory: Callable[[], MergeUnitOfWork]
    collections: tuple[CollectionDescriptor, ...] = TRACKED_COLLECTIONS

    def analyze(self, backup: Snapshot, options: MergeOptions) -> AnalysisResult:
        """Preview the merge of ``backup`` without writing anything."""

        with self.unit_of_work_factory() as uow:
            current = extract_current(uow.repositories, self.collections)
        return analyze(backup, current, options)

    def merge(self, backup: Snapshot, options: MergeOptions) -> MergeResult:
        """Merge ``backup`` according to ``options``.

        ``ExtractionError`` propagates. A ``TransactionError`` rolls everything
        back and is reported as a failed result with zeroed counters.
        """

        with self.unit_of_work_factory() as uow:
            current = extract_current(uow.repositories, self.collections)
            comparison = compare(current, backup, options)
            summary = MergeSummary(
                tables_processed=comparison.collections_compared,
                records_skipped=comparison.skipped_count,
                records_unchanged=comparison.unchanged_count,
                conflicts_detected=len(comparison.conflicts),
            )

            if options.dry_run:
                summary.records_added = comparison.new_count
                summary.records_updated = comparison.updated_count
                log.info("Dry run complete: %s", summary)
                return MergeResult(success=True, summary=summary, conflicts=comparison.conflicts)

            context = _WriteContext(repositories=uow.repositories, errors=[], missing=set())
            try:
                summary.records_added = self._insert_new(context, comparison)
                summary.records_updated = self._apply_updates(context, comparison)
                uow.commit()
            except TransactionError as exc:
                uow.rollback()
                log.error("Merge transaction failed, nothing was applied: %s", exc)
                return MergeResult.failed(f"Merge transaction failed: {exc}")

        result = MergeResult(
            success=not context.errors,
            summary=summary,
            conflicts=comparison.conflicts,
            errors=context.errors,
        )
        log.info(
            "Merge finished: success=%s, added=%s, updated=%s, errors=%s",
            result.success,
            summary.records_added,
            summary.records_updated,
            len(result.errors),
        )
        return result

    def _write_order(self, groups: Iterable[CollectionRecords]) -> list[CollectionRecords]:
        # Parents before children; collections the registry does not know go last.
        position = {descriptor.name: index for index, descriptor in enumerate(self.collections)}
        return sorted(groups, key=lambda group: position.get(group.collection.name, len(position)))

    def _insert_new(self, context: _WriteContext, comparison: Comparison) -> int:
        added = 0
        for group in self._write_order(comparison.new_records):
            descriptor = group.collection
            repository = context.repository(descriptor.name)
            if repository is None:
                continue
            for record in group.records:
                try:
                    repository.insert(restore_record(record, descriptor))
                except RecordWriteError as exc:
                    context.errors.append(
                        f"Failed to add record {record[descriptor.primary_key]} "
                        f"to {descriptor.name}: {exc}"
                    )
                    continue
                added += 1
        return added

    def _apply_updates(self, context: _WriteContext, comparison: Comparison) -> int:
        updated = 0
        for group in self._write_order(comparison.updated_records):
            descriptor = group.collection
            repository = context.repository(descriptor.name)
            if repository is None:
                continue
            for record in group.records:
                key = record[descriptor.primary_key]
                payload = restore_record(record, descriptor)
                payload.pop(descriptor.primary_key, None)
                try:
                    repository.update(key, payload)
                except RecordWriteError as exc:
                    context.errors.append(
                        f"Failed to update record {key} in {descriptor.name}: {exc}"
                    )
                    continue
                updated += 1
        return updated
