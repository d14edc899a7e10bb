"""Field-by-field comparison of two snapshots.

Responsibilities of this stage:
- classify every incoming record as new, unchanged, updated, skipped or conflicting
- hand changed, non-conflicting pairs (or every changed pair outside the manual
  policy) to the resolver

Out of scope for this stage:
- reading either snapshot
- persistence
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from .contracts import (
    CollectionRecords,
    Comparison,
    ConflictPolicy,
    ConflictRecord,
)
from .resolve import resolve
from .temporal import is_strictly_newer

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from accoreg.domain.model import CollectionDescriptor

    from .contracts import CollectionSnapshot, MergeOptions, Record, Snapshot

log = logging.getLogger(__name__)

_MISSING: Final = object()


def record_key(value: object) -> str:
    """Primary key lookup form; backups may carry numeric ids as strings or vice versa."""

    return str(value)


def _is_defined(value: object, *, empty_is_missing: bool) -> bool:
    if value is None or value is _MISSING:
        return False
    return not (empty_is_missing and value == "")


def _compared_fields(incoming: Record, descriptor: CollectionDescriptor) -> Iterator[str]:
    excluded = {descriptor.primary_key, descriptor.timestamp_field}
    if descriptor.fields:
        candidates = (field for field in descriptor.fields if field in incoming)
    else:
        candidates = iter(incoming)
    return (field for field in candidates if field not in excluded)


def changed_fields(
    current: Record,
    incoming: Record,
    descriptor: CollectionDescriptor,
    *,
    empty_is_missing: bool = False,
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Return ``(changed, conflicting)`` field names for a record pair.

    A changed field conflicts when both sides hold a defined value.
    """

    changed: list[str] = []
    conflicting: list[str] = []
    for field in _compared_fields(incoming, descriptor):
        current_value = current.get(field, _MISSING)
        incoming_value = incoming[field]
        if current_value is not _MISSING and current_value == incoming_value:
            continue
        changed.append(field)
        if _is_defined(current_value, empty_is_missing=empty_is_missing) and _is_defined(
            incoming_value, empty_is_missing=empty_is_missing
        ):
            conflicting.append(field)
    return tuple(changed), tuple(conflicting)


def _current_is_newer(current: Record, incoming: Record, timestamp_field: str | None) -> bool:
    if timestamp_field is None:
        return False
    return bool(is_strictly_newer(current.get(timestamp_field), incoming.get(timestamp_field)))


def _index(collection: CollectionSnapshot | None) -> Mapping[str, Record]:
    if collection is None:
        return {}
    primary_key = collection.descriptor.primary_key
    return {record_key(record[primary_key]): record for record in collection.records}


def compare(current: Snapshot, incoming: Snapshot, options: MergeOptions) -> Comparison:
    """Compare ``incoming`` against ``current`` collection by collection.

    Collections present only in ``current`` are never touched. Result lists keep
    the incoming snapshot's record order.
    """

    comparison = Comparison()
    for collection in incoming.collections:
        if not options.includes(collection.name):
            log.debug("Skipping excluded collection %s", collection.name)
            continue
        comparison.collections_compared += 1
        _compare_collection(comparison, collection, current.get(collection.name), options)

    log.info(
        "Compared %s collections: %s new, %s updated, %s unchanged, %s skipped, %s conflicts",
        comparison.collections_compared,
        comparison.new_count,
        comparison.updated_count,
        comparison.unchanged_count,
        comparison.skipped_count,
        len(comparison.conflicts),
    )
    return comparison


def _compare_collection(
    comparison: Comparison,
    incoming: CollectionSnapshot,
    current: CollectionSnapshot | None,
    options: MergeOptions,
) -> None:
    descriptor = incoming.descriptor
    timestamp_field = descriptor.timestamp_field
    current_by_key = _index(current)
    new_records: list[Record] = []
    updated_records: list[Record] = []
    unchanged = 0
    skipped = 0

    for record in incoming.records:
        record_id = record[descriptor.primary_key]
        existing = current_by_key.get(record_key(record_id))
        if existing is None:
            new_records.append(record)
            continue

        changed, conflicting = changed_fields(
            existing, record, descriptor, empty_is_missing=options.empty_is_missing
        )
        if not changed:
            unchanged += 1
            continue

        conflict_bearing = bool(conflicting) or _current_is_newer(existing, record, timestamp_field)
        if conflict_bearing and options.conflict_resolution is ConflictPolicy.MANUAL:
            comparison.conflicts.append(
                ConflictRecord(
                    collection=descriptor.name,
                    record_id=record_id,
                    current=existing,
                    incoming=record,
                    conflict_fields=conflicting,
                )
            )
            continue

        resolved = resolve(existing, record, options, timestamp_field)
        if resolved is None:
            skipped += 1
        else:
            updated_records.append(resolved)

    if new_records:
        comparison.new_records.append(CollectionRecords(collection=descriptor, records=new_records))
    if updated_records:
        comparison.updated_records.append(
            CollectionRecords(collection=descriptor, records=updated_records)
        )
    comparison.unchanged_records[descriptor.name] = unchanged
    comparison.skipped_records[descriptor.name] = skipped
