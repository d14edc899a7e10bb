"""Caller decisions for manually reviewed conflicts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .contracts import CollectionSnapshot, ResolutionAction, Snapshot, SnapshotMetadata
from .temporal import canonicalize_record

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .contracts import ManualResolution, Record

log = logging.getLogger(__name__)


def resolution_key(collection: str, record_id: object) -> str:
    """Key under which a decision for one record is submitted, e.g. ``"User_42"``."""

    return f"{collection}_{record_id}"


def _apply(
    collection: CollectionSnapshot,
    resolutions: Mapping[str, ManualResolution],
    applied: set[str],
) -> list[Record]:
    descriptor = collection.descriptor
    primary_key = descriptor.primary_key
    records: list[Record] = []
    for record in collection.records:
        key = resolution_key(collection.name, record[primary_key])
        resolution = resolutions.get(key)
        if resolution is None:
            records.append(record)
            continue
        applied.add(key)
        if resolution.action is ResolutionAction.SKIP:
            continue
        overlay = canonicalize_record(
            {
                descriptor.field_name(name): value
                for name, value in (resolution.custom_data or {}).items()
            },
            descriptor,
        )
        # The record keeps its identity whatever the custom data says.
        overlay[primary_key] = record[primary_key]
        records.append({**record, **overlay})
    return records


def apply_manual_resolutions(
    snapshot: Snapshot,
    resolutions: Mapping[str, ManualResolution],
) -> Snapshot:
    """Return a copy of ``snapshot`` with the decisions applied.

    ``skip`` drops the backup record so the current one is kept; ``use_custom``
    overlays ``custom_data`` onto the backup record.
    """

    if not resolutions:
        return snapshot

    applied: set[str] = set()
    collections = [
        CollectionSnapshot(
            descriptor=collection.descriptor,
            records=_apply(collection, resolutions, applied),
        )
        for collection in snapshot.collections
    ]
    unmatched = sorted(set(resolutions) - applied)
    if unmatched:
        log.warning("Ignoring %s resolutions without a backup record: %s", len(unmatched), unmatched)

    return Snapshot(
        collections=collections,
        metadata=SnapshotMetadata(
            exported_at=snapshot.metadata.exported_at,
            version=snapshot.metadata.version,
            record_counts={item.name: len(item.records) for item in collections},
        ),
    )
