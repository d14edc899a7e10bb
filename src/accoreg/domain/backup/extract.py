"""Snapshot of the live data store."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .contracts import CollectionSnapshot, Snapshot, SnapshotMetadata
from .errors import ExtractionError
from .temporal import canonicalize_record, to_canonical

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from accoreg.domain.model import CollectionDescriptor
    from accoreg.domain.ports import MergeRepositories

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def extract_current(
    repositories: MergeRepositories,
    collections: Iterable[CollectionDescriptor],
    *,
    now_provider: Callable[[], datetime] = _utcnow,
) -> Snapshot:
    """Read every tracked collection, one query each, in registry order.

    A partial extraction is never returned: a missing accessor or a failed read
    raises ``ExtractionError``.
    """

    log.info("Extracting current data for comparison")
    snapshots: list[CollectionSnapshot] = []
    record_counts: dict[str, int] = {}

    for descriptor in collections:
        repository = repositories.get(descriptor.name)
        if repository is None:
            raise ExtractionError(f"No repository registered for collection {descriptor.name}")

        records = [canonicalize_record(record, descriptor) for record in repository.find_all()]
        snapshots.append(CollectionSnapshot(descriptor=descriptor, records=records))
        record_counts[descriptor.name] = len(records)
        log.info("Extracted %s records from %s", len(records), descriptor.name)

    return Snapshot(
        collections=snapshots,
        metadata=SnapshotMetadata(
            exported_at=to_canonical(now_provider()),
            record_counts=record_counts,
        ),
    )
