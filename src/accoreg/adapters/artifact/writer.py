"""Encode snapshots as canonical structured artifacts."""

from __future__ import annotations

import gzip
import logging
from typing import TYPE_CHECKING

from .schema import ArtifactMetadata, ArtifactTable, BackupArtifact

if TYPE_CHECKING:
    from pathlib import Path

    from accoreg.domain.backup.contracts import Snapshot

log = logging.getLogger(__name__)


def to_artifact(snapshot: Snapshot) -> BackupArtifact:
    return BackupArtifact(
        tables=[
            ArtifactTable(
                table_name=collection.name,
                primary_key=collection.descriptor.primary_key,
                records=[dict(record) for record in collection.records],
            )
            for collection in snapshot.collections
        ],
        metadata=ArtifactMetadata(
            exported_at=snapshot.metadata.exported_at,
            version=snapshot.metadata.version,
            record_counts=dict(snapshot.metadata.record_counts),
        ),
    )


def encode_snapshot(snapshot: Snapshot, *, compress: bool = False) -> bytes:
    """Serialise ``snapshot``; the reader accepts the output unchanged."""

    payload = to_artifact(snapshot).model_dump_json(by_alias=True, indent=2).encode("utf-8")
    return gzip.compress(payload) if compress else payload


def write_snapshot(snapshot: Snapshot, path: Path, *, compress: bool = False) -> Path:
    payload = encode_snapshot(snapshot, compress=compress)
    path.write_bytes(payload)
    log.info(
        "Wrote %s records across %s collections to %s",
        snapshot.total_records,
        len(snapshot.collections),
        path,
    )
    return path
