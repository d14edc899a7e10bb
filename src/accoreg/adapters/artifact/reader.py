"""Decode backup artifacts into snapshots.

Two encodings are recognised, optionally wrapped in gzip:

* the canonical structured JSON document written by
  :func:`accoreg.adapters.artifact.writer.encode_snapshot`;
* a textual SQL statement dump, recovered heuristically by
  :mod:`accoreg.adapters.artifact.dump`.

Anything else raises :class:`UnsupportedFormatError`; an empty snapshot is
never returned for an unrecognised artifact.
"""

from __future__ import annotations

import gzip
import logging
import zlib
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from accoreg.domain.backup.contracts import CollectionSnapshot, Snapshot, SnapshotMetadata
from accoreg.domain.backup.errors import UnsupportedFormatError
from accoreg.domain.backup.temporal import canonicalize_record, to_canonical
from accoreg.domain.model import TRACKED_COLLECTIONS, CollectionDescriptor

from .dump import looks_like_dump, normalize_field_name, recover_records
from .schema import BackupArtifact

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from accoreg.domain.backup.contracts import Record

    from .schema import ArtifactTable

log = logging.getLogger(__name__)

GZIP_MAGIC: Final[bytes] = b"\x1f\x8b"


def _alias_index(
    collections: Iterable[CollectionDescriptor],
) -> Mapping[str, CollectionDescriptor]:
    index: dict[str, CollectionDescriptor] = {}
    for descriptor in collections:
        for alias in descriptor.aliases:
            index.setdefault(alias.lower(), descriptor)
    return index


def _decompress(artifact: bytes) -> bytes:
    if not artifact.startswith(GZIP_MAGIC):
        return artifact
    try:
        return gzip.decompress(artifact)
    except (OSError, EOFError, zlib.error) as exc:
        raise UnsupportedFormatError(f"Corrupt gzip stream: {exc}") from exc


def _decode(payload: bytes) -> str:
    try:
        return payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise UnsupportedFormatError("Backup artifact is not UTF-8 text") from exc


def _tracked_record(record: Mapping[str, object], descriptor: CollectionDescriptor) -> Record:
    renamed = {normalize_field_name(key, descriptor): value for key, value in record.items()}
    return canonicalize_record(renamed, descriptor)


def _table_snapshot(
    table: ArtifactTable,
    aliases: Mapping[str, CollectionDescriptor],
) -> CollectionSnapshot:
    descriptor = aliases.get(table.table_name.lower())
    if descriptor is None:
        log.info("Backup table %s is not tracked; keeping records untouched", table.table_name)
        return CollectionSnapshot(
            descriptor=CollectionDescriptor.untracked(table.table_name, table.primary_key),
            records=[dict(record) for record in table.records],
        )
    if table.primary_key != descriptor.primary_key:
        raise UnsupportedFormatError(
            f"Table {table.table_name} declares primary key {table.primary_key!r}, "
            f"expected {descriptor.primary_key!r}"
        )
    return CollectionSnapshot(
        descriptor=descriptor,
        records=[_tracked_record(record, descriptor) for record in table.records],
    )


def _read_structured(text: str, collections: tuple[CollectionDescriptor, ...]) -> Snapshot:
    try:
        artifact = BackupArtifact.model_validate_json(text)
    except ValidationError as exc:
        raise UnsupportedFormatError(f"Invalid structured backup: {exc}") from exc

    aliases = _alias_index(collections)
    snapshots: list[CollectionSnapshot] = []
    for table in artifact.tables:
        snapshot = _table_snapshot(table, aliases)
        existing = next((item for item in snapshots if item.name == snapshot.name), None)
        if existing is not None:
            raise UnsupportedFormatError(f"Table {snapshot.name} appears more than once")
        snapshots.append(snapshot)

    exported_at = artifact.metadata.exported_at or to_canonical(datetime.now(UTC))
    return Snapshot(
        collections=snapshots,
        metadata=SnapshotMetadata(
            exported_at=exported_at,
            version=artifact.metadata.version,
            record_counts={item.name: len(item.records) for item in snapshots},
        ),
    )


def _read_dump(text: str, collections: tuple[CollectionDescriptor, ...]) -> Snapshot:
    recovered = recover_records(text, collections)
    if not recovered:
        raise UnsupportedFormatError("Statement dump contains no readable tracked records")

    snapshots = [
        CollectionSnapshot(
            descriptor=descriptor,
            records=[
                canonicalize_record(record, descriptor)
                for record in recovered[descriptor.name]
            ],
        )
        for descriptor in collections
        if descriptor.name in recovered
    ]
    return Snapshot(
        collections=snapshots,
        metadata=SnapshotMetadata(
            exported_at=to_canonical(datetime.now(UTC)),
            record_counts={item.name: len(item.records) for item in snapshots},
        ),
    )


def extract_backup(
    artifact: bytes | str,
    collections: Iterable[CollectionDescriptor] = TRACKED_COLLECTIONS,
) -> Snapshot:
    """Decode ``artifact`` into a snapshot shaped like the live extraction."""

    payload = artifact.encode("utf-8") if isinstance(artifact, str) else artifact
    text = _decode(_decompress(payload)).strip()
    tracked = tuple(collections)

    if text.startswith(("{", "[")):
        snapshot = _read_structured(text, tracked)
        encoding = "structured"
    elif looks_like_dump(text):
        snapshot = _read_dump(text, tracked)
        encoding = "dump"
    else:
        raise UnsupportedFormatError("Backup artifact matches no known encoding")

    log.info(
        "Read %s backup with %s records across %s collections",
        encoding,
        snapshot.total_records,
        len(snapshot.collections),
    )
    return snapshot


def read_backup_file(
    path: Path,
    collections: Iterable[CollectionDescriptor] = TRACKED_COLLECTIONS,
) -> Snapshot:
    return extract_backup(path.read_bytes(), collections)
