"""Canonical string form of temporal values.

Snapshots never hold ``datetime`` objects: every temporal field is rendered as
``YYYY-MM-DDTHH:MM:SS.mmmZ`` (UTC, millisecond precision). The rendering sorts
lexicographically, so comparing two snapshots is a plain equality check.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from accoreg.domain.model import CollectionDescriptor

    from .contracts import Record


def to_canonical(value: datetime | date) -> str:
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    rendered = value.astimezone(UTC).isoformat(timespec="milliseconds")
    return rendered.replace("+00:00", "Z")


def parse_temporal(value: object) -> datetime | None:
    """Return an aware UTC datetime for ``value`` or ``None`` if it is not temporal."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        normalized = value.strip()
        if not normalized:
            return None
        if normalized.endswith(("Z", "z")):
            normalized = normalized[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def canonicalize_value(value: object) -> object:
    """Render temporal values canonically; unparseable strings are kept verbatim."""

    if isinstance(value, datetime | date):
        return to_canonical(value)
    if isinstance(value, str):
        parsed = parse_temporal(value)
        return value if parsed is None else to_canonical(parsed)
    return value


def canonicalize_record(record: Record, descriptor: CollectionDescriptor) -> Record:
    canonical = dict(record)
    for field in descriptor.temporal_fields:
        if field in canonical and canonical[field] is not None:
            canonical[field] = canonicalize_value(canonical[field])
    return canonical


def restore_record(record: Record, descriptor: CollectionDescriptor) -> Record:
    """Turn canonical strings back into datetimes; unparseable values become ``None``."""

    restored = dict(record)
    for field in descriptor.temporal_fields:
        if field in restored and restored[field] is not None:
            restored[field] = parse_temporal(restored[field])
    return restored


def is_strictly_newer(candidate: object, reference: object) -> bool | None:
    """Compare two timestamp values; ``None`` when either side is missing or unparseable."""

    candidate_time = parse_temporal(candidate)
    reference_time = parse_temporal(reference)
    if candidate_time is None or reference_time is None:
        return None
    return candidate_time > reference_time
