"""Conflict resolution policies.

Responsibilities of this stage:
- turn one changed (current, incoming) pair into the record to persist
- return ``None`` when the current record must be kept as is

Out of scope for this stage:
- conflict detection (see ``diff``)
- persistence
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .contracts import ConflictPolicy
from .temporal import is_strictly_newer

if TYPE_CHECKING:
    from .contracts import MergeOptions, Record


def resolve(
    current: Record,
    incoming: Record,
    options: MergeOptions,
    timestamp_field: str | None = None,
) -> Record | None:
    """Return the record to write, or ``None`` to keep ``current``.

    ``preserve_newer`` is checked before the policy and only applies when both
    timestamps are present and parseable.
    """

    if options.preserve_newer and timestamp_field is not None:
        current_is_newer = is_strictly_newer(
            current.get(timestamp_field), incoming.get(timestamp_field)
        )
        if current_is_newer:
            return None

    match options.conflict_resolution:
        case ConflictPolicy.INCOMING_WINS | ConflictPolicy.MANUAL:
            return incoming
        case ConflictPolicy.CURRENT_WINS:
            return None
        case ConflictPolicy.MERGE_FIELDS:
            merged = dict(current)
            for field, value in incoming.items():
                if field != timestamp_field:
                    merged[field] = value
            return merged
