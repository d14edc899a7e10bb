"""Rooms and room allocations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003

from accoreg.domain.model.base import TimestampedRecord, TrackedRecord


@dataclass(eq=False, kw_only=True)
class Room(TimestampedRecord):
    name: str
    gender: str
    capacity: int
    is_active: bool = True
    description: str | None = None


@dataclass(eq=False, kw_only=True)
class RoomAllocation(TrackedRecord):
    """Allocation rows are never edited in place, so they carry no update timestamp."""

    registration_id: str
    room_id: str
    allocated_at: datetime | None = None
    allocated_by: str | None = None
