"""Base building blocks shared by every tracked collection record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from uuid import uuid4


def new_id() -> str:
    return uuid4().hex


@dataclass(eq=False, kw_only=True)
class TrackedRecord:
    """A row of a tracked collection, identified by a string primary key."""

    id: str = field(default_factory=new_id)


@dataclass(eq=False, kw_only=True)
class TimestampedRecord(TrackedRecord):
    """Tracked record carrying creation and last-modified timestamps."""

    created_at: datetime | None = None
    updated_at: datetime | None = None
