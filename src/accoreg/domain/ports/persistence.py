"""Ports for reading and writing tracked collections."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from accoreg.domain.backup.contracts import Record


@runtime_checkable
class CollectionRepository(Protocol):
    """Record-level access to one tracked collection.

    Writes are isolated from each other: a rejected write raises
    ``RecordWriteError`` and leaves the surrounding transaction usable. Any
    failure of the transaction itself surfaces as ``TransactionError``.
    """

    def find_all(self) -> list[Record]:
        """Return every record as a field mapping, ordered by primary key ascending."""
        ...

    def insert(self, record: Record) -> None: ...

    def update(self, key: object, fields: Record) -> None: ...
