"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, cast

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from accoreg.adapters.sqlalchemy.mappings import TABLE_BY_MODEL
from accoreg.domain.backup.errors import ExtractionError, RecordWriteError, TransactionError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.orm import Session

    from accoreg.domain.backup.contracts import Record
    from accoreg.domain.model import CollectionDescriptor, TrackedRecord

log = logging.getLogger(__name__)


def _is_connection_failure(exc: SQLAlchemyError) -> bool:
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


class SqlAlchemyCollectionRepository[TRecord: TrackedRecord]:
    """Record-level access to one tracked collection.

    Each write runs inside its own SAVEPOINT so a rejected row does not poison
    the surrounding transaction.
    """

    def __init__(self, session: Session, descriptor: CollectionDescriptor) -> None:
        if descriptor.model is None:
            raise ValueError(f"Collection {descriptor.name} has no mapped model")
        self.session = session
        self.descriptor = descriptor
        self._model = cast("type[TRecord]", descriptor.model)
        self._table = TABLE_BY_MODEL[descriptor.model]

    def find_all(self) -> list[Record]:
        primary_key = self._table.c[self.descriptor.primary_key]
        stmt = select(self._model).order_by(primary_key.asc())
        try:
            rows = self.session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            raise ExtractionError(f"Failed to read {self.descriptor.name}: {exc}") from exc
        return [self._to_record(row) for row in rows]

    def insert(self, record: Record) -> None:
        fields = dict(self._known_fields(record))
        with self._savepoint():
            try:
                entity = self._model(**fields)
            except TypeError as exc:
                raise RecordWriteError(str(exc)) from exc
            self.session.add(entity)
            self.session.flush()

    def update(self, key: object, fields: Record) -> None:
        with self._savepoint():
            entity = self.session.get(self._model, key)
            if entity is None:
                raise RecordWriteError(f"No {self.descriptor.name} record with key {key!r}")
            for field, value in self._known_fields(fields):
                if field != self.descriptor.primary_key:
                    setattr(entity, field, value)
            self.session.flush()

    def _to_record(self, entity: TRecord) -> Record:
        return {field: getattr(entity, field) for field in self.descriptor.fields}

    def _known_fields(self, record: Record) -> Iterator[tuple[str, object]]:
        for field, value in record.items():
            if field in self.descriptor.fields:
                yield field, value
            else:
                log.debug("Ignoring unknown field %s.%s", self.descriptor.name, field)

    @contextmanager
    def _savepoint(self) -> Iterator[None]:
        """Run one write in a nested transaction and translate store errors."""

        try:
            with self.session.begin_nested():
                yield
        except SQLAlchemyError as exc:
            if _is_connection_failure(exc):
                raise TransactionError(f"Connection lost during merge: {exc}") from exc
            orig = getattr(exc, "orig", None)
            raise RecordWriteError(str(orig or exc)) from exc


if TYPE_CHECKING:
    from accoreg.domain.model import COLLECTIONS_BY_NAME
    from accoreg.domain.ports.persistence import CollectionRepository

    _session_stub = cast("Session", object())
    _repo_check: CollectionRepository = SqlAlchemyCollectionRepository(
        _session_stub, COLLECTIONS_BY_NAME["Role"]
    )
