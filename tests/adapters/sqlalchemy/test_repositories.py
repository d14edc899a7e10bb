from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from accoreg.adapters.sqlalchemy import SqlAlchemyCollectionRepository
from accoreg.domain.backup import RecordWriteError
from accoreg.domain.model import COLLECTIONS_BY_NAME, TrackedRecord
from accoreg.domain.model.registry import CollectionDescriptor

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def _roles(session: Session) -> SqlAlchemyCollectionRepository[TrackedRecord]:
    return SqlAlchemyCollectionRepository(session, COLLECTIONS_BY_NAME["Role"])


def test_find_all_orders_by_primary_key(sqlite_session: Session) -> None:
    repository = _roles(sqlite_session)
    for key in ("c", "a", "b"):
        repository.insert({"id": key, "name": f"Role {key}"})

    records = repository.find_all()

    assert [record["id"] for record in records] == ["a", "b", "c"]
    assert set(records[0]) == set(COLLECTIONS_BY_NAME["Role"].fields)


def test_insert_fills_timestamp_defaults(sqlite_session: Session) -> None:
    repository = _roles(sqlite_session)

    repository.insert({"id": "r1", "name": "Admin", "created_at": None})

    record = repository.find_all()[0]
    assert isinstance(record["created_at"], datetime)
    assert record["created_at"].tzinfo is not None


def test_insert_keeps_supplied_timestamps(sqlite_session: Session) -> None:
    repository = _roles(sqlite_session)
    created = datetime(2023, 5, 1, 8, 30, tzinfo=UTC)

    repository.insert({"id": "r1", "name": "Admin", "created_at": created, "updated_at": created})

    assert repository.find_all()[0]["created_at"] == created


def test_rejected_insert_leaves_session_usable(sqlite_session: Session) -> None:
    repository = _roles(sqlite_session)
    repository.insert({"id": "r1", "name": "Admin"})

    with pytest.raises(RecordWriteError, match="UNIQUE"):
        repository.insert({"id": "r2", "name": "Admin"})

    repository.insert({"id": "r3", "name": "Usher"})
    sqlite_session.commit()
    assert [record["id"] for record in repository.find_all()] == ["r1", "r3"]


def test_insert_without_required_field_is_rejected(sqlite_session: Session) -> None:
    repository = _roles(sqlite_session)

    with pytest.raises(RecordWriteError):
        repository.insert({"id": "r1"})


def test_insert_violating_foreign_key_is_rejected(sqlite_session: Session) -> None:
    permissions = SqlAlchemyCollectionRepository(sqlite_session, COLLECTIONS_BY_NAME["Permission"])

    with pytest.raises(RecordWriteError):
        permissions.insert(
            {
                "id": "p1",
                "name": "read",
                "resource": "registrations",
                "action": "read",
                "role_id": "missing",
            }
        )


def test_insert_ignores_unknown_fields(sqlite_session: Session) -> None:
    repository = _roles(sqlite_session)

    repository.insert({"id": "r1", "name": "Admin", "legacy_flag": True})

    assert repository.find_all()[0]["name"] == "Admin"


def test_update_sets_known_fields(sqlite_session: Session) -> None:
    repository = _roles(sqlite_session)
    repository.insert({"id": "r1", "name": "Admin"})

    repository.update("r1", {"name": "Super Admin", "is_active": False, "legacy": 1})

    record = repository.find_all()[0]
    assert record["name"] == "Super Admin"
    assert record["is_active"] is False


def test_update_of_missing_record_is_rejected(sqlite_session: Session) -> None:
    repository = _roles(sqlite_session)

    with pytest.raises(RecordWriteError, match="missing"):
        repository.update("missing", {"name": "Ghost"})


def test_update_violating_unique_constraint_is_rejected(sqlite_session: Session) -> None:
    repository = _roles(sqlite_session)
    repository.insert({"id": "r1", "name": "Admin"})
    repository.insert({"id": "r2", "name": "Usher"})

    with pytest.raises(RecordWriteError):
        repository.update("r2", {"name": "Admin"})

    names = sorted(str(record["name"]) for record in repository.find_all())
    assert names == ["Admin", "Usher"]


def test_repository_requires_mapped_model(sqlite_session: Session) -> None:
    with pytest.raises(ValueError, match="no mapped model"):
        SqlAlchemyCollectionRepository(sqlite_session, CollectionDescriptor.untracked("Legacy"))
