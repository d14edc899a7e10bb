from __future__ import annotations

from typing import TYPE_CHECKING

from accoreg.adapters.artifact import encode_snapshot, extract_backup
from accoreg.domain.backup import (
    ConflictPolicy,
    MergeExecutor,
    MergeOptions,
    extract_current,
)
from accoreg.domain.backup.temporal import restore_record
from accoreg.domain.model import COLLECTIONS_BY_NAME, TRACKED_COLLECTIONS
from tests.helpers.records import make_snapshot, registration_record, role_record, room_record

if TYPE_CHECKING:
    from collections.abc import Callable

    from accoreg.adapters.sqlalchemy import SqlAlchemyMergeUnitOfWork
    from accoreg.domain.backup import Record

    UnitOfWorkFactory = Callable[[], SqlAlchemyMergeUnitOfWork]


def _records(factory: UnitOfWorkFactory, collection: str) -> list[Record]:
    with factory() as uow:
        repository = uow.repositories.get(collection)
        assert repository is not None
        return repository.find_all()


def _seed(factory: UnitOfWorkFactory, collection: str, *records: Record) -> None:
    with factory() as uow:
        repository = uow.repositories.get(collection)
        assert repository is not None
        for record in records:
            repository.insert(restore_record(record, COLLECTIONS_BY_NAME[collection]))
        uow.commit()


def test_merge_into_empty_collection_adds_exactly_the_backup_records(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    _seed(sqlite_unit_of_work, "Role", {"id": "r1", "name": "Admin"})
    backup = make_snapshot({"Room": [room_record(f"room-{i}") for i in range(5)]})

    result = MergeExecutor(sqlite_unit_of_work).merge(backup, MergeOptions())

    assert result.success, result.errors
    assert result.summary.records_added == 5
    assert len(_records(sqlite_unit_of_work, "Room")) == 5
    assert len(_records(sqlite_unit_of_work, "Role")) == 1


def test_dry_run_does_not_touch_the_store(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    backup = make_snapshot({"Role": [role_record("r1"), role_record("r2")]})
    executor = MergeExecutor(sqlite_unit_of_work)

    first = executor.merge(backup, MergeOptions(dry_run=True))
    second = executor.merge(backup, MergeOptions(dry_run=True))

    assert first.summary == second.summary
    assert first.summary.records_added == 2
    assert _records(sqlite_unit_of_work, "Role") == []


def test_merge_of_exported_snapshot_changes_nothing(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    _seed(
        sqlite_unit_of_work,
        "Registration",
        *(
            {**registration_record(key), "created_at": None, "updated_at": None}
            for key in ("a", "b")
        ),
    )
    with sqlite_unit_of_work() as uow:
        exported = extract_current(uow.repositories, TRACKED_COLLECTIONS)
    backup = extract_backup(encode_snapshot(exported, compress=True))

    result = MergeExecutor(sqlite_unit_of_work).merge(backup, MergeOptions())

    assert result.success
    assert result.summary.records_added == 0
    assert result.summary.records_updated == 0
    assert result.summary.records_unchanged == 2
    assert result.summary.tables_processed == len(TRACKED_COLLECTIONS)


def test_merge_updates_changed_records(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    _seed(sqlite_unit_of_work, "Role", {"id": "r1", "name": "Admin"})
    backup = make_snapshot(
        {"Role": [role_record("r1", name="Super Admin", updated_at="2030-01-01T00:00:00.000Z")]}
    )

    result = MergeExecutor(sqlite_unit_of_work).merge(backup, MergeOptions())

    assert result.success
    assert result.summary.records_updated == 1
    assert _records(sqlite_unit_of_work, "Role")[0]["name"] == "Super Admin"


def test_preserve_newer_keeps_the_live_record(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    _seed(sqlite_unit_of_work, "Role", {"id": "r1", "name": "Admin"})
    backup = make_snapshot({"Role": [role_record("r1", name="Stale")]})

    result = MergeExecutor(sqlite_unit_of_work).merge(
        backup,
        MergeOptions(conflict_resolution=ConflictPolicy.INCOMING_WINS, preserve_newer=True),
    )

    assert result.success
    assert result.summary.records_skipped == 1
    assert _records(sqlite_unit_of_work, "Role")[0]["name"] == "Admin"


def test_rejected_rows_do_not_abort_the_merge(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    _seed(sqlite_unit_of_work, "Role", {"id": "r1", "name": "Admin"})
    backup = make_snapshot(
        {
            "Role": [
                role_record("r2", name="Admin"),
                role_record("r3", name="Usher"),
            ]
        }
    )

    result = MergeExecutor(sqlite_unit_of_work).merge(backup, MergeOptions())

    assert not result.success
    assert result.summary.records_added == 1
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Failed to add record r2 to Role:")
    assert [record["id"] for record in _records(sqlite_unit_of_work, "Role")] == ["r1", "r3"]


def test_children_are_inserted_after_their_parents(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    backup = make_snapshot(
        {
            "Permission": [
                {
                    "id": "p1",
                    "name": "read",
                    "resource": "registrations",
                    "action": "read",
                    "role_id": "r1",
                    "description": None,
                    "created_at": "2024-01-01T00:00:00.000Z",
                    "updated_at": "2024-01-01T00:00:00.000Z",
                }
            ],
            "Role": [role_record("r1")],
        }
    )

    result = MergeExecutor(sqlite_unit_of_work).merge(backup, MergeOptions())

    assert result.success, result.errors
    assert result.summary.records_added == 2
