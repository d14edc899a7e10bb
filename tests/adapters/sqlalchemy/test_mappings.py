from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, inspect, select

from accoreg.adapters.sqlalchemy import (
    TABLE_BY_MODEL,
    create_all_tables,
    persisted_collections,
    start_mappers,
)
from accoreg.adapters.sqlalchemy.mappings import role_table
from accoreg.domain.model import TRACKED_COLLECTIONS, Role

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def test_start_mappers_is_idempotent() -> None:
    # First invocation happens in the sqlite_engine fixture; calling again should be harmless.
    start_mappers()
    start_mappers()


def test_every_tracked_collection_has_a_table() -> None:
    for descriptor in TRACKED_COLLECTIONS:
        assert descriptor.model is not None
        table = TABLE_BY_MODEL[descriptor.model]
        assert table.name == descriptor.table_name
        assert set(table.c.keys()) == set(descriptor.fields)


def test_persisted_collections_carry_table_column_order() -> None:
    persisted = persisted_collections()

    assert [descriptor.name for descriptor in persisted] == [
        descriptor.name for descriptor in TRACKED_COLLECTIONS
    ]
    for descriptor in persisted:
        assert descriptor.model is not None
        assert descriptor.columns == tuple(TABLE_BY_MODEL[descriptor.model].c.keys())
    assert all(not descriptor.columns for descriptor in TRACKED_COLLECTIONS)


def test_create_all_tables_matches_migrated_schema(sqlite_engine: Engine) -> None:
    fresh = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_all_tables(fresh)

    migrated = inspect(sqlite_engine)
    created = inspect(fresh)
    for descriptor in TRACKED_COLLECTIONS:
        assert descriptor.table_name is not None
        table_name = descriptor.table_name
        assert {column["name"] for column in migrated.get_columns(table_name)} == {
            column["name"] for column in created.get_columns(table_name)
        }
    fresh.dispose()


def test_datetimes_are_stored_as_utc(sqlite_session: Session) -> None:
    lagos = timezone(timedelta(hours=1))
    role = Role(name="Admin", created_at=datetime(2024, 1, 1, 1, 0, tzinfo=lagos))
    sqlite_session.add(role)
    sqlite_session.commit()
    sqlite_session.expire_all()

    created_at = sqlite_session.execute(
        select(role_table.c.created_at).where(role_table.c.id == role.id)
    ).scalar_one()

    assert created_at == datetime(2024, 1, 1, tzinfo=UTC)
    assert created_at.tzinfo is not None
