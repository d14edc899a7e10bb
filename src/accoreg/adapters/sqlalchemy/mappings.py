"""SQLAlchemy mapping metadata for the tracked collections."""

from __future__ import annotations

import dataclasses
import logging
from datetime import UTC, datetime
from functools import cache
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    orm,
)
from sqlalchemy.orm import configure_mappers

from accoreg.domain.model import (
    TRACKED_COLLECTIONS,
    Admin,
    ChildrenRegistration,
    Permission,
    Registration,
    Role,
    Room,
    RoomAllocation,
    SmsVerification,
    SystemConfig,
    TrackedRecord,
    User,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from sqlalchemy.engine import Engine

    from accoreg.domain.model import CollectionDescriptor

log = logging.getLogger(__name__)

ID_LENGTH: Final[int] = 64


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _id_column() -> Column[str]:
    return Column("id", String(ID_LENGTH), primary_key=True)


def _timestamp_columns() -> tuple[Column[datetime], Column[datetime]]:
    return (
        Column("created_at", UTCDateTime(), nullable=False, default=_utcnow),
        Column("updated_at", UTCDateTime(), nullable=False, default=_utcnow),
    )


# Access control ---------------------------------------------------------------

role_table = Table(
    "role",
    mapper_registry.metadata,
    _id_column(),
    Column("name", String, nullable=False, unique=True),
    Column("description", Text, nullable=True),
    Column("is_active", Boolean, nullable=False, default=True),
    *_timestamp_columns(),
)

permission_table = Table(
    "permissions",
    mapper_registry.metadata,
    _id_column(),
    Column("name", String, nullable=False),
    Column("resource", String, nullable=False),
    Column("action", String, nullable=False),
    Column(
        "role_id",
        String(ID_LENGTH),
        ForeignKey("role.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("description", Text, nullable=True),
    *_timestamp_columns(),
)

admin_table = Table(
    "admin",
    mapper_registry.metadata,
    _id_column(),
    Column("email", String, nullable=False, unique=True),
    Column("password", String, nullable=False),
    Column("name", String, nullable=False),
    Column("role_id", String(ID_LENGTH), ForeignKey("role.id"), nullable=True),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("last_login", UTCDateTime(), nullable=True),
    *_timestamp_columns(),
)

user_table = Table(
    "users",
    mapper_registry.metadata,
    _id_column(),
    Column("email", String, nullable=False, unique=True),
    Column("name", String, nullable=False),
    Column("password", String, nullable=False),
    Column("role_id", String(ID_LENGTH), ForeignKey("role.id"), nullable=False),
    Column("phone_number", String, nullable=True),
    Column("phone_verified", Boolean, nullable=False, default=False),
    Column("phone_verified_at", UTCDateTime(), nullable=True),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("last_login", UTCDateTime(), nullable=True),
    Column("created_by", String(ID_LENGTH), nullable=True),
    *_timestamp_columns(),
)

# Registrations ----------------------------------------------------------------

registration_table = Table(
    "registration",
    mapper_registry.metadata,
    _id_column(),
    Column("full_name", String, nullable=False),
    Column("date_of_birth", UTCDateTime(), nullable=False),
    Column("age", Integer, nullable=False, default=0),
    Column("gender", String, nullable=False),
    Column("address", Text, nullable=False),
    Column("branch", String, nullable=False, index=True),
    Column("phone_number", String, nullable=False),
    Column("email_address", String, nullable=False, index=True),
    Column("emergency_contact_name", String, nullable=False),
    Column("emergency_contact_relationship", String, nullable=False),
    Column("emergency_contact_phone", String, nullable=False),
    Column("parent_guardian_name", String, nullable=True),
    Column("parent_guardian_phone", String, nullable=True),
    Column("parent_guardian_email", String, nullable=True),
    Column("roommate_request_confirmation_number", String, nullable=True),
    Column("medications", Text, nullable=True),
    Column("allergies", Text, nullable=True),
    Column("special_needs", Text, nullable=True),
    Column("dietary_restrictions", Text, nullable=True),
    Column("qr_code", String, nullable=False, unique=True),
    Column("is_verified", Boolean, nullable=False, default=False),
    Column("verified_at", UTCDateTime(), nullable=True),
    Column("verified_by", String, nullable=True),
    Column("unverified_at", UTCDateTime(), nullable=True),
    Column("unverified_by", String, nullable=True),
    Column("unverification_reason", Text, nullable=True),
    Column("attendance_time", UTCDateTime(), nullable=True),
    Column("parental_permission_granted", Boolean, nullable=False, default=False),
    Column("parental_permission_date", UTCDateTime(), nullable=True),
    *_timestamp_columns(),
)

children_registration_table = Table(
    "children_registrations",
    mapper_registry.metadata,
    _id_column(),
    Column("full_name", String, nullable=False),
    Column("date_of_birth", UTCDateTime(), nullable=False),
    Column("age", Integer, nullable=False, default=0),
    Column("gender", String, nullable=False),
    Column("address", Text, nullable=False),
    Column("branch", String, nullable=False),
    Column("parent_guardian_name", String, nullable=False),
    Column("parent_guardian_phone", String, nullable=False),
    Column("parent_guardian_email", String, nullable=False),
    *_timestamp_columns(),
)

# Lodging ----------------------------------------------------------------------

room_table = Table(
    "rooms",
    mapper_registry.metadata,
    _id_column(),
    Column("name", String, nullable=False, unique=True),
    Column("gender", String, nullable=False),
    Column("capacity", Integer, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("description", Text, nullable=True),
    *_timestamp_columns(),
)

room_allocation_table = Table(
    "room_allocations",
    mapper_registry.metadata,
    _id_column(),
    Column(
        "registration_id",
        String(ID_LENGTH),
        ForeignKey("registration.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
    Column(
        "room_id",
        String(ID_LENGTH),
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("allocated_at", UTCDateTime(), nullable=False, default=_utcnow),
    Column("allocated_by", String, nullable=True),
)

# System -----------------------------------------------------------------------

system_config_table = Table(
    "system_config",
    mapper_registry.metadata,
    _id_column(),
    Column("key", String, nullable=False, unique=True),
    Column("value", Text, nullable=False),
    Column("description", Text, nullable=True),
    *_timestamp_columns(),
)

sms_verification_table = Table(
    "sms_verifications",
    mapper_registry.metadata,
    _id_column(),
    Column("phone_number", String, nullable=False, index=True),
    Column("code", String, nullable=False),
    Column("expires_at", UTCDateTime(), nullable=False),
    Column("attempts", Integer, nullable=False, default=0),
    Column("verified", Boolean, nullable=False, default=False),
    *_timestamp_columns(),
)

TABLE_BY_MODEL: Final[Mapping[type[TrackedRecord], Table]] = MappingProxyType(
    {
        Role: role_table,
        Permission: permission_table,
        Admin: admin_table,
        User: user_table,
        Registration: registration_table,
        ChildrenRegistration: children_registration_table,
        Room: room_table,
        RoomAllocation: room_allocation_table,
        SystemConfig: system_config_table,
        SmsVerification: sms_verification_table,
    }
)


@cache
def start_mappers() -> orm.registry:
    """Map every tracked record class onto its table (idempotent)."""

    for model, table in TABLE_BY_MODEL.items():
        mapper_registry.map_imperatively(model, table)
    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)


def persisted_collections(
    collections: Iterable[CollectionDescriptor] = TRACKED_COLLECTIONS,
) -> tuple[CollectionDescriptor, ...]:
    """Attach each table's column order to its descriptor.

    SQL dumps may omit the column list of an ``INSERT``; the values then follow
    the table layout, which only the mapping knows.
    """

    return tuple(
        dataclasses.replace(
            descriptor,
            columns=tuple(TABLE_BY_MODEL[descriptor.model].c.keys()),
        )
        if descriptor.model is not None
        else descriptor
        for descriptor in collections
    )
