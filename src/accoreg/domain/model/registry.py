"""Static descriptors for every tracked collection.

Descriptors are built once from the typed record classes. The differ and the
temporal helpers iterate ``fields`` / ``temporal_fields`` instead of reaching
into arbitrary attributes, so the set of compared fields is always bounded by
the model definition.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Final, get_args, get_type_hints

from accoreg.domain.model.access import Admin, Permission, Role, User
from accoreg.domain.model.base import TimestampedRecord, TrackedRecord
from accoreg.domain.model.lodging import Room, RoomAllocation
from accoreg.domain.model.registration import ChildrenRegistration, Registration
from accoreg.domain.model.system import SmsVerification, SystemConfig

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

DEFAULT_PRIMARY_KEY: Final[str] = "id"
DEFAULT_TIMESTAMP_FIELD: Final[str] = "updated_at"

_CAMEL_BOUNDARY: Final[re.Pattern[str]] = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True, slots=True, kw_only=True)
class CollectionDescriptor:
    """Static configuration of one tracked collection."""

    name: str
    primary_key: str = DEFAULT_PRIMARY_KEY
    timestamp_field: str | None = None
    fields: tuple[str, ...] = ()
    temporal_fields: tuple[str, ...] = ()
    # Persisted column order; empty when the storage layout is unknown.
    columns: tuple[str, ...] = ()
    table_name: str | None = None
    model: type[TrackedRecord] | None = None

    @property
    def aliases(self) -> tuple[str, ...]:
        """Names under which the collection may appear in a statement dump."""

        candidates = [self.name, self.name.lower(), f"{self.name.lower()}s"]
        if self.table_name is not None:
            candidates.append(self.table_name)
        return tuple(dict.fromkeys(candidates))

    def field_name(self, name: str) -> str:
        """Map ``updatedAt`` style names onto the snake_case field they denote."""

        if name in self.fields:
            return name
        snake = _CAMEL_BOUNDARY.sub("_", name).lower()
        return snake if snake in self.fields else name

    @classmethod
    def untracked(cls, name: str, primary_key: str = DEFAULT_PRIMARY_KEY) -> CollectionDescriptor:
        """Descriptor for a collection that only appears in a backup."""

        return cls(name=name, primary_key=primary_key)


def _is_temporal(hint: object) -> bool:
    return hint is datetime or datetime in get_args(hint)


def describe(
    model: type[TrackedRecord],
    *,
    name: str | None = None,
    table_name: str | None = None,
) -> CollectionDescriptor:
    """Derive a descriptor from a record dataclass."""

    hints = get_type_hints(model)
    field_names = tuple(item.name for item in dataclasses.fields(model))
    temporal = tuple(field for field in field_names if _is_temporal(hints[field]))
    timestamp_field = (
        DEFAULT_TIMESTAMP_FIELD if issubclass(model, TimestampedRecord) else None
    )
    return CollectionDescriptor(
        name=name or model.__name__,
        timestamp_field=timestamp_field,
        fields=field_names,
        temporal_fields=temporal,
        table_name=table_name,
        model=model,
    )


# Parent collections come first so inserts respect foreign keys.
TRACKED_COLLECTIONS: Final[tuple[CollectionDescriptor, ...]] = (
    describe(Role, table_name="role"),
    describe(Permission, table_name="permissions"),
    describe(Admin, table_name="admin"),
    describe(User, table_name="users"),
    describe(Registration, table_name="registration"),
    describe(ChildrenRegistration, table_name="children_registrations"),
    describe(Room, table_name="rooms"),
    describe(RoomAllocation, table_name="room_allocations"),
    describe(SystemConfig, table_name="system_config"),
    describe(SmsVerification, name="SMSVerification", table_name="sms_verifications"),
)


def index_collections(
    collections: Iterable[CollectionDescriptor],
) -> Mapping[str, CollectionDescriptor]:
    """Return a read-only name -> descriptor lookup."""

    return MappingProxyType({descriptor.name: descriptor for descriptor in collections})


COLLECTIONS_BY_NAME: Final[Mapping[str, CollectionDescriptor]] = index_collections(
    TRACKED_COLLECTIONS
)
