"""Public domain model surface."""

from __future__ import annotations

from accoreg.domain.model.access import Admin, Permission, Role, User
from accoreg.domain.model.base import TimestampedRecord, TrackedRecord, new_id
from accoreg.domain.model.lodging import Room, RoomAllocation
from accoreg.domain.model.registration import ChildrenRegistration, Registration
from accoreg.domain.model.registry import (
    COLLECTIONS_BY_NAME,
    TRACKED_COLLECTIONS,
    CollectionDescriptor,
    describe,
    index_collections,
)
from accoreg.domain.model.system import SmsVerification, SystemConfig

__all__ = [
    "COLLECTIONS_BY_NAME",
    "TRACKED_COLLECTIONS",
    "Admin",
    "ChildrenRegistration",
    "CollectionDescriptor",
    "Permission",
    "Registration",
    "Role",
    "Room",
    "RoomAllocation",
    "SmsVerification",
    "SystemConfig",
    "TimestampedRecord",
    "TrackedRecord",
    "User",
    "describe",
    "index_collections",
    "new_id",
]
