"""Administrative accounts, roles and permissions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003

from accoreg.domain.model.base import TimestampedRecord


@dataclass(eq=False, kw_only=True)
class Role(TimestampedRecord):
    name: str
    description: str | None = None
    is_active: bool = True


@dataclass(eq=False, kw_only=True)
class Permission(TimestampedRecord):
    name: str
    resource: str
    action: str
    role_id: str
    description: str | None = None


@dataclass(eq=False, kw_only=True)
class Admin(TimestampedRecord):
    email: str
    password: str
    name: str
    role_id: str | None = None
    is_active: bool = True
    last_login: datetime | None = None


@dataclass(eq=False, kw_only=True)
class User(TimestampedRecord):
    email: str
    name: str
    password: str
    role_id: str
    phone_number: str | None = None
    phone_verified: bool = False
    phone_verified_at: datetime | None = None
    is_active: bool = True
    last_login: datetime | None = None
    created_by: str | None = None
