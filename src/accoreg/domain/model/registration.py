"""Attendee registrations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003

from accoreg.domain.model.base import TimestampedRecord


@dataclass(eq=False, kw_only=True)
class Registration(TimestampedRecord):
    full_name: str
    date_of_birth: datetime
    gender: str
    address: str
    branch: str
    phone_number: str
    email_address: str
    emergency_contact_name: str
    emergency_contact_relationship: str
    emergency_contact_phone: str
    qr_code: str
    age: int = 0

    parent_guardian_name: str | None = None
    parent_guardian_phone: str | None = None
    parent_guardian_email: str | None = None
    roommate_request_confirmation_number: str | None = None

    medications: str | None = None
    allergies: str | None = None
    special_needs: str | None = None
    dietary_restrictions: str | None = None

    # attendance check-in
    is_verified: bool = False
    verified_at: datetime | None = None
    verified_by: str | None = None
    unverified_at: datetime | None = None
    unverified_by: str | None = None
    unverification_reason: str | None = None
    attendance_time: datetime | None = None

    parental_permission_granted: bool = False
    parental_permission_date: datetime | None = None


@dataclass(eq=False, kw_only=True)
class ChildrenRegistration(TimestampedRecord):
    full_name: str
    date_of_birth: datetime
    gender: str
    address: str
    branch: str
    parent_guardian_name: str
    parent_guardian_phone: str
    parent_guardian_email: str
    age: int = 0
