"""System configuration and phone verification codes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003

from accoreg.domain.model.base import TimestampedRecord


@dataclass(eq=False, kw_only=True)
class SystemConfig(TimestampedRecord):
    key: str
    value: str
    description: str | None = None


@dataclass(eq=False, kw_only=True)
class SmsVerification(TimestampedRecord):
    phone_number: str
    code: str
    expires_at: datetime
    attempts: int = 0
    verified: bool = False
