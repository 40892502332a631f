"""
Notification Models.

Client-facing message templates and the log of reminders already sent.
"""

from datetime import datetime
from enum import StrEnum
from typing import Literal

from pydantic import Field

from beautyslot.backend.core.utils import utc_now
from beautyslot.backend.models.base import Base


class NotificationType(StrEnum):
    AFTER_BOOKING = "after_booking"
    BOOKING_REMINDER_DAY = "booking_reminder_day"
    BOOKING_REMINDER_HOUR = "booking_reminder_hour"
    BOOKING_RESCHEDULED = "booking_rescheduled"
    BOOKING_CANCELLED = "booking_cancelled"
    POST_VISIT = "post_visit"
    BIRTHDAY = "birthday"
    WELCOME = "welcome"


class NotificationTemplate(Base):
    id: str
    type: NotificationType
    name: str
    description: str = ""
    category: Literal["visits", "marketing"]
    message: str
    is_active: bool = True
    variables: list[str] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=utc_now)


class SentNotification(Base):
    """A reminder that already went out, keyed for de-duplication."""

    record_id: int
    type: NotificationType
    dedupe_key: str
    telegram_id: int
    sent_at: datetime = Field(default_factory=utc_now)

    @property
    def key(self) -> str:
        return f"{self.record_id}:{self.type}:{self.dedupe_key}"
