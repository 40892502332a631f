"""
Notification Schemas.
"""

from datetime import datetime

from pydantic import BaseModel, Field, StrictBool, StrictStr

from beautyslot.backend.core.utils import utc_now
from beautyslot.backend.models.notification import NotificationTemplate


class SentNotificationStats(BaseModel):
    total: int
    by_type: dict[str, int]


class NotificationSettingsResponse(BaseModel):
    items: list[NotificationTemplate]
    stats: SentNotificationStats


class NotificationTemplateUpdate(BaseModel):
    """PATCH body; only a string message and a boolean flag count as updates."""

    id: StrictStr | None = None
    message: StrictStr | None = None
    is_active: StrictBool | None = None


class ReminderCounts(BaseModel):
    sent: int = 0
    skipped: int = 0
    failed: int = 0


class ReminderResults(BaseModel):
    reminder_day: ReminderCounts = Field(default_factory=ReminderCounts)
    reminder_hour: ReminderCounts = Field(default_factory=ReminderCounts)
    post_visit: ReminderCounts = Field(default_factory=ReminderCounts)


class ReminderRunResult(BaseModel):
    ok: bool = True
    timestamp: datetime = Field(default_factory=utc_now)
    results: ReminderResults = Field(default_factory=ReminderResults)
    cleaned: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def total_sent(self) -> int:
        return (
            self.results.reminder_day.sent
            + self.results.reminder_hour.sent
            + self.results.post_visit.sent
        )
