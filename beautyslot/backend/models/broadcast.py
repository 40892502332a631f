"""
Broadcast Model.

A bulk Telegram message to linked clients.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from beautyslot.backend.core.utils import utc_now
from beautyslot.backend.models.base import Base


class BroadcastStatus(StrEnum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    SENT = "SENT"
    FAILED = "FAILED"


class RecipientType(StrEnum):
    ALL = "ALL"
    SEGMENT = "SEGMENT"
    CUSTOM = "CUSTOM"


class Broadcast(Base):
    """
    Stored broadcast.

    ``client_ids`` holds the explicit audience for CUSTOM broadcasts and
    the matched clients for SEGMENT broadcasts.
    """

    id: int
    title: str
    message: str
    status: BroadcastStatus = BroadcastStatus.DRAFT
    recipient_type: RecipientType = RecipientType.ALL
    segment_id: str | None = None
    client_ids: list[int] = Field(default_factory=list)
    recipients_count: int = 0
    sent_count: int = 0
    failed_count: int = 0
    scheduled_at: datetime | None = None
    sent_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
