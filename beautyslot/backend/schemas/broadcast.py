"""
Broadcast Schemas.

Required fields are optional here and checked in the service so that a
missing title or message answers 400 like the other business rules.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from beautyslot.backend.models.broadcast import Broadcast, BroadcastStatus, RecipientType


class BroadcastCreate(BaseModel):
    title: str | None = None
    message: str | None = None
    recipient_type: RecipientType = RecipientType.ALL
    segment_id: str | None = None
    client_ids: list[int] = Field(default_factory=list)
    scheduled_at: datetime | None = None


class BroadcastUpdate(BaseModel):
    title: str | None = None
    message: str | None = None
    recipient_type: RecipientType | None = None
    scheduled_at: datetime | None = None
    status: BroadcastStatus | None = None


class SegmentBroadcastCreate(BaseModel):
    segment_id: str | None = None
    title: str | None = None
    message: str | None = None
    send_immediately: bool = False


class DeliveryError(BaseModel):
    chat_id: int
    error: str


class BroadcastSendResult(BaseModel):
    """Outcome of sending one broadcast."""

    broadcast_id: int
    total: int
    sent: int
    failed: int
    errors: list[DeliveryError] = Field(default_factory=list)


class SegmentBroadcastResponse(BaseModel):
    broadcast: Broadcast
    segment: str | None = None
    message: str | None = None
    recipients: int = 0
    sent: int = 0
    failed: int = 0
    total: int = 0


class BroadcastStats(BaseModel):
    total: int
    this_month: int
    sent: int
    delivery_rate: int
    total_recipients: int
    total_sent: int
    total_failed: int
    linked_clients: int
