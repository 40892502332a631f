"""
Telegram Admin Schemas.
"""

from datetime import datetime

from pydantic import BaseModel

from beautyslot.backend.models.telegram import TelegramLink


class LinkedAccount(TelegramLink):
    """A link enriched with the synced client's name and phone."""

    client_name: str
    client_phone: str


class SetWebhookRequest(BaseModel):
    url: str | None = None


class WebhookSetResponse(BaseModel):
    webhook_url: str
    message: str = "Webhook successfully configured"


class WebhookInfoResponse(BaseModel):
    url: str
    has_custom_certificate: bool = False
    pending_update_count: int = 0
    ip_address: str | None = None
    last_error_date: datetime | None = None
    last_error_message: str | None = None
    max_connections: int | None = None
    allowed_updates: list[str] | None = None
