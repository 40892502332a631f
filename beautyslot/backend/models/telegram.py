"""
Telegram Link Model.

Binding between a salon client (by phone) and a Telegram account.
"""

from datetime import datetime

from pydantic import Field

from beautyslot.backend.core.utils import utc_now
from beautyslot.backend.models.base import Base


class TelegramLink(Base):
    phone: str
    telegram_id: int
    client_id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    linked_at: datetime = Field(default_factory=utc_now)
