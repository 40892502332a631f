"""
Notification Service.

Sends proactive messages to clients and the admin chat via Telegram:
reminders, order notices and bulk broadcasts. Handles per-chat rate
limiting and delivery bookkeeping. Sending never raises; failures are
reported in the result.

Usage:
    service = get_notification_service()

    result = await service.send(chat_id, "Запись подтверждена")
    result = await service.send_with_buttons(chat_id, text, book_button_keyboard())
    summary = await service.broadcast(chat_ids, text, reply_markup=book_button_keyboard())
"""

import asyncio
import html
import time
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from beautyslot.backend.core.config import get_app_config
from beautyslot.backend.core.logging import get_logger, log_with_source
from beautyslot.backend.core.utils import utc_now

if TYPE_CHECKING:
    from aiogram.types import InlineKeyboardMarkup

logger = get_logger(__name__)


def escape_html(text: str | None) -> str:
    """Escape &, < and > for Telegram HTML parse mode."""
    return html.escape(text or "", quote=False)


@dataclass
class NotificationResult:
    """Result of a single send attempt."""

    success: bool
    chat_id: int
    message_id: int | None = None
    error: str | None = None
    rate_limited: bool = False
    timestamp: datetime = field(default_factory=utc_now)


@dataclass
class BroadcastResult:
    """Summary of a bulk send."""

    total: int = 0
    sent: int = 0
    failed: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "sent": self.sent,
            "failed": self.failed,
            "errors": list(self.errors),
        }


class NotificationService:
    """
    Telegram sender with a sliding-window rate limit per chat.

    Limits come from telegram.yaml (``rate_limiting``) unless given.
    """

    def __init__(
        self,
        bot: Any = None,
        rate_limit: int | None = None,
        rate_window: int | None = None,
    ) -> None:
        telegram_config = get_app_config().telegram
        self._bot = bot
        self.rate_limit = rate_limit or telegram_config.rate_limiting.messages_per_minute
        self.rate_window = rate_window or telegram_config.rate_limiting.window_seconds
        self.broadcast_delay = telegram_config.broadcast_delay_seconds
        self._rate_limits: dict[int, list[float]] = defaultdict(list)

    @property
    def bot(self) -> Any:
        if self._bot is None:
            from beautyslot.telegram.bot import get_bot

            self._bot = get_bot()
        return self._bot

    def _check_rate_limit(self, chat_id: int) -> bool:
        """Record an attempt; False when the chat is over its limit."""
        now = time.time()
        window_start = now - self.rate_window

        self._rate_limits[chat_id] = [
            ts for ts in self._rate_limits[chat_id] if ts > window_start
        ]
        if len(self._rate_limits[chat_id]) >= self.rate_limit:
            return False

        self._rate_limits[chat_id].append(now)
        return True

    async def send(
        self,
        chat_id: int,
        text: str,
        reply_markup: Any = None,
        disable_notification: bool = False,
    ) -> NotificationResult:
        """
        Send a message (HTML parse mode).

        Args:
            chat_id: Telegram chat id
            text: Message text, HTML allowed
            reply_markup: Optional keyboard
            disable_notification: Send silently

        Returns:
            NotificationResult with success status
        """
        if not self._check_rate_limit(chat_id):
            log_with_source(logger, "telegram", "warning", "Rate limit exceeded for chat", chat_id=chat_id)
            return NotificationResult(
                success=False,
                chat_id=chat_id,
                rate_limited=True,
                error="Rate limit exceeded",
            )

        try:
            message = await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                reply_markup=reply_markup,
                disable_notification=disable_notification,
            )
        except Exception as e:
            log_with_source(
                logger,
                "telegram",
                "error",
                "Failed to send notification",
                chat_id=chat_id,
                error=str(e),
            )
            return NotificationResult(success=False, chat_id=chat_id, error=str(e))

        log_with_source(
            logger,
            "telegram",
            "info",
            "Notification sent",
            chat_id=chat_id,
            message_id=message.message_id,
        )
        return NotificationResult(success=True, chat_id=chat_id, message_id=message.message_id)

    async def send_with_buttons(
        self,
        chat_id: int,
        text: str,
        buttons: "InlineKeyboardMarkup",
    ) -> NotificationResult:
        """Send a message with an inline keyboard."""
        return await self.send(chat_id, text, reply_markup=buttons)

    async def broadcast(
        self,
        chat_ids: list[int],
        text: str,
        reply_markup: Any = None,
        delay_between: float | None = None,
    ) -> BroadcastResult:
        """
        Send one message to many chats, one at a time.

        Args:
            chat_ids: Recipients
            text: Message text
            reply_markup: Optional keyboard attached to every message
            delay_between: Pause between sends; telegram.yaml value by default

        Returns:
            BroadcastResult with per-chat errors
        """
        delay = self.broadcast_delay if delay_between is None else delay_between
        result = BroadcastResult(total=len(chat_ids))

        for chat_id in chat_ids:
            sent = await self.send(chat_id, text, reply_markup=reply_markup)
            if sent.success:
                result.sent += 1
            else:
                result.failed += 1
                result.errors.append({"chat_id": chat_id, "error": sent.error or "Unknown error"})

            if delay > 0:
                await asyncio.sleep(delay)

        log_with_source(
            logger,
            "telegram",
            "info",
            "Broadcast completed",
            total=result.total,
            sent=result.sent,
            failed=result.failed,
        )
        return result


_notification_service: NotificationService | None = None


def get_notification_service() -> NotificationService:
    """Get or create the notification service singleton."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service


def reset_notification_service() -> None:
    global _notification_service
    _notification_service = None
