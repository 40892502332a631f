"""
Rate Limiting Middleware.

Caps how many messages and button presses one Telegram user can send
within a sliding window. State lives in process memory.
"""

import time
from collections import defaultdict, deque
from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from beautyslot.backend.core.config import get_app_config
from beautyslot.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

THROTTLED_TEXT = "⏳ Слишком много запросов. Подождите {seconds} сек."


class RateLimitMiddleware(BaseMiddleware):
    """
    Drop updates from users who exceeded ``rate_limit`` hits per ``rate_window`` seconds.

    Throttled users get a short notice instead of a handler call. Defaults
    come from ``telegram.rate_limiting`` in telegram.yaml.

    Usage:
        dp.message.middleware(RateLimitMiddleware())
        dp.callback_query.middleware(RateLimitMiddleware(rate_limit=10, rate_window=30))
    """

    def __init__(self, rate_limit: int | None = None, rate_window: int | None = None) -> None:
        limits = get_app_config().telegram.rate_limiting
        self.rate_limit = limits.messages_per_minute if rate_limit is None else rate_limit
        self.rate_window = limits.window_seconds if rate_window is None else rate_window
        self._hits: dict[int, deque[float]] = defaultdict(deque)

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        if not isinstance(event, (Message, CallbackQuery)) or not event.from_user:
            return await handler(event, data)

        user_id = event.from_user.id
        now = time.time()
        wait = self._seconds_to_wait(user_id, now)
        if wait:
            log_with_source(
                logger,
                "telegram",
                "warning",
                "Rate limit exceeded",
                user_id=user_id,
                rate_limit=self.rate_limit,
                rate_window=self.rate_window,
            )
            await self._notify_throttled(event, wait)
            return None

        self._hits[user_id].append(now)
        return await handler(event, data)

    def _seconds_to_wait(self, user_id: int, now: float) -> int:
        """Forget hits older than the window; 0 means the user may proceed."""
        hits = self._hits[user_id]
        while hits and hits[0] <= now - self.rate_window:
            hits.popleft()
        if len(hits) < self.rate_limit:
            return 0
        return int(self.rate_window - (now - hits[0])) + 1

    @staticmethod
    async def _notify_throttled(event: Message | CallbackQuery, seconds: int) -> None:
        text = THROTTLED_TEXT.format(seconds=seconds)
        if isinstance(event, CallbackQuery):
            await event.answer(text, show_alert=True)
        else:
            await event.answer(text)
