"""
Logging Middleware.

One structured record per Telegram update (source="telegram"). Phones
from shared contacts and typed text are masked before logging.
"""

import time
from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject, Update

from beautyslot.backend.core.logging import get_logger, log_with_source
from beautyslot.backend.core.utils import digits_only, mask_phone

logger = get_logger(__name__)

TEXT_PREVIEW_LIMIT = 50


def _preview(text: str) -> str:
    if len(digits_only(text)) >= 7:
        text = mask_phone(text)
    if len(text) > TEXT_PREVIEW_LIMIT:
        return text[:TEXT_PREVIEW_LIMIT] + "..."
    return text


def _message_context(message: Message) -> dict[str, Any]:
    context: dict[str, Any] = {"chat_id": message.chat.id}
    if message.from_user:
        context["user_id"] = message.from_user.id
        context["username"] = message.from_user.username
    if message.contact:
        context["contact_phone"] = mask_phone(message.contact.phone_number)
    elif message.text and message.text.startswith("/"):
        context["command"] = message.text.split()[0]
    elif message.text:
        context["text_preview"] = _preview(message.text)
    return context


def _callback_context(callback: CallbackQuery) -> dict[str, Any]:
    context: dict[str, Any] = {
        "user_id": callback.from_user.id,
        "username": callback.from_user.username,
        "callback_data": callback.data,
    }
    if callback.message:
        context["chat_id"] = callback.message.chat.id
    return context


class LoggingMiddleware(BaseMiddleware):
    """
    Outer update middleware: logs receipt, duration and failures.

    Usage:
        dp.update.outer_middleware(LoggingMiddleware())
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        context = self._extract_context(event)
        log_with_source(logger, "telegram", "info", "Telegram update received", **context)

        started = time.perf_counter()
        try:
            result = await handler(event, data)
        except Exception as exc:
            log_with_source(
                logger,
                "telegram",
                "error",
                "Telegram update processing error",
                error=str(exc),
                error_type=type(exc).__name__,
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
                **context,
            )
            raise

        log_with_source(
            logger,
            "telegram",
            "debug",
            "Telegram update processed",
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            **context,
        )
        return result

    @staticmethod
    def _extract_context(event: TelegramObject) -> dict[str, Any]:
        if not isinstance(event, Update):
            return {}

        context: dict[str, Any] = {"update_id": event.update_id, "update_type": event.event_type}
        if event.message:
            context.update(_message_context(event.message))
        elif event.callback_query:
            context.update(_callback_context(event.callback_query))
        return context
