"""
Client Link Middleware.

Looks up the Telegram account's link to a salon client and passes it to
handlers as ``client_link`` (None for users who have not shared their
phone yet). The bot is open to everyone; linking is what unlocks the
client features.
"""

from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update

from beautyslot.backend.core.logging import get_logger
from beautyslot.backend.repositories.telegram import get_telegram_store

logger = get_logger(__name__)


class ClientLinkMiddleware(BaseMiddleware):
    """
    Inject ``telegram_user`` and ``client_link`` into handler data.

    Usage:
        dp.update.outer_middleware(ClientLinkMiddleware())

        @router.message(Command("history"))
        async def cmd_history(message: Message, client_link: TelegramLink | None):
            ...
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        user = None
        if isinstance(event, Update):
            if event.message:
                user = event.message.from_user
            elif event.callback_query:
                user = event.callback_query.from_user

        data["telegram_user"] = user
        data["client_link"] = get_telegram_store().get_by_telegram_id(user.id) if user else None

        if user:
            logger.debug(
                "Resolved Telegram client link",
                extra={"user_id": user.id, "linked": data["client_link"] is not None},
            )

        return await handler(event, data)
