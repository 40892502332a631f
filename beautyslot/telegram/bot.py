"""
Bot and Dispatcher Configuration.

Creates and configures the aiogram Bot and Dispatcher instances.
Uses lazy initialization so the application boots without a bot token.
"""

from typing import TYPE_CHECKING

from beautyslot.backend.core.config import get_settings
from beautyslot.backend.core.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from aiogram import Bot, Dispatcher

_bot: "Bot | None" = None
_dispatcher: "Dispatcher | None" = None

ALLOWED_UPDATES = ["message", "callback_query"]


def is_bot_configured() -> bool:
    """True when TELEGRAM_BOT_TOKEN is set."""
    return get_settings().telegram_configured


def create_bot() -> "Bot":
    """
    Create and configure the aiogram Bot instance.

    Returns:
        Bot with HTML parse mode by default

    Raises:
        RuntimeError: If TELEGRAM_BOT_TOKEN is not configured
    """
    from aiogram import Bot
    from aiogram.client.default import DefaultBotProperties
    from aiogram.enums import ParseMode

    settings = get_settings()

    if not settings.telegram_bot_token:
        raise RuntimeError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Set TELEGRAM_BOT_TOKEN environment variable or configure it in config/.env"
        )

    bot = Bot(
        token=settings.telegram_bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )

    logger.info("Telegram bot created")
    return bot


def create_dispatcher() -> "Dispatcher":
    """
    Create the Dispatcher with memory FSM storage, middlewares and routers.

    Conversation state (the awaiting-phone step) lives in process memory
    and is lost on restart.
    """
    from aiogram import Dispatcher
    from aiogram.fsm.storage.memory import MemoryStorage

    from beautyslot.telegram.handlers import get_all_routers
    from beautyslot.telegram.middlewares import setup_middlewares

    dp = Dispatcher(storage=MemoryStorage())

    setup_middlewares(dp)

    for router in get_all_routers():
        dp.include_router(router)

    logger.info("Telegram dispatcher created with routers and middlewares")
    return dp


def get_bot() -> "Bot":
    """Get or create the Bot instance (lazy initialization)."""
    global _bot
    if _bot is None:
        _bot = create_bot()
    return _bot


def get_dispatcher() -> "Dispatcher":
    """Get or create the Dispatcher instance (lazy initialization)."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = create_dispatcher()
    return _dispatcher


async def setup_webhook(webhook_url: str) -> bool:
    """
    Point Telegram at our webhook.

    Args:
        webhook_url: Full public URL of POST /api/v1/telegram/webhook

    Returns:
        True when Telegram accepted the webhook
    """
    secret = get_settings().telegram_webhook_secret or None
    result = await get_bot().set_webhook(
        url=webhook_url,
        secret_token=secret,
        allowed_updates=ALLOWED_UPDATES,
    )
    logger.info("Webhook configured", extra={"webhook_url": webhook_url})
    return result


async def close_bot() -> None:
    """Close the bot HTTP session on shutdown. The webhook stays registered."""
    global _bot
    if _bot is not None:
        await _bot.session.close()
        _bot = None
        logger.info("Bot session closed")
