"""
Webhook Endpoint for Telegram Bot.

FastAPI router receiving Telegram updates and feeding them to the
dispatcher. The bot and dispatcher are resolved per request so the
application boots without a token.
"""

import hmac

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from beautyslot.backend.core.config import get_app_config, get_settings
from beautyslot.backend.core.logging import get_logger

logger = get_logger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def get_webhook_router() -> APIRouter:
    """
    Create the router for POST ``telegram.webhook_path``.

    Usage:
        app.include_router(get_webhook_router())
    """
    from aiogram.types import Update

    from beautyslot.telegram.bot import get_bot, get_dispatcher, is_bot_configured

    router = APIRouter(tags=["telegram"])
    webhook_path = get_app_config().telegram.webhook_path

    @router.post(webhook_path)
    async def telegram_webhook(request: Request) -> Response:
        """
        Handle an incoming Telegram update.

        Telegram retries on any non-2xx answer, so processing errors are
        logged and still answered with 200.
        """
        webhook_secret = get_settings().telegram_webhook_secret
        if webhook_secret:
            secret_header = request.headers.get(SECRET_HEADER)
            if not secret_header or not hmac.compare_digest(secret_header, webhook_secret):
                logger.warning(
                    "Invalid webhook secret token",
                    extra={"client_ip": request.client.host if request.client else None},
                )
                return Response(status_code=403)

        if not is_bot_configured():
            logger.warning("Telegram update received but bot is not configured")
            return JSONResponse({"ok": True})

        try:
            bot = get_bot()
            update_data = await request.json()
            update = Update.model_validate(update_data, context={"bot": bot})

            logger.debug(
                "Received Telegram update",
                extra={
                    "update_id": update.update_id,
                    "update_type": update.event_type,
                },
            )

            await get_dispatcher().feed_update(bot, update)

        except Exception as e:
            logger.error(
                "Error processing Telegram update",
                extra={"error": str(e)},
                exc_info=True,
            )

        return JSONResponse({"ok": True})

    return router


def get_webhook_url(base_url: str) -> str:
    """
    Construct the full webhook URL.

    Args:
        base_url: Public base URL of the application (e.g. https://example.com)

    Returns:
        Full webhook URL
    """
    return f"{base_url.rstrip('/')}{get_app_config().telegram.webhook_path}"
