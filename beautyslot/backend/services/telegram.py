"""
Telegram Admin Service.

Linked-account listing and webhook management for the admin panel.
"""

from beautyslot.backend.core.config import get_app_config
from beautyslot.backend.core.exceptions import ExternalServiceError, ServiceUnavailableError, ValidationError
from beautyslot.backend.repositories.telegram import get_telegram_store
from beautyslot.backend.schemas.base import ListPage
from beautyslot.backend.schemas.telegram import LinkedAccount, WebhookInfoResponse, WebhookSetResponse
from beautyslot.backend.services.base import BaseService


class TelegramAdminService(BaseService):
    """Reads links and talks to the Bot API about the webhook."""

    def _bot(self):
        from beautyslot.telegram.bot import get_bot, is_bot_configured

        if not is_bot_configured():
            raise ServiceUnavailableError(
                "Telegram bot token is not configured. Set TELEGRAM_BOT_TOKEN in config/.env"
            )
        return get_bot()

    def list_links(self) -> ListPage[LinkedAccount]:
        store = get_telegram_store()
        items = []
        for link in store.all():
            client = self.sync_store.find_client(link.client_id)
            items.append(
                LinkedAccount(
                    **link.model_dump(),
                    client_name=(client.name if client else None) or "Неизвестный",
                    client_phone=(client.phone if client else None) or link.phone,
                )
            )
        return ListPage(items=items, total=store.count())

    async def set_webhook(self, url: str | None = None) -> WebhookSetResponse:
        """
        Register the webhook with Telegram.

        Without ``url`` the address is built from application.public_base_url.

        Raises:
            ValidationError: If no URL is given and none can be built
            ServiceUnavailableError: If the bot is not configured
            ExternalServiceError: If Telegram rejects the request
        """
        from aiogram.exceptions import TelegramAPIError

        from beautyslot.telegram.bot import setup_webhook
        from beautyslot.telegram.webhook import get_webhook_url

        if not url:
            base_url = get_app_config().application.public_base_url
            if not base_url:
                raise ValidationError(
                    "Cannot determine webhook URL. Provide it in the request body "
                    "or set application.public_base_url"
                )
            if not base_url.startswith("http"):
                base_url = f"https://{base_url}"
            url = get_webhook_url(base_url)

        self._bot()
        try:
            accepted = await setup_webhook(url)
        except TelegramAPIError as e:
            raise ExternalServiceError(f"Failed to set webhook: {e.message}") from e
        if not accepted:
            raise ExternalServiceError("Failed to set webhook")

        self._log_operation("Telegram webhook set", webhook_url=url)
        return WebhookSetResponse(webhook_url=url)

    async def get_webhook_info(self) -> WebhookInfoResponse:
        from aiogram.exceptions import TelegramAPIError

        bot = self._bot()
        try:
            info = await bot.get_webhook_info()
        except TelegramAPIError as e:
            raise ExternalServiceError(f"Failed to get webhook info: {e.message}") from e
        return WebhookInfoResponse.model_validate(info.model_dump())

    async def delete_webhook(self) -> None:
        from aiogram.exceptions import TelegramAPIError

        bot = self._bot()
        try:
            await bot.delete_webhook()
        except TelegramAPIError as e:
            raise ExternalServiceError(f"Failed to delete webhook: {e.message}") from e
        self._log_operation("Telegram webhook deleted")
