"""
Telegram Bot Module.

aiogram v3 client bot running in webhook mode inside the FastAPI
application. Clients link their Telegram account to their salon profile
by phone number, then browse services, upcoming visits and history.

Structure:
    beautyslot/telegram/
    ├── bot.py               # Bot and dispatcher setup
    ├── webhook.py           # Webhook endpoint for FastAPI
    ├── handlers/            # Commands, phone linking, booking, visits
    ├── middlewares/         # Logging, client link lookup, rate limiting
    ├── keyboards/           # Inline and reply keyboards
    ├── states/              # FSM states (phone authorization)
    ├── callbacks/           # CallbackData factories
    └── services/            # Outgoing notifications and broadcasts

Environment Variables:
    TELEGRAM_BOT_TOKEN: Bot token from BotFather
    TELEGRAM_WEBHOOK_SECRET: Secret for webhook validation
    TELEGRAM_ADMIN_CHAT_ID: Chat receiving shop order notifications
"""

from beautyslot.telegram.bot import create_bot, create_dispatcher, get_bot, get_dispatcher, is_bot_configured

__all__ = [
    "create_bot",
    "create_dispatcher",
    "get_bot",
    "get_dispatcher",
    "is_bot_configured",
]
