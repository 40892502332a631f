"""
Telegram Bot Middlewares.

aiogram v3 middleware scopes:
- Outer middleware: runs on every update (logging, client link lookup)
- Inner middleware: runs after filters pass (rate limiting)
"""

from beautyslot.telegram.middlewares.client_link import ClientLinkMiddleware
from beautyslot.telegram.middlewares.logging import LoggingMiddleware
from beautyslot.telegram.middlewares.rate_limit import RateLimitMiddleware
from beautyslot.telegram.middlewares.setup import setup_middlewares

__all__ = [
    "ClientLinkMiddleware",
    "LoggingMiddleware",
    "RateLimitMiddleware",
    "setup_middlewares",
]
