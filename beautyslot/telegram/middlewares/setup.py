"""
Middleware Registration.
"""

from typing import TYPE_CHECKING

from beautyslot.telegram.middlewares.client_link import ClientLinkMiddleware
from beautyslot.telegram.middlewares.logging import LoggingMiddleware
from beautyslot.telegram.middlewares.rate_limit import RateLimitMiddleware

if TYPE_CHECKING:
    from aiogram import Dispatcher


def setup_middlewares(dp: "Dispatcher") -> None:
    """
    Setup all middlewares on the dispatcher.

    Middleware order matters:
    1. LoggingMiddleware (outer) - log all updates
    2. ClientLinkMiddleware (outer) - resolve the client link for handlers
    3. RateLimitMiddleware (inner) - rate limit after filters pass

    Args:
        dp: aiogram Dispatcher instance
    """
    dp.update.outer_middleware(LoggingMiddleware())
    dp.update.outer_middleware(ClientLinkMiddleware())

    dp.message.middleware(RateLimitMiddleware())
    dp.callback_query.middleware(RateLimitMiddleware())
