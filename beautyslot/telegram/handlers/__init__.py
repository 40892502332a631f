"""
Telegram Bot Handlers.

Routers are included in order; ``common`` holds the catch-all handlers
and must come last.
"""

from aiogram import Router

from beautyslot.telegram.handlers.auth import router as auth_router
from beautyslot.telegram.handlers.booking import router as booking_router
from beautyslot.telegram.handlers.common import router as common_router
from beautyslot.telegram.handlers.visits import router as visits_router


def get_all_routers() -> list[Router]:
    return [auth_router, booking_router, visits_router, common_router]


__all__ = ["get_all_routers"]
