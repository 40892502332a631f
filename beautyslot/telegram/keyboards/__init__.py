"""
Keyboard Builders.

Reply and inline keyboard builders for the client bot.
"""

from beautyslot.telegram.keyboards.common import (
    get_back_keyboard,
    get_book_button_keyboard,
    get_book_or_back_keyboard,
    get_contact_request_keyboard,
    get_main_menu_keyboard,
    get_remove_keyboard,
    get_services_keyboard,
    get_staff_keyboard,
    get_upcoming_keyboard,
)

__all__ = [
    "get_back_keyboard",
    "get_book_button_keyboard",
    "get_book_or_back_keyboard",
    "get_contact_request_keyboard",
    "get_main_menu_keyboard",
    "get_remove_keyboard",
    "get_services_keyboard",
    "get_staff_keyboard",
    "get_upcoming_keyboard",
]
