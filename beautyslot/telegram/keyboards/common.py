"""
Keyboard Builders.

Inline menus for the client bot and the contact-request reply keyboard.
"""

from aiogram.types import InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove
from aiogram.utils.keyboard import InlineKeyboardBuilder, ReplyKeyboardBuilder

from beautyslot.backend.models.yclients import YClientsService, YClientsStaff
from beautyslot.telegram.callbacks.common import ActionCallback, ServiceCallback, StaffCallback

BOOK_TEXT = "📝 Записаться"
BACK_TEXT = "◀️ Назад"
SERVICE_TITLE_LIMIT = 25


def get_main_menu_keyboard() -> InlineKeyboardMarkup:
    """Main menu, one action per row."""
    builder = InlineKeyboardBuilder()
    builder.button(text=BOOK_TEXT, callback_data=ActionCallback(action="book"))
    builder.button(text="📋 Мои записи", callback_data=ActionCallback(action="upcoming"))
    builder.button(text="📖 История визитов", callback_data=ActionCallback(action="history"))
    builder.button(text="ℹ️ О салоне", callback_data=ActionCallback(action="about"))
    builder.adjust(1)
    return builder.as_markup()


def get_contact_request_keyboard() -> ReplyKeyboardMarkup:
    builder = ReplyKeyboardBuilder()
    builder.button(text="📱 Отправить номер телефона", request_contact=True)
    return builder.as_markup(resize_keyboard=True, one_time_keyboard=True)


def get_remove_keyboard() -> ReplyKeyboardRemove:
    return ReplyKeyboardRemove()


def get_book_button_keyboard() -> InlineKeyboardMarkup:
    """Single "book" button attached to broadcasts."""
    builder = InlineKeyboardBuilder()
    builder.button(text=BOOK_TEXT, callback_data=ActionCallback(action="book"))
    return builder.as_markup()


def get_back_keyboard(action: str = "menu", text: str = BACK_TEXT) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.button(text=text, callback_data=ActionCallback(action=action))
    return builder.as_markup()


def get_book_or_back_keyboard(book_text: str = BOOK_TEXT) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.button(text=book_text, callback_data=ActionCallback(action="book"))
    builder.button(text=BACK_TEXT, callback_data=ActionCallback(action="menu"))
    builder.adjust(1)
    return builder.as_markup()


def get_upcoming_keyboard() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.button(text="❌ Отменить запись", callback_data=ActionCallback(action="cancel"))
    builder.button(text=BACK_TEXT, callback_data=ActionCallback(action="menu"))
    builder.adjust(1)
    return builder.as_markup()


def service_button_text(service: YClientsService) -> str:
    """Title cut to 25 characters plus the minimum price."""
    title = service.title
    if len(title) > SERVICE_TITLE_LIMIT:
        title = title[:SERVICE_TITLE_LIMIT] + "..."
    return f"{title} - {service.price_min}₽"


def get_services_keyboard(services: list[YClientsService]) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    for service in services:
        builder.button(
            text=service_button_text(service),
            callback_data=ServiceCallback(service_id=service.id),
        )
    builder.button(text=BACK_TEXT, callback_data=ActionCallback(action="menu"))
    builder.adjust(1)
    return builder.as_markup()


def get_staff_keyboard(staff: list[YClientsStaff], service_id: int) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    for member in staff:
        builder.button(
            text=f"👤 {member.name}",
            callback_data=StaffCallback(staff_id=member.id, service_id=service_id),
        )
    builder.button(text=BACK_TEXT, callback_data=ActionCallback(action="book"))
    builder.adjust(1)
    return builder.as_markup()
