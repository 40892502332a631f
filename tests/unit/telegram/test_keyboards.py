"""
Unit tests for Telegram keyboard builders.
"""

from aiogram.types import InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove

from beautyslot.telegram.keyboards import (
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
from beautyslot.telegram.keyboards.common import service_button_text


def _buttons(markup: InlineKeyboardMarkup) -> list[tuple[str, str]]:
    return [(b.text, b.callback_data) for row in markup.inline_keyboard for b in row]


class TestMenuKeyboards:
    """Tests for the fixed menus."""

    def test_main_menu(self):
        """Main menu has four actions, one per row."""
        markup = get_main_menu_keyboard()

        assert all(len(row) == 1 for row in markup.inline_keyboard)
        assert [data for _, data in _buttons(markup)] == [
            "action:book",
            "action:upcoming",
            "action:history",
            "action:about",
        ]

    def test_book_button(self):
        """Broadcasts carry a single book button."""
        assert _buttons(get_book_button_keyboard()) == [("📝 Записаться", "action:book")]

    def test_back_keyboard_custom_action(self):
        """Back button can return to any action."""
        assert _buttons(get_back_keyboard("book", "К услугам")) == [("К услугам", "action:book")]
        assert _buttons(get_back_keyboard())[0][1] == "action:menu"

    def test_book_or_back(self):
        """Book and back buttons are stacked."""
        markup = get_book_or_back_keyboard("📝 Записаться снова")

        assert _buttons(markup) == [("📝 Записаться снова", "action:book"), ("◀️ Назад", "action:menu")]

    def test_upcoming(self):
        """Upcoming list offers cancelling and going back."""
        assert [data for _, data in _buttons(get_upcoming_keyboard())] == ["action:cancel", "action:menu"]


class TestReplyKeyboards:
    """Tests for reply keyboards."""

    def test_contact_request(self):
        """Contact button asks Telegram for the phone number."""
        markup = get_contact_request_keyboard()

        assert isinstance(markup, ReplyKeyboardMarkup)
        assert markup.keyboard[0][0].request_contact is True
        assert markup.one_time_keyboard is True
        assert markup.resize_keyboard is True

    def test_remove(self):
        """Remove keyboard hides the reply keyboard."""
        assert isinstance(get_remove_keyboard(), ReplyKeyboardRemove)


class TestBookingKeyboards:
    """Tests for the service and staff pickers."""

    def test_service_button_text_truncated(self, make_service):
        """Long titles are cut to 25 characters."""
        service = make_service(title="Окрашивание волос в сложной технике", price_min=4500)

        assert service_button_text(service) == "Окрашивание волос в сложн... - 4500₽"

    def test_services_keyboard(self, make_service):
        """One button per service plus back to the menu."""
        markup = get_services_keyboard([make_service(id=12, title="Стрижка", price_min=1500)])

        assert _buttons(markup) == [("Стрижка - 1500₽", "service:12"), ("◀️ Назад", "action:menu")]

    def test_staff_keyboard(self, make_staff):
        """Staff buttons carry the chosen service; back returns to services."""
        markup = get_staff_keyboard([make_staff(id=3, name="Мария")], service_id=12)

        assert _buttons(markup) == [("👤 Мария", "staff:3:12"), ("◀️ Назад", "action:book")]
