"""
Phone Authorization Handlers.

Links a Telegram account to a synced salon client. The user shares a
contact or types a number while in ``AuthForm.awaiting_phone``; the
number must belong to a synced client.
"""

from aiogram import F, Router
from aiogram.fsm.context import FSMContext
from aiogram.types import Message, User

from beautyslot.backend.core.logging import get_logger, log_with_source
from beautyslot.backend.core.utils import mask_phone, normalize_phone
from beautyslot.backend.models.notification import NotificationType
from beautyslot.backend.repositories.notification import get_template_repository, substitute_variables
from beautyslot.backend.repositories.sync import get_sync_store
from beautyslot.backend.repositories.telegram import get_telegram_store
from beautyslot.telegram.handlers.common import send_main_menu
from beautyslot.telegram.keyboards.common import get_remove_keyboard
from beautyslot.telegram.services.notifications import escape_html
from beautyslot.telegram.states.auth import AuthForm

logger = get_logger(__name__)

router = Router(name="auth")

INVALID_PHONE_TEXT = "❌ Неверный формат номера телефона.\n\nВведите номер в формате: +7XXXXXXXXXX"

CLIENT_NOT_FOUND_TEXT = (
    "❌ К сожалению, мы не нашли вас в нашей базе клиентов.\n\n"
    "Возможно, вы ещё не были у нас или указали другой номер при записи.\n\n"
    "Попробуйте ввести другой номер или посетите наш салон."
)

LINKED_TEXT = (
    "✅ Отлично, {client_name}! Вы успешно авторизованы.\n\n"
    "Теперь вы можете:\n"
    "• Записываться на услуги\n"
    "• Просматривать историю визитов\n"
    "• Получать напоминания о записях\n"
    "• Получать специальные предложения"
)


def is_valid_phone_length(phone: str) -> bool:
    return 10 <= len(phone) <= 12


async def authorize_by_phone(
    message: Message,
    state: FSMContext,
    phone: str,
    user: User | None,
) -> None:
    """
    Link the sender to the synced client owning ``phone``.

    On no match the user stays in the awaiting-phone state.
    """
    client = next(
        (c for c in get_sync_store().clients if normalize_phone(c.phone) == phone),
        None,
    )

    if client is None:
        await state.set_state(AuthForm.awaiting_phone)
        await message.answer(CLIENT_NOT_FOUND_TEXT, reply_markup=get_remove_keyboard())
        log_with_source(logger, "telegram", "info", "Phone not found among clients", phone=mask_phone(phone))
        return

    telegram_id = user.id if user else message.chat.id
    get_telegram_store().link(
        phone=phone,
        telegram_id=telegram_id,
        client_id=client.id,
        username=user.username if user else None,
        first_name=user.first_name if user else None,
        last_name=user.last_name if user else None,
    )
    await state.clear()

    client_name = escape_html(client.name)
    welcome = get_template_repository().get_active(NotificationType.WELCOME)
    if welcome is not None:
        text = substitute_variables(welcome.message, {"client_name": client_name})
    else:
        text = LINKED_TEXT.format(client_name=client_name)

    await message.answer(text, reply_markup=get_remove_keyboard())
    await send_main_menu(message)


@router.message(F.contact)
async def on_contact(message: Message, state: FSMContext, telegram_user: User | None) -> None:
    phone = normalize_phone(message.contact.phone_number)
    await authorize_by_phone(message, state, phone, telegram_user)


@router.message(AuthForm.awaiting_phone, F.text, ~F.text.startswith("/"))
async def on_phone_text(message: Message, state: FSMContext, telegram_user: User | None) -> None:
    phone = normalize_phone(message.text)

    if not is_valid_phone_length(phone):
        await message.answer(INVALID_PHONE_TEXT)
        return

    await authorize_by_phone(message, state, phone, telegram_user)
