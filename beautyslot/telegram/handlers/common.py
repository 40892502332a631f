"""
Common Handlers.

/start, /menu, /help, the "about" screen, and the fallbacks for unknown
commands and free text. Also the helpers other handlers reuse to show the
main menu or send an unlinked user into phone authorization.
"""

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message, User

from beautyslot.backend.core.logging import get_logger
from beautyslot.backend.models.telegram import TelegramLink
from beautyslot.backend.repositories.sync import get_sync_store
from beautyslot.telegram.callbacks.common import ActionCallback
from beautyslot.telegram.keyboards.common import (
    get_book_or_back_keyboard,
    get_contact_request_keyboard,
    get_main_menu_keyboard,
)
from beautyslot.telegram.services.notifications import escape_html
from beautyslot.telegram.states.auth import AuthForm

logger = get_logger(__name__)

router = Router(name="common")

MAIN_MENU_TEXT = "📋 Главное меню\n\nВыберите действие:"

PHONE_REQUEST_TEXT = (
    "👋 Добро пожаловать!\n\n"
    "Для начала работы нам нужно вас авторизовать.\n\n"
    "📱 Нажмите кнопку ниже, чтобы отправить номер телефона, "
    "или введите его вручную в формате: +7XXXXXXXXXX"
)

HELP_TEXT = (
    "📚 Доступные команды:\n\n"
    "/menu - Главное меню\n"
    "/book - Записаться на услугу\n"
    "/upcoming - Мои предстоящие записи\n"
    "/history - История визитов\n"
    "/cancel - Отменить запись\n"
    "/help - Эта справка"
)

ABOUT_TEXT = (
    "ℹ️ О нашем салоне\n\n"
    "💇 Мы предлагаем широкий спектр услуг для вашей красоты\n\n"
    "📍 Адрес и контакты уточняйте у администратора\n\n"
    "🕐 Работаем для вас каждый день!"
)

UNKNOWN_COMMAND_TEXT = "Неизвестная команда. Используйте /menu для просмотра доступных действий."


async def send_main_menu(message: Message) -> None:
    await message.answer(MAIN_MENU_TEXT, reply_markup=get_main_menu_keyboard())


async def ask_for_phone(message: Message, state: FSMContext) -> None:
    """Enter phone authorization and show the contact-request keyboard."""
    await state.set_state(AuthForm.awaiting_phone)
    await message.answer(PHONE_REQUEST_TEXT, reply_markup=get_contact_request_keyboard())


async def start_flow(message: Message, state: FSMContext, client_link: TelegramLink | None) -> None:
    """
    Greet a linked client with the menu, or start phone authorization.

    Also used when an unlinked user reaches a client-only feature.
    """
    if client_link is None:
        await ask_for_phone(message, state)
        return

    await state.clear()
    client = get_sync_store().find_client(client_link.client_id)
    name = escape_html(client.name) if client and client.name else "дорогой клиент"
    await message.answer(
        f"👋 С возвращением, {name}!\n\nВыберите действие:",
        reply_markup=get_main_menu_keyboard(),
    )


@router.message(CommandStart())
async def cmd_start(
    message: Message,
    state: FSMContext,
    client_link: TelegramLink | None,
    telegram_user: User | None,
) -> None:
    await start_flow(message, state, client_link)

    logger.info(
        "User started bot",
        extra={
            "user_id": telegram_user.id if telegram_user else None,
            "linked": client_link is not None,
        },
    )


@router.message(Command("menu"))
async def cmd_menu(message: Message) -> None:
    await send_main_menu(message)


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT)


@router.callback_query(ActionCallback.filter(F.action == "menu"))
async def on_menu(callback: CallbackQuery) -> None:
    await callback.answer()
    if callback.message:
        await send_main_menu(callback.message)


@router.callback_query(ActionCallback.filter(F.action == "about"))
async def on_about(callback: CallbackQuery) -> None:
    await callback.answer()
    if callback.message:
        await callback.message.answer(ABOUT_TEXT, reply_markup=get_book_or_back_keyboard())


@router.message(F.text.startswith("/"))
async def unknown_command(message: Message) -> None:
    await message.answer(UNKNOWN_COMMAND_TEXT)


@router.message()
async def any_message(message: Message, state: FSMContext, client_link: TelegramLink | None) -> None:
    """Free text: linked clients get the menu, everyone else is asked for a phone."""
    if client_link is None:
        await ask_for_phone(message, state)
        return
    await send_main_menu(message)
