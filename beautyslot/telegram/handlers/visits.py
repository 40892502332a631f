"""
Visit Handlers.

Past visits, upcoming appointments and the cancellation notice for a
linked client. Unlinked users are sent into phone authorization.
"""

from datetime import datetime

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from beautyslot.backend.core.config import get_app_config
from beautyslot.backend.core.utils import local_now, parse_record_datetime, record_day
from beautyslot.backend.models.telegram import TelegramLink
from beautyslot.backend.models.yclients import YClientsRecord
from beautyslot.backend.repositories.sync import SyncStore, get_sync_store
from beautyslot.telegram.callbacks.common import ActionCallback
from beautyslot.telegram.handlers.common import start_flow
from beautyslot.telegram.keyboards.common import (
    get_back_keyboard,
    get_book_or_back_keyboard,
    get_upcoming_keyboard,
)
from beautyslot.telegram.services.notifications import escape_html

router = Router(name="visits")

NO_HISTORY_TEXT = "📖 У вас пока нет истории визитов."
NO_UPCOMING_TEXT = "📋 У вас нет предстоящих записей."
CANCEL_TEXT = (
    "❌ Для отмены записи, пожалуйста, свяжитесь с администратором салона.\n\n"
    "Мы работаем над возможностью отмены через бота."
)


def _sort_key(record: YClientsRecord) -> datetime:
    return parse_record_datetime(record.date) or datetime.min


def _record_lines(store: SyncStore, record: YClientsRecord, header: str) -> str:
    names = [
        service.title
        for service in (store.find_service(s.id) for s in record.services)
        if service is not None and service.title
    ]
    text = f"{header}\n   {escape_html(', '.join(names) or 'Услуга')}\n"

    staff = store.find_staff(record.staff_id)
    if staff is not None:
        text += f"   👤 {escape_html(staff.name)}\n"
    return text + "\n"


def _client_records(store: SyncStore, client_id: int) -> list[YClientsRecord]:
    return [
        r for r in store.records
        if r.client is not None and r.client.id == client_id and not r.deleted
    ]


def build_history_text(client_id: int, now: datetime | None = None) -> str | None:
    """Last visits newest first, or None when there are none."""
    store = get_sync_store()
    now = now or local_now()
    limit = get_app_config().telegram.history_items_limit

    past = [
        r for r in _client_records(store, client_id)
        if (parsed := parse_record_datetime(r.date)) is not None and parsed < now
    ]
    past.sort(key=_sort_key, reverse=True)
    if not past:
        return None

    text = "📖 Ваши последние визиты:\n\n"
    for record in past[:limit]:
        text += _record_lines(store, record, f"📅 {record.date}")
    return text


def build_upcoming_text(client_id: int, today: str | None = None) -> str | None:
    """Upcoming appointments soonest first, or None when there are none."""
    store = get_sync_store()
    today = today or local_now().date().isoformat()
    limit = get_app_config().telegram.history_items_limit

    upcoming = [
        r for r in _client_records(store, client_id)
        if record_day(r.date) >= today and r.attendance != -1
    ]
    upcoming.sort(key=_sort_key)
    if not upcoming:
        return None

    text = "📋 Ваши предстоящие записи:\n\n"
    for record in upcoming[:limit]:
        starts_at = parse_record_datetime(record.datetime)
        time_part = f"{starts_at:%H:%M}" if starts_at else "—"
        text += _record_lines(store, record, f"📅 {record_day(record.date)} в {time_part}")
    return text


async def show_history(message: Message, state: FSMContext, client_link: TelegramLink | None) -> None:
    if client_link is None:
        await start_flow(message, state, client_link)
        return

    text = build_history_text(client_link.client_id)
    if text is None:
        await message.answer(NO_HISTORY_TEXT, reply_markup=get_book_or_back_keyboard())
        return
    await message.answer(text, reply_markup=get_book_or_back_keyboard("📝 Записаться снова"))


async def show_upcoming(message: Message, state: FSMContext, client_link: TelegramLink | None) -> None:
    if client_link is None:
        await start_flow(message, state, client_link)
        return

    text = build_upcoming_text(client_link.client_id)
    if text is None:
        await message.answer(NO_UPCOMING_TEXT, reply_markup=get_book_or_back_keyboard())
        return
    await message.answer(text, reply_markup=get_upcoming_keyboard())


@router.message(Command("history"))
async def cmd_history(message: Message, state: FSMContext, client_link: TelegramLink | None) -> None:
    await show_history(message, state, client_link)


@router.callback_query(ActionCallback.filter(F.action == "history"))
async def on_history(callback: CallbackQuery, state: FSMContext, client_link: TelegramLink | None) -> None:
    await callback.answer()
    if callback.message:
        await show_history(callback.message, state, client_link)


@router.message(Command("upcoming"))
async def cmd_upcoming(message: Message, state: FSMContext, client_link: TelegramLink | None) -> None:
    await show_upcoming(message, state, client_link)


@router.callback_query(ActionCallback.filter(F.action == "upcoming"))
async def on_upcoming(callback: CallbackQuery, state: FSMContext, client_link: TelegramLink | None) -> None:
    await callback.answer()
    if callback.message:
        await show_upcoming(callback.message, state, client_link)


@router.message(Command("cancel"))
async def cmd_cancel(message: Message) -> None:
    await message.answer(CANCEL_TEXT, reply_markup=get_back_keyboard())


@router.callback_query(ActionCallback.filter(F.action == "cancel"))
async def on_cancel(callback: CallbackQuery) -> None:
    await callback.answer()
    if callback.message:
        await callback.message.answer(CANCEL_TEXT, reply_markup=get_back_keyboard())
