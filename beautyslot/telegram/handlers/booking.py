"""
Booking Handlers.

Service list, staff list and the booking summary. Picking a date and
time is done by the salon admin or on the website.
"""

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from beautyslot.backend.core.config import get_app_config
from beautyslot.backend.models.telegram import TelegramLink
from beautyslot.backend.repositories.sync import get_sync_store
from beautyslot.telegram.callbacks.common import ActionCallback, ServiceCallback, StaffCallback
from beautyslot.telegram.handlers.common import start_flow
from beautyslot.telegram.keyboards.common import (
    get_back_keyboard,
    get_services_keyboard,
    get_staff_keyboard,
)
from beautyslot.telegram.services.notifications import escape_html

router = Router(name="booking")

NO_SERVICES_TEXT = "😔 К сожалению, услуги временно недоступны.\n\nПопробуйте позже или позвоните нам."
NO_STAFF_TEXT = "😔 К сожалению, мастера сейчас недоступны."


def booking_summary(staff_name: str | None, service_title: str | None, price_min: object) -> str:
    return (
        "📝 Для завершения записи:\n\n"
        f"👤 Мастер: {escape_html(staff_name) if staff_name else 'Не выбран'}\n"
        f"💇 Услуга: {escape_html(service_title) if service_title else 'Не выбрана'}\n"
        f"💰 Стоимость: от {price_min or '—'}₽\n\n"
        "⚠️ Для выбора даты и времени, пожалуйста, свяжитесь с администратором "
        "или запишитесь через сайт.\n\n"
        "Мы работаем над полной онлайн-записью через бота!"
    )


async def show_services(message: Message, state: FSMContext, client_link: TelegramLink | None) -> None:
    if client_link is None:
        await start_flow(message, state, client_link)
        return

    services = get_sync_store().services
    if not services:
        await message.answer(NO_SERVICES_TEXT)
        return

    limit = get_app_config().telegram.menu_items_limit
    active = [s for s in services if s.active == 1][:limit]
    await message.answer("📝 Выберите услугу:", reply_markup=get_services_keyboard(active))


@router.message(Command("book"))
async def cmd_book(message: Message, state: FSMContext, client_link: TelegramLink | None) -> None:
    await show_services(message, state, client_link)


@router.callback_query(ActionCallback.filter(F.action == "book"))
async def on_book(callback: CallbackQuery, state: FSMContext, client_link: TelegramLink | None) -> None:
    await callback.answer()
    if callback.message:
        await show_services(callback.message, state, client_link)


@router.callback_query(ServiceCallback.filter())
async def on_service(callback: CallbackQuery, callback_data: ServiceCallback) -> None:
    await callback.answer()
    if not callback.message:
        return

    limit = get_app_config().telegram.menu_items_limit
    staff = [
        s for s in get_sync_store().staff
        if s.status == 1 and not s.fired and not s.hidden and s.bookable
    ]

    if not staff:
        await callback.message.answer(NO_STAFF_TEXT, reply_markup=get_back_keyboard("book"))
        return

    await callback.message.answer(
        "👤 Выберите мастера:",
        reply_markup=get_staff_keyboard(staff[:limit], callback_data.service_id),
    )


@router.callback_query(StaffCallback.filter())
async def on_staff(callback: CallbackQuery, callback_data: StaffCallback) -> None:
    await callback.answer()
    if not callback.message:
        return

    store = get_sync_store()
    staff = store.find_staff(callback_data.staff_id)
    service = store.find_service(callback_data.service_id)

    await callback.message.answer(
        booking_summary(
            staff.name if staff else None,
            service.title if service else None,
            service.price_min if service else None,
        ),
        reply_markup=get_back_keyboard("menu", "◀️ В меню"),
    )
