"""
Callback Data Factories.

Packed forms: ``action:book``, ``service:12``, ``staff:3:12``.
"""

from aiogram.filters.callback_data import CallbackData


class ActionCallback(CallbackData, prefix="action"):
    """
    Menu action.

    Actions: menu, book, upcoming, history, cancel, about.
    """

    action: str


class ServiceCallback(CallbackData, prefix="service"):
    """Service picked from the booking list."""

    service_id: int


class StaffCallback(CallbackData, prefix="staff"):
    """Staff member picked for a previously chosen service."""

    staff_id: int
    service_id: int
