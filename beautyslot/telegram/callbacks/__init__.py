"""
Callback Data Factories.

Type-safe callback data using aiogram's CallbackData factory.

Example:
    @router.callback_query(ActionCallback.filter(F.action == "book"))
    async def on_book(callback: CallbackQuery, callback_data: ActionCallback):
        ...
"""

from beautyslot.telegram.callbacks.common import ActionCallback, ServiceCallback, StaffCallback

__all__ = [
    "ActionCallback",
    "ServiceCallback",
    "StaffCallback",
]
