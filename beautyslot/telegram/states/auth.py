"""
Authorization FSM States.
"""

from aiogram.fsm.state import State, StatesGroup


class AuthForm(StatesGroup):
    """
    Phone authorization.

    Flow:
    1. awaiting_phone - user shares a contact or types a phone number;
       the state is kept until the phone matches a synced client
    """

    awaiting_phone = State()
