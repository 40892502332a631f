"""
FSM State Definitions.
"""

from beautyslot.telegram.states.auth import AuthForm

__all__ = [
    "AuthForm",
]
