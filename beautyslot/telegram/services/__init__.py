"""
Telegram Services.

Outgoing messaging used by the backend (broadcasts, reminders, order
notices). Handlers answer incoming updates directly.
"""

from beautyslot.telegram.services.notifications import (
    BroadcastResult,
    NotificationResult,
    NotificationService,
    escape_html,
    get_notification_service,
)

__all__ = [
    "BroadcastResult",
    "NotificationResult",
    "NotificationService",
    "escape_html",
    "get_notification_service",
]
