"""
Scheduled Background Tasks.

Plain async functions that the APScheduler jobs call on a fixed
interval. They can also be called directly, which is what the tests do.

    auto_sync        every minute; starts a full sync when auto sync is
                     on and sync_interval_hours have passed since the
                     last one
    send_reminders   every minute; runs the reminder job
"""

from datetime import timedelta
from typing import Any

from beautyslot.backend.core.config import get_app_config
from beautyslot.backend.core.logging import get_logger, log_with_source
from beautyslot.backend.core.utils import utc_now
from beautyslot.backend.repositories.sync import get_sync_store

logger = get_logger(__name__)


async def auto_sync() -> dict[str, Any]:
    """
    Start a background sync when one is due.

    Returns:
        ``{"status": "disabled" | "not_due" | "running" | "started"}``
        plus ``sync_id`` when a sync was started
    """
    from beautyslot.backend.services.sync import SyncService

    store = get_sync_store()
    config = store.get_config()
    if not config.auto_sync_enabled:
        return {"status": "disabled"}

    last_sync_at = store.status.last_sync_at
    if last_sync_at is not None and utc_now() - last_sync_at < timedelta(hours=config.sync_interval_hours):
        return {"status": "not_due"}

    sync_id = SyncService().start_if_idle()
    if sync_id is None:
        return {"status": "running"}

    log_with_source(logger, "tasks", "info", "Auto sync started", sync_id=sync_id)
    return {"status": "started", "sync_id": sync_id}


async def send_reminders() -> dict[str, Any]:
    """
    Run the reminder job when reminders are enabled.

    Returns:
        The run result as a dict, or ``{"status": "disabled"}``
    """
    from beautyslot.backend.services.notification import ReminderService

    if not get_app_config().features.reminders_enabled:
        return {"status": "disabled"}

    result = await ReminderService().run()
    return result.model_dump(mode="json")


# =============================================================================
# Schedule Configuration
# =============================================================================

SCHEDULED_TASKS = {
    "auto_sync": {
        "function": auto_sync,
        "interval_seconds": 60,
        "description": "Start a YClients sync every sync_interval_hours when enabled",
    },
    "send_reminders": {
        "function": send_reminders,
        "interval_seconds": 60,
        "description": "Send due appointment reminders every minute",
    },
}
