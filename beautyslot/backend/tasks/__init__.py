"""
Background Tasks Package.

Periodic jobs run by an APScheduler AsyncIOScheduler inside the API process.

Usage:
    from beautyslot.backend.tasks import start_scheduler, shutdown_scheduler

    start_scheduler()
    ...
    shutdown_scheduler()

Task functions can be called directly without the scheduler:
    from beautyslot.backend.tasks.scheduled import auto_sync
    result = await auto_sync()
"""

from beautyslot.backend.tasks.scheduled import SCHEDULED_TASKS, auto_sync, send_reminders
from beautyslot.backend.tasks.scheduler import (
    build_scheduler,
    get_scheduler,
    reset_scheduler,
    shutdown_scheduler,
    start_scheduler,
)

__all__ = [
    "SCHEDULED_TASKS",
    "auto_sync",
    "build_scheduler",
    "get_scheduler",
    "reset_scheduler",
    "send_reminders",
    "shutdown_scheduler",
    "start_scheduler",
]
