"""
Task Scheduler.

Registers each entry of SCHEDULED_TASKS as an APScheduler interval job
inside the API process. Started and stopped by the FastAPI lifespan when
features.scheduler_enabled is set.

Important:
    Run only ONE application instance with the scheduler enabled.
    Multiple instances will cause duplicate syncs and reminders.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from beautyslot.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

TaskFunction = Callable[[], Awaitable[Any]]


def _logged(name: str, function: TaskFunction) -> TaskFunction:
    """Wrap a task so a failure is logged and the job keeps its schedule."""

    async def run() -> Any:
        try:
            return await function()
        except Exception as e:
            log_with_source(
                logger,
                "tasks",
                "error",
                "Scheduled task failed",
                task=name,
                error=str(e),
            )
            return None

    return run


def build_scheduler(tasks: dict[str, dict[str, Any]]) -> AsyncIOScheduler:
    """Create a scheduler with one interval job per task entry."""
    scheduler = AsyncIOScheduler(timezone="UTC")
    for name, config in tasks.items():
        scheduler.add_job(
            _logged(name, config["function"]),
            IntervalTrigger(seconds=config["interval_seconds"]),
            id=name,
            name=config.get("description", name),
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
    return scheduler


_scheduler: AsyncIOScheduler | None = None


def get_scheduler() -> AsyncIOScheduler:
    """Get the process-wide scheduler with the configured tasks."""
    global _scheduler
    if _scheduler is None:
        from beautyslot.backend.tasks.scheduled import SCHEDULED_TASKS

        _scheduler = build_scheduler(SCHEDULED_TASKS)
    return _scheduler


def start_scheduler() -> None:
    """Start the scheduler. Needs a running event loop."""
    scheduler = get_scheduler()
    if not scheduler.running:
        scheduler.start()
        log_with_source(
            logger,
            "tasks",
            "info",
            "Scheduler started",
            tasks=sorted(job.id for job in scheduler.get_jobs()),
        )


def shutdown_scheduler() -> None:
    scheduler = get_scheduler()
    if scheduler.running:
        scheduler.shutdown(wait=False)
        log_with_source(logger, "tasks", "info", "Scheduler stopped")


def reset_scheduler() -> None:
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
    _scheduler = None
