"""
Health Check Endpoints.

Provides liveness, readiness, and detailed health checks.

Endpoints:
- /health: Liveness check (process running)
- /health/ready: Readiness check (YClients and Telegram reachable)
- /health/detailed: Component status plus sync store counts (for debugging)
"""

import asyncio
from typing import Any

from fastapi import APIRouter, HTTPException

from beautyslot.backend.core.config import get_app_config, get_settings
from beautyslot.backend.core.logging import get_logger
from beautyslot.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)


async def check_yclients() -> dict[str, Any]:
    """
    Check YClients API connectivity.

    Returns:
        Dict with status, latency, and optional error message
    """
    if not get_settings().yclients_configured:
        return {"status": "not_configured"}

    from beautyslot.backend.integrations.yclients import get_yclients_client

    result = await get_yclients_client().test_connection()
    if result["success"]:
        return {"status": "healthy", "latency_ms": result["latency_ms"]}

    logger.warning("YClients health check failed", extra={"error": result.get("error")})
    return {
        "status": "unhealthy",
        "latency_ms": result.get("latency_ms"),
        "error": result.get("error"),
    }


async def check_telegram() -> dict[str, Any]:
    """
    Check the Telegram Bot API with getMe.

    Returns:
        Dict with status, bot username or error message
    """
    from beautyslot.telegram.bot import get_bot, is_bot_configured

    if not is_bot_configured():
        return {"status": "not_configured"}

    try:
        start = utc_now()
        me = await get_bot().get_me()
        latency_ms = int((utc_now() - start).total_seconds() * 1000)
        return {"status": "healthy", "bot": me.username, "latency_ms": latency_ms}
    except Exception as e:
        logger.warning("Telegram health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}


async def _run_checks(timeout: float | None = None) -> dict[str, dict[str, Any]]:
    yclients_result: dict[str, Any] = {"status": "error", "error": "check did not run"}
    telegram_result: dict[str, Any] = {"status": "error", "error": "check did not run"}

    try:
        async with asyncio.timeout(timeout):
            async with asyncio.TaskGroup() as tg:
                yclients_task = tg.create_task(check_yclients())
                telegram_task = tg.create_task(check_telegram())
            yclients_result = yclients_task.result()
            telegram_result = telegram_task.result()
    except* Exception as eg:
        for exc in eg.exceptions:
            logger.warning("Health check task failed", extra={"error": str(exc)})

    return {
        "yclients": yclients_result,
        "telegram": telegram_result,
    }


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns 200 if the process is running. No dependency checks.
    """
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    """
    Readiness check.

    Checks YClients and Telegram in parallel using TaskGroup. An
    unconfigured integration is reported as ``not_configured`` and does
    not fail the check; a configured one that does not answer returns 503.
    """
    timeout = get_app_config().application.timeouts.health_check
    checks = await _run_checks(timeout)

    unhealthy_checks = [
        name for name, check in checks.items()
        if check.get("status") in ("unhealthy", "error")
    ]

    if unhealthy_checks:
        logger.warning(
            "Readiness check failed",
            extra={"unhealthy": unhealthy_checks, "checks": checks},
        )
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "checks": checks,
                "timestamp": utc_now().isoformat(),
            },
        )

    return {
        "status": "healthy",
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }


@router.get("/health/detailed")
async def detailed_health_check() -> dict[str, Any]:
    """
    Detailed health check.

    Returns dependency checks, application info and the amount of data
    currently held in the sync store.
    """
    from beautyslot.backend.repositories.sync import get_sync_store

    timeout = get_app_config().application.timeouts.health_check
    checks = await _run_checks(timeout)

    app_settings = get_app_config().application
    app_info = {
        "name": app_settings.name,
        "env": app_settings.environment,
        "debug": app_settings.debug,
        "version": app_settings.version,
        "timezone": app_settings.timezone,
    }

    store = get_sync_store()
    sync_info = {
        "is_running": store.status.is_running,
        "last_sync_at": store.status.last_sync_at.isoformat() if store.status.last_sync_at else None,
        "synced_data": store.get_synced_data_info().model_dump(),
    }

    statuses = [check.get("status") for check in checks.values()]
    overall_status = "unhealthy" if "unhealthy" in statuses or "error" in statuses else "healthy"

    return {
        "status": overall_status,
        "application": app_info,
        "checks": checks,
        "sync": sync_info,
        "timestamp": utc_now().isoformat(),
    }
