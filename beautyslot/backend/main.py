"""
FastAPI Application Entry Point.

This is the main entry point for the BeautySlot admin backend.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from beautyslot.backend.api import health
from beautyslot.backend.api.v1 import router as api_v1_router
from beautyslot.backend.core.config import AppConfig, get_app_config
from beautyslot.backend.core.exception_handlers import register_exception_handlers
from beautyslot.backend.core.logging import get_logger, setup_logging
from beautyslot.backend.core.middleware import RequestContextMiddleware

logger = get_logger(__name__)

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    from beautyslot.backend.integrations.yclients import close_yclients_client
    from beautyslot.backend.services.sync import cancel_running_sync
    from beautyslot.backend.tasks.scheduler import shutdown_scheduler, start_scheduler
    from beautyslot.telegram.bot import close_bot

    app_config = get_app_config()
    setup_logging(level=app_config.logging.level)

    logger.info(
        "Application starting",
        extra={
            "app_name": app_config.application.name,
            "env": app_config.application.environment,
        },
    )

    scheduler_enabled = app_config.features.scheduler_enabled
    if scheduler_enabled:
        start_scheduler()

    yield

    logger.info("Application shutting down")
    if scheduler_enabled:
        shutdown_scheduler()
    await cancel_running_sync()
    await close_yclients_client()
    await close_bot()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app_config = get_app_config()
    app_settings = app_config.application

    app = FastAPI(
        title=app_settings.name,
        description=app_settings.description,
        version=app_settings.version,
        docs_url="/docs" if app_settings.docs_enabled else None,
        redoc_url="/redoc" if app_settings.docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)

    cors_origins = app_settings.cors.origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(api_v1_router, prefix=app_settings.api_prefix)

    _mount_channel_adapters(app, app_config)

    return app


def _mount_channel_adapters(app: FastAPI, app_config: AppConfig) -> None:
    """Mount the Telegram webhook receiver when the channel is enabled."""
    if not app_config.features.channel_telegram_enabled:
        return

    from beautyslot.telegram.webhook import get_webhook_router

    app.include_router(get_webhook_router(), tags=["telegram"])
    logger.info(
        "Telegram channel mounted",
        extra={"webhook_path": app_config.telegram.webhook_path},
    )


def get_app() -> FastAPI:
    """
    Get the application instance (lazy initialization).

    This function creates the app on first call and caches it.
    Use this instead of importing `app` directly to avoid
    import-time configuration errors.
    """
    global _app
    if _app is None:
        _app = create_app()
    return _app


# For uvicorn: `uvicorn beautyslot.backend.main:app`
def __getattr__(name: str) -> FastAPI:
    """Support lazy access to `app` for uvicorn compatibility."""
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
