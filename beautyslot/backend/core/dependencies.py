"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

import uuid
from typing import Annotated

from fastapi import Depends, Header

from beautyslot.backend.core.config import get_app_config
from beautyslot.backend.core.logging import get_logger
from beautyslot.backend.integrations.yclients import YClientsClient, get_yclients_client

logger = get_logger(__name__)


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


def get_yclients() -> YClientsClient:
    """Shared YClients client; overridden in tests."""
    return get_yclients_client()


YClients = Annotated[YClientsClient, Depends(get_yclients)]


def get_salon_timezone() -> str:
    return get_app_config().application.timezone


SalonTimezone = Annotated[str, Depends(get_salon_timezone)]
