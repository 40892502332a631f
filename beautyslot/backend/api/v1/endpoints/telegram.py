"""
Telegram Admin API Endpoints.

Linked accounts and webhook management. The webhook receiver itself is
mounted from beautyslot.telegram.webhook.
"""

from fastapi import APIRouter

from beautyslot.backend.core.dependencies import RequestId
from beautyslot.backend.schemas.base import ApiResponse, ListPage, MessageResponse
from beautyslot.backend.schemas.telegram import (
    LinkedAccount,
    SetWebhookRequest,
    WebhookInfoResponse,
    WebhookSetResponse,
)
from beautyslot.backend.services.telegram import TelegramAdminService

router = APIRouter()


@router.get(
    "/links",
    response_model=ApiResponse[ListPage[LinkedAccount]],
    summary="Linked Telegram accounts",
)
async def list_links(request_id: RequestId) -> ApiResponse[ListPage[LinkedAccount]]:
    return ApiResponse(data=TelegramAdminService().list_links())


@router.post(
    "/set-webhook",
    response_model=ApiResponse[WebhookSetResponse],
    summary="Register the bot webhook",
    description="Use the given URL or build one from application.public_base_url.",
)
async def set_webhook(
    request_id: RequestId,
    data: SetWebhookRequest | None = None,
) -> ApiResponse[WebhookSetResponse]:
    url = data.url if data else None
    return ApiResponse(data=await TelegramAdminService().set_webhook(url))


@router.get(
    "/set-webhook",
    response_model=ApiResponse[WebhookInfoResponse],
    summary="Current webhook info",
)
async def get_webhook_info(request_id: RequestId) -> ApiResponse[WebhookInfoResponse]:
    return ApiResponse(data=await TelegramAdminService().get_webhook_info())


@router.delete(
    "/set-webhook",
    response_model=ApiResponse[MessageResponse],
    summary="Remove the bot webhook",
)
async def delete_webhook(request_id: RequestId) -> ApiResponse[MessageResponse]:
    await TelegramAdminService().delete_webhook()
    return ApiResponse(data=MessageResponse(message="Webhook deleted"))
