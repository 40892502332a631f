"""
Broadcasts API Endpoints.

Telegram broadcasts to linked clients: drafts, sending and segment
campaigns.
"""

from fastapi import APIRouter, Query

from beautyslot.backend.core.dependencies import RequestId
from beautyslot.backend.core.pagination import Page
from beautyslot.backend.models.broadcast import Broadcast, BroadcastStatus
from beautyslot.backend.schemas.base import ApiResponse, ListPage, MessageResponse
from beautyslot.backend.schemas.broadcast import (
    BroadcastCreate,
    BroadcastSendResult,
    BroadcastStats,
    BroadcastUpdate,
    SegmentBroadcastCreate,
    SegmentBroadcastResponse,
)
from beautyslot.backend.services.broadcast import BroadcastService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[ListPage[Broadcast]],
    summary="List broadcasts",
    description="List broadcasts newest first, optionally filtered by status.",
)
async def list_broadcasts(
    request_id: RequestId,
    page: Page,
    status: BroadcastStatus | None = Query(default=None),
) -> ApiResponse[ListPage[Broadcast]]:
    return ApiResponse(data=BroadcastService().list_broadcasts(page, status))


@router.post(
    "",
    response_model=ApiResponse[Broadcast],
    status_code=201,
    summary="Create a broadcast",
    description="Create a draft broadcast. Title and message are required.",
)
async def create_broadcast(
    data: BroadcastCreate,
    request_id: RequestId,
) -> ApiResponse[Broadcast]:
    return ApiResponse(data=BroadcastService().create_broadcast(data))


@router.get(
    "/stats",
    response_model=ApiResponse[BroadcastStats],
    summary="Broadcast statistics",
)
async def broadcast_stats(request_id: RequestId) -> ApiResponse[BroadcastStats]:
    return ApiResponse(data=BroadcastService().get_stats())


@router.post(
    "/from-segment",
    response_model=ApiResponse[SegmentBroadcastResponse],
    summary="Create a broadcast for a client segment",
    description=(
        "Create a SEGMENT broadcast for recoverable_7d, at_risk_30d, loyal, "
        "new_clients or all_with_telegram, optionally sending it immediately."
    ),
)
async def create_from_segment(
    data: SegmentBroadcastCreate,
    request_id: RequestId,
) -> ApiResponse[SegmentBroadcastResponse]:
    return ApiResponse(data=await BroadcastService().create_from_segment(data))


@router.get(
    "/{broadcast_id}",
    response_model=ApiResponse[Broadcast],
    summary="Get a broadcast",
)
async def get_broadcast(
    broadcast_id: int,
    request_id: RequestId,
) -> ApiResponse[Broadcast]:
    return ApiResponse(data=BroadcastService().get_broadcast(broadcast_id))


@router.patch(
    "/{broadcast_id}",
    response_model=ApiResponse[Broadcast],
    summary="Update a broadcast",
    description="Sent broadcasts cannot be changed.",
)
async def update_broadcast(
    broadcast_id: int,
    data: BroadcastUpdate,
    request_id: RequestId,
) -> ApiResponse[Broadcast]:
    return ApiResponse(data=BroadcastService().update_broadcast(broadcast_id, data))


@router.delete(
    "/{broadcast_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete a broadcast",
    description="A broadcast that is being sent cannot be deleted.",
)
async def delete_broadcast(
    broadcast_id: int,
    request_id: RequestId,
) -> ApiResponse[MessageResponse]:
    BroadcastService().delete_broadcast(broadcast_id)
    return ApiResponse(data=MessageResponse(message="Broadcast deleted"))


@router.post(
    "/{broadcast_id}/send",
    response_model=ApiResponse[BroadcastSendResult],
    summary="Send a broadcast",
    description="Send a draft broadcast to its recipients through the Telegram bot.",
)
async def send_broadcast(
    broadcast_id: int,
    request_id: RequestId,
) -> ApiResponse[BroadcastSendResult]:
    """Deliver a draft broadcast."""
    return ApiResponse(data=await BroadcastService().send_broadcast(broadcast_id))
