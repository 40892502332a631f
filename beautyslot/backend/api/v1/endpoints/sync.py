"""
Sync API Endpoints.

Control of the YClients sync plus the simulated realtime event stream.
"""

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from beautyslot.backend.core.config import get_app_config
from beautyslot.backend.core.dependencies import RequestId, YClients
from beautyslot.backend.core.exceptions import ServiceUnavailableError
from beautyslot.backend.models.sync import SyncConfig
from beautyslot.backend.schemas.base import ApiResponse, MessageResponse
from beautyslot.backend.schemas.sync import (
    ConnectionTestResponse,
    RealtimeStats,
    SyncConfigUpdate,
    SyncHistoryResponse,
    SyncStartResponse,
    SyncStatusResponse,
)
from beautyslot.backend.services.realtime import SSE_HEADERS, get_realtime_simulator
from beautyslot.backend.services.sync import SyncService

router = APIRouter()


@router.post(
    "/start",
    response_model=ApiResponse[SyncStartResponse],
    summary="Start full sync",
    description="Launch a full YClients sync in the background. 409 if one is already running.",
)
async def start_sync(
    client: YClients,
    request_id: RequestId,
) -> ApiResponse[SyncStartResponse]:
    return ApiResponse(data=SyncService(client).start())


@router.post(
    "/stop",
    response_model=ApiResponse[MessageResponse],
    summary="Stop running sync",
)
async def stop_sync(
    client: YClients,
    request_id: RequestId,
) -> ApiResponse[MessageResponse]:
    result = SyncService(client).stop()
    return ApiResponse(data=MessageResponse(**result))


@router.get(
    "/status",
    response_model=ApiResponse[SyncStatusResponse],
    summary="Sync status",
    description="Current sync state and counts of the data held in memory.",
)
async def sync_status(
    client: YClients,
    request_id: RequestId,
) -> ApiResponse[SyncStatusResponse]:
    return ApiResponse(data=SyncService(client).get_status())


@router.get(
    "/history",
    response_model=ApiResponse[SyncHistoryResponse],
    summary="Sync history",
)
async def sync_history(
    client: YClients,
    request_id: RequestId,
    limit: int = Query(default=10, ge=1, le=100),
) -> ApiResponse[SyncHistoryResponse]:
    items = SyncService(client).get_history(limit)
    return ApiResponse(data=SyncHistoryResponse(items=items))


@router.get(
    "/config",
    response_model=ApiResponse[SyncConfig],
    summary="Get sync configuration",
)
async def get_sync_config(
    client: YClients,
    request_id: RequestId,
) -> ApiResponse[SyncConfig]:
    return ApiResponse(data=SyncService(client).get_config())


@router.put(
    "/config",
    response_model=ApiResponse[SyncConfig],
    summary="Update sync configuration",
    description="Partial update; fields that are not sent keep their value.",
)
async def update_sync_config(
    data: SyncConfigUpdate,
    client: YClients,
    request_id: RequestId,
) -> ApiResponse[SyncConfig]:
    return ApiResponse(data=SyncService(client).update_config(data))


@router.post(
    "/test-connection",
    response_model=ApiResponse[ConnectionTestResponse],
    summary="Test YClients connection",
)
async def test_connection(
    client: YClients,
    request_id: RequestId,
) -> ApiResponse[ConnectionTestResponse]:
    return ApiResponse(data=await SyncService(client).test_connection())


@router.get(
    "/realtime",
    summary="Realtime event stream",
    description="Server-Sent Events stream of simulated YClients webhook events.",
    response_class=StreamingResponse,
)
async def realtime_stream(request_id: RequestId) -> StreamingResponse:
    """Open the simulated SSE stream."""
    if not get_app_config().features.realtime_simulation_enabled:
        raise ServiceUnavailableError("Realtime simulation is disabled")

    return StreamingResponse(
        get_realtime_simulator().stream(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get(
    "/realtime/stats",
    response_model=ApiResponse[RealtimeStats],
    summary="Realtime stream stats",
)
async def realtime_stats(request_id: RequestId) -> ApiResponse[RealtimeStats]:
    return ApiResponse(data=get_realtime_simulator().stats())
