"""
Clients API Endpoints.

Admin view of clients synced from YClients, ranked by value index.
"""

from fastapi import APIRouter, Query

from beautyslot.backend.core.dependencies import RequestId
from beautyslot.backend.core.pagination import Page
from beautyslot.backend.schemas.base import ApiResponse, ListPage
from beautyslot.backend.schemas.client import ClientDetailResponse, ClientResponse
from beautyslot.backend.services.client import ClientService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[ListPage[ClientResponse]],
    summary="List clients",
    description="List synced clients with value index, sorted by score descending.",
)
async def list_clients(
    request_id: RequestId,
    page: Page,
    search: str | None = Query(default=None, description="Name, phone or email substring"),
    client_status: str | None = Query(default=None, description="VIP, REGULAR, PROBLEM, LOST or ALL"),
    risk_level: str | None = Query(default=None, description="LOW, MEDIUM, HIGH or CRITICAL"),
    has_subscription: bool | None = Query(default=None),
    min_score: int | None = Query(default=None, ge=0, le=100),
    min_visits: int | None = Query(default=None, ge=0),
    days_inactive: int | None = Query(default=None, ge=0),
) -> ApiResponse[ListPage[ClientResponse]]:
    """List clients with filters."""
    service = ClientService()
    result = service.list_clients(
        page,
        search=search,
        client_status=client_status,
        risk_level=risk_level,
        has_subscription=has_subscription,
        min_score=min_score,
        min_visits=min_visits,
        days_inactive=days_inactive,
    )
    return ApiResponse(data=result)


@router.get(
    "/{client_id}",
    response_model=ApiResponse[ClientDetailResponse],
    summary="Get client",
    description="Get a client with the value index breakdown and recommendations.",
)
async def get_client(
    client_id: str,
    request_id: RequestId,
) -> ApiResponse[ClientDetailResponse]:
    """Get a client by ID."""
    return ApiResponse(data=ClientService().get_client(client_id))


@router.put(
    "/{client_id}",
    response_model=ApiResponse[ClientDetailResponse],
    summary="Update client",
    description="Client data is read-only and managed in YClients; returns the client unchanged.",
)
async def update_client(
    client_id: str,
    request_id: RequestId,
) -> ApiResponse[ClientDetailResponse]:
    return ApiResponse(data=ClientService().update_client(client_id))


@router.delete(
    "/{client_id}",
    summary="Delete client",
    description="Not allowed: clients are managed in YClients.",
)
async def delete_client(
    client_id: str,
    request_id: RequestId,
) -> None:
    ClientService().delete_client(client_id)
