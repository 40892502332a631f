"""
Services API Endpoints.

Salon service catalog as synced from YClients.
"""

from fastapi import APIRouter, Query

from beautyslot.backend.core.dependencies import RequestId
from beautyslot.backend.schemas.base import ApiResponse, ListPage
from beautyslot.backend.schemas.catalog import ServiceResponse
from beautyslot.backend.services.catalog import CatalogService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[ListPage[ServiceResponse]],
    summary="List services",
    description="List synced services sorted by title.",
)
async def list_services(
    request_id: RequestId,
    search: str | None = Query(default=None),
    category_id: int | None = Query(default=None),
    active_only: bool = Query(default=False),
) -> ApiResponse[ListPage[ServiceResponse]]:
    service = CatalogService()
    return ApiResponse(
        data=service.list_services(search=search, category_id=category_id, active_only=active_only)
    )
