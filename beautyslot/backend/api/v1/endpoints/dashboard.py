"""
Dashboard API Endpoints.
"""

from fastapi import APIRouter, Query

from beautyslot.backend.core.dependencies import RequestId
from beautyslot.backend.schemas.base import ApiResponse
from beautyslot.backend.schemas.dashboard import DashboardStats
from beautyslot.backend.services.dashboard import DashboardService

router = APIRouter()


@router.get(
    "/stats",
    response_model=ApiResponse[DashboardStats],
    summary="Dashboard stats",
    description="Revenue, week occupancy, retention, lost clients and alerts.",
)
async def dashboard_stats(
    request_id: RequestId,
    date: str | None = Query(default=None, description="Selected day, YYYY-MM-DD; today by default"),
) -> ApiResponse[DashboardStats]:
    return ApiResponse(data=DashboardService().get_stats(date))
