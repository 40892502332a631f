"""
Staff API Endpoints.
"""

from fastapi import APIRouter, Query

from beautyslot.backend.core.dependencies import RequestId
from beautyslot.backend.schemas.base import ApiResponse, ListPage
from beautyslot.backend.schemas.staff import StaffResponse, StaffTodayStats, StaffToggleActive
from beautyslot.backend.services.staff import StaffService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[ListPage[StaffResponse]],
    summary="List staff",
    description="List synced staff sorted by today's appointment count.",
)
async def list_staff(
    request_id: RequestId,
    include_fired: bool = Query(default=False, description="Include fired staff"),
    search: str | None = Query(default=None),
    role: str | None = Query(default=None, description="Specialization or position substring"),
    is_active: bool | None = Query(default=None),
) -> ApiResponse[ListPage[StaffResponse]]:
    service = StaffService()
    return ApiResponse(
        data=service.list_staff(
            include_fired=include_fired,
            search=search,
            role=role,
            is_active=is_active,
        )
    )


@router.get(
    "/today-stats",
    response_model=ApiResponse[StaffTodayStats],
    summary="Today's staff stats",
)
async def today_stats(request_id: RequestId) -> ApiResponse[StaffTodayStats]:
    return ApiResponse(data=StaffService().today_stats())


@router.put(
    "/{staff_id}/toggle-active",
    response_model=ApiResponse[StaffResponse],
    summary="Toggle staff activity",
    description="Override the activity flag computed from YClients.",
)
async def toggle_active(
    staff_id: int,
    data: StaffToggleActive,
    request_id: RequestId,
) -> ApiResponse[StaffResponse]:
    """Set the activity override for a staff member."""
    return ApiResponse(data=StaffService().toggle_active(staff_id, data.is_active))
