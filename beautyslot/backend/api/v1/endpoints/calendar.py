"""
Calendar API Endpoints.
"""

from fastapi import APIRouter, Query

from beautyslot.backend.core.dependencies import RequestId, SalonTimezone
from beautyslot.backend.schemas.base import ApiResponse
from beautyslot.backend.schemas.calendar import CalendarData
from beautyslot.backend.services.calendar import CalendarDataService

router = APIRouter()


@router.get(
    "/data",
    response_model=ApiResponse[CalendarData],
    summary="Calendar data",
    description="Staff, services, clients and appointments for the admin calendar view.",
)
async def calendar_data(
    request_id: RequestId,
    tz_name: SalonTimezone,
    date_from: str | None = Query(default=None, description="Inclusive first day, YYYY-MM-DD"),
    date_to: str | None = Query(default=None, description="Inclusive last day, YYYY-MM-DD"),
) -> ApiResponse[CalendarData]:
    service = CalendarDataService(tz_name)
    return ApiResponse(data=service.get_data(date_from=date_from, date_to=date_to))
