"""
Appointments API Endpoints.

Synced YClients records presented as appointments.
"""

from fastapi import APIRouter, Query

from beautyslot.backend.core.dependencies import RequestId
from beautyslot.backend.core.pagination import LargePage
from beautyslot.backend.schemas.appointment import (
    AppointmentResponse,
    AppointmentStats,
    AppointmentStatus,
)
from beautyslot.backend.schemas.base import ApiResponse, ListPage
from beautyslot.backend.services.appointment import AppointmentService

router = APIRouter()

DAY_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


@router.get(
    "",
    response_model=ApiResponse[ListPage[AppointmentResponse]],
    summary="List appointments",
    description="List appointments newest first. `date` selects one day and overrides the range.",
)
async def list_appointments(
    request_id: RequestId,
    page: LargePage,
    status: AppointmentStatus | None = Query(default=None),
    staff_id: int | None = Query(default=None),
    client_id: int | None = Query(default=None),
    date: str | None = Query(default=None, pattern=DAY_PATTERN),
    date_from: str | None = Query(default=None, pattern=DAY_PATTERN),
    date_to: str | None = Query(default=None, pattern=DAY_PATTERN),
) -> ApiResponse[ListPage[AppointmentResponse]]:
    service = AppointmentService()
    result = service.list_appointments(
        page,
        status=status,
        staff_id=staff_id,
        client_id=client_id,
        date=date,
        date_from=date_from,
        date_to=date_to,
    )
    return ApiResponse(data=result)


@router.get(
    "/stats",
    response_model=ApiResponse[AppointmentStats],
    summary="Appointment stats for a day",
)
async def appointment_stats(
    request_id: RequestId,
    date: str | None = Query(default=None, pattern=DAY_PATTERN, description="Day, defaults to today"),
) -> ApiResponse[AppointmentStats]:
    return ApiResponse(data=AppointmentService().stats_for_day(date))


@router.get(
    "/today-stats",
    response_model=ApiResponse[AppointmentStats],
    summary="Today's appointment stats",
)
async def today_stats(request_id: RequestId) -> ApiResponse[AppointmentStats]:
    return ApiResponse(data=AppointmentService().stats_for_day())
