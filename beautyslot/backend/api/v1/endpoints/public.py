"""
Public Microsite API Endpoints.

Unauthenticated catalog and booking endpoints for the salon website and
the Telegram Mini App.
"""

from fastapi import APIRouter, Query

from beautyslot.backend.core.dependencies import RequestId, YClients
from beautyslot.backend.schemas.base import ApiResponse, ListPage, MessageResponse
from beautyslot.backend.schemas.public import (
    BookingCreate,
    BookingDetails,
    BookingReschedule,
    BookingResponse,
    ClientRecordsResponse,
    PublicCategory,
    PublicService,
    PublicStaff,
    RescheduledBooking,
    SlotsResponse,
)
from beautyslot.backend.services.public import SalonSiteService

router = APIRouter()


@router.get(
    "/services",
    response_model=ApiResponse[ListPage[PublicService]],
    summary="Public service catalog",
    description="Active services that fall into a marketplace category, sorted by name.",
)
async def list_services(
    request_id: RequestId,
    category_id: int | None = Query(default=None),
    search: str | None = Query(default=None),
    limit: int = Query(default=50, ge=0),
) -> ApiResponse[ListPage[PublicService]]:
    service = SalonSiteService()
    return ApiResponse(data=service.list_services(category_id=category_id, search=search, limit=limit))


@router.get(
    "/services/{service_id}",
    response_model=ApiResponse[PublicService],
    summary="Public service details",
)
async def get_service(
    service_id: str,
    request_id: RequestId,
) -> ApiResponse[PublicService]:
    return ApiResponse(data=SalonSiteService().get_service(service_id))


@router.get(
    "/categories",
    response_model=ApiResponse[ListPage[PublicCategory]],
    summary="Service categories",
    description="Marketplace categories that contain at least one active service.",
)
async def list_categories(request_id: RequestId) -> ApiResponse[ListPage[PublicCategory]]:
    return ApiResponse(data=SalonSiteService().list_categories())


@router.get(
    "/staff",
    response_model=ApiResponse[ListPage[PublicStaff]],
    summary="Bookable masters",
)
async def list_staff(request_id: RequestId) -> ApiResponse[ListPage[PublicStaff]]:
    return ApiResponse(data=SalonSiteService().list_staff())


@router.get(
    "/slots",
    response_model=ApiResponse[SlotsResponse],
    summary="Free time slots",
    description="Half-hour slots between 09:00 and 21:00 for a service on one day.",
)
async def get_slots(
    client: YClients,
    request_id: RequestId,
    service_id: str | None = Query(default=None),
    date: str | None = Query(default=None, description="Day, YYYY-MM-DD"),
    staff_id: int | None = Query(default=None),
) -> ApiResponse[SlotsResponse]:
    service = SalonSiteService(client)
    return ApiResponse(data=await service.get_slots(service_id, date, staff_id=staff_id))


@router.post(
    "/booking",
    response_model=ApiResponse[BookingResponse],
    summary="Create a booking",
    description="Accept a booking request; the salon confirms it later.",
)
async def create_booking(
    data: BookingCreate,
    request_id: RequestId,
) -> ApiResponse[BookingResponse]:
    return ApiResponse(data=SalonSiteService().create_booking(data))


@router.get(
    "/booking/{record_id}",
    response_model=ApiResponse[BookingDetails],
    summary="Get a booking",
)
async def get_booking(
    record_id: str,
    client: YClients,
    request_id: RequestId,
) -> ApiResponse[BookingDetails]:
    return ApiResponse(data=await SalonSiteService(client).get_booking(record_id))


@router.put(
    "/booking/{record_id}",
    response_model=ApiResponse[RescheduledBooking],
    summary="Reschedule a booking",
    description="Move a booking to another time and/or master. 409 if the slot is taken.",
)
async def reschedule_booking(
    record_id: str,
    data: BookingReschedule,
    client: YClients,
    request_id: RequestId,
) -> ApiResponse[RescheduledBooking]:
    return ApiResponse(data=await SalonSiteService(client).reschedule_booking(record_id, data))


@router.delete(
    "/booking/{record_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Cancel a booking",
)
async def cancel_booking(
    record_id: str,
    client: YClients,
    request_id: RequestId,
) -> ApiResponse[MessageResponse]:
    await SalonSiteService(client).cancel_booking(record_id)
    return ApiResponse(data=MessageResponse(message="Booking cancelled"))


@router.get(
    "/client/records",
    response_model=ApiResponse[ClientRecordsResponse],
    summary="Client's bookings by phone",
    description="Upcoming and past YClients records of the client with this phone.",
)
async def client_records(
    client: YClients,
    request_id: RequestId,
    phone: str | None = Query(default=None),
) -> ApiResponse[ClientRecordsResponse]:
    return ApiResponse(data=await SalonSiteService(client).get_client_records(phone))
