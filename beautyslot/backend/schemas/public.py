"""
Public Microsite Schemas.

Shapes served to the salon website and the Telegram Mini App.
"""

from typing import Literal

from pydantic import BaseModel

from beautyslot.backend.models.yclients import RecordClient, RecordService


class PublicCategory(BaseModel):
    id: int
    name: str
    icon: str
    order: int
    services_count: int


class PublicService(BaseModel):
    id: int
    name: str
    description: str = ""
    category_id: int
    category_name: str
    price_from: int | float
    price_to: int | float
    duration: int
    image: str | None = None


class PublicStaff(BaseModel):
    id: int
    name: str
    specialization: str = ""
    avatar: str | None = None
    rating: int | float = 0
    reviews_count: int = 0


class TimeSlot(BaseModel):
    time: str
    datetime: str
    available: bool


class SlotsResponse(BaseModel):
    date: str
    staff_id: int | None = None
    slots: list[TimeSlot]


class BookingCreate(BaseModel):
    """Booking form; required fields are checked in the service."""

    service_id: int | None = None
    staff_id: int | None = None
    datetime: str | None = None
    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None
    comment: str | None = None
    telegram_user_id: int | None = None


class NamedRef(BaseModel):
    id: int
    name: str


class BookingResponse(BaseModel):
    id: int
    service: NamedRef
    staff: NamedRef
    datetime: str
    status: Literal["confirmed", "pending"] = "pending"


class BookingReschedule(BaseModel):
    datetime: str | None = None
    staff_id: int | None = None


class BookingDetails(BaseModel):
    id: int
    datetime: str
    staff_id: int
    services: list[RecordService]
    client: RecordClient | None = None
    status: Literal["cancelled", "completed", "confirmed", "pending"]


class RescheduledBooking(BaseModel):
    id: int
    datetime: str
    staff_id: int


class ClientRecordService(BaseModel):
    id: int
    title: str
    cost: int | float


class ClientRecord(BaseModel):
    id: int
    service: str
    services: list[ClientRecordService]
    master: str
    master_id: int
    date: str
    time: str
    datetime: str
    price: int | float
    status: Literal["upcoming", "completed", "cancelled"]
    confirmed: bool


class ClientSummary(BaseModel):
    id: int
    name: str | None = None
    phone: str | None = None
    visit_count: int = 0
    last_visit_date: str | None = None


class ClientRecordsResponse(BaseModel):
    client: ClientSummary | None = None
    upcoming: list[ClientRecord]
    past: list[ClientRecord]
