"""
Appointment Schemas.
"""

from enum import StrEnum

from pydantic import BaseModel


class AppointmentStatus(StrEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class AppointmentServiceLine(BaseModel):
    id: int
    title: str
    cost: int | float


class AppointmentResponse(BaseModel):
    id: int
    client_id: int | None = None
    client_name: str | None = None
    client_phone: str | None = None
    staff_id: int
    staff_name: str | None = None
    service_name: str
    services: list[AppointmentServiceLine]
    scheduled_at: str
    duration_minutes: int
    price: int | float
    status: AppointmentStatus
    comment: str | None = None
    created_at: str | None = None
    online: bool = False


class AppointmentStats(BaseModel):
    date: str
    total: int
    pending: int
    confirmed: int
    completed: int
    cancelled: int
    no_show: int
