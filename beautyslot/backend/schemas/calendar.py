"""
Calendar Schemas.

Payload of the admin calendar view: staff columns, services, a client
picker list and the appointments placed on the grid.
"""

from typing import Literal

from pydantic import BaseModel

CalendarStatus = Literal["new", "confirmed", "completed", "canceled", "no_show"]
CalendarRisk = Literal["low", "medium", "high"]


class CalendarClient(BaseModel):
    id: str
    name: str
    phone: str
    email: str | None = None
    visit_count: int
    cancel_count: int = 0
    no_show_count: int = 0
    last_visit_at: str | None = None


class CalendarStaff(BaseModel):
    id: str
    name: str
    role: str
    avatar: str | None = None
    color: str
    services_ids: list[str] = []


class CalendarService(BaseModel):
    id: str
    name: str
    duration_minutes: int
    price: int | float
    category: str = "Общее"


class CalendarAppointment(BaseModel):
    id: str
    client_id: str
    client: CalendarClient
    staff_id: str
    staff: CalendarStaff
    service_id: str
    service: CalendarService
    start_time: str
    end_time: str
    status: CalendarStatus
    source: Literal["native", "yclients", "dikidi"] = "yclients"
    risk_level: CalendarRisk
    notes: str | None = None


class CalendarData(BaseModel):
    staff: list[CalendarStaff]
    services: list[CalendarService]
    clients: list[CalendarClient]
    appointments: list[CalendarAppointment]
    total_records: int
    filtered_records: int
