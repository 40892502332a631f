"""
Staff Schemas.
"""

from pydantic import BaseModel


class StaffResponse(BaseModel):
    id: int
    yclients_id: str
    name: str
    role: str = "MASTER"
    specialization: str | None = None
    position: str | None = None
    photo_url: str | None = None
    is_active: bool
    fired: bool = False
    appointments_today: int = 0
    rating: int | float | None = None


class StaffToggleActive(BaseModel):
    """Body of PUT /staff/{id}/toggle-active. Checked strictly in the service."""

    is_active: object = None


class StaffTodayStats(BaseModel):
    total: int
    active_today: int
    appointments_today: int
