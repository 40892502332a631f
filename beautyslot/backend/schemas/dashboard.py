"""
Dashboard Schemas.

Payload of GET /admin/dashboard/stats. Every figure is relative to the
selected date.
"""

from typing import Literal

from pydantic import BaseModel


class RevenueStats(BaseModel):
    today: int | float
    week: int | float
    month: int | float
    records_today: int
    records_this_week: int
    records_this_month: int


class OccupancyDay(BaseModel):
    day: str
    date: str
    occupancy: int
    booked_slots: int
    total_slots: int
    is_past: bool
    is_today: bool


class OccupancyStats(BaseModel):
    week_data: list[OccupancyDay]
    avg_occupancy: int


class RetentionMonth(BaseModel):
    month: str
    new_clients: int
    returned: int
    rate: int


class RetentionStats(BaseModel):
    data: list[RetentionMonth]
    current_rate: int


class LostClient(BaseModel):
    id: int
    name: str
    phone: str
    last_visit: str | None
    days_ago: int


class LostClientStats(BaseModel):
    items: list[LostClient]
    risk30_60: int
    risk60plus: int


class DashboardAlert(BaseModel):
    type: Literal["warning", "error"]
    title: str
    count: str


class DashboardStats(BaseModel):
    selected_date: str
    revenue: RevenueStats
    occupancy: OccupancyStats
    retention: RetentionStats
    lost_clients: LostClientStats
    alerts: list[DashboardAlert]
