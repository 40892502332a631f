"""
Shop Order Schemas.
"""

from pydantic import BaseModel, Field

from beautyslot.backend.models.order import OrderItem, ShopOrder


class OrderCustomerIn(BaseModel):
    """Customer block of a new order; name and phone are checked in the service."""

    name: str | None = None
    phone: str | None = None
    email: str | None = None
    telegram_id: str | int | None = None
    notes: str | None = None


class OrderCreate(BaseModel):
    items: list[OrderItem] = Field(default_factory=list)
    customer: OrderCustomerIn | None = None


class OrderUpdate(BaseModel):
    status: str | None = None
    notes: str | None = None


class OrderStats(BaseModel):
    total: int
    by_status: dict[str, int]
    total_revenue: int | float
    today_orders: int
    today_revenue: int | float


class OrderListResponse(BaseModel):
    items: list[ShopOrder]
    total: int
    stats: OrderStats
