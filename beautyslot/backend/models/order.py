"""
Shop Order Model.
"""

from enum import StrEnum

from pydantic import BaseModel, Field

from beautyslot.backend.models.base import Base, TimestampMixin, UUIDMixin


class OrderStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderProduct(BaseModel):
    id: str | int
    title: str
    price: int | float = Field(ge=0)
    image: str | None = None


class OrderItem(BaseModel):
    product: OrderProduct
    quantity: int = Field(default=1, ge=1)


class OrderCustomer(BaseModel):
    name: str
    phone: str
    email: str | None = None
    telegram_id: str | int | None = None
    notes: str | None = None


class ShopOrder(UUIDMixin, TimestampMixin, Base):
    """A shop order. ``total`` is fixed at creation from the item prices."""

    order_number: str
    items: list[OrderItem]
    customer: OrderCustomer
    total: int | float
    status: OrderStatus = OrderStatus.PENDING
    notes: str | None = None
