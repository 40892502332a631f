"""
Service Catalog Schemas.
"""

from pydantic import BaseModel


class ServiceResponse(BaseModel):
    id: int
    title: str
    category_id: int
    price_min: int | float
    price_max: int | float
    duration: int
    active: bool
    image: str | None = None
    comment: str | None = None
