"""
Client Schemas.

Admin view of synced YClients clients with their value index.
"""

from pydantic import BaseModel


class ClientResponse(BaseModel):
    """Client as listed in the admin panel."""

    id: int
    yclients_id: str
    name: str
    phone: str
    email: str | None = None
    birth_date: str | None = None
    comment: str | None = None
    is_blocked: bool = False
    role: str = "USER"
    created_at: str | None = None
    updated_at: str | None = None
    last_visit_at: str | None = None
    visits_count: int = 0
    no_show_count: int = 0
    total_spent: int | float = 0
    score: int
    risk_level: str
    client_status: str
    days_since_last_visit: int | None = None
    tier: str
    has_active_subscription: bool = False


class IVKMetrics(BaseModel):
    days_since_last_visit: int | None = None
    months_as_client: int | None = None
    visits_per_month: float | None = None
    total_spent: int | float = 0
    avg_check: int | float = 0


class IVKDetails(BaseModel):
    components: dict[str, int]
    percentages: dict[str, int]
    metrics: IVKMetrics
    tier: str


class ClientDetailResponse(ClientResponse):
    """Client with the breakdown of the value index."""

    ivk_details: IVKDetails
    recommendations: list[str]
    message: str | None = None
