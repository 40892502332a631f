"""
YClients Models.

Shapes of the YClients REST payloads the app reads. Unknown fields are
kept (``extra="allow"``) and every field has a tolerant default because
YClients omits or nulls fields depending on company settings.
"""

from pydantic import BaseModel, ConfigDict, Field


class YClientsModel(BaseModel):
    """Base for YClients payloads."""

    model_config = ConfigDict(extra="allow")


class ClientCategory(YClientsModel):
    id: int
    title: str = ""


class YClientsClient(YClientsModel):
    """A salon client as returned by ``/company/{id}/clients/search``."""

    id: int
    name: str | None = ""
    phone: str | None = ""
    email: str | None = ""
    sex_id: int | None = None
    sex: str | None = None
    importance_id: int | None = None
    importance: str | None = None
    discount: int | float = 0
    first_visit_date: str | None = None
    last_visit_date: str | None = None
    sold_amount: int | float = 0
    visit_count: int = 0
    avg_sum: int | float = 0
    balance: int | float = 0
    spent: int | float = 0
    paid: int | float = 0
    birth_date: str | None = None
    comment: str | None = ""
    categories: list[ClientCategory] = Field(default_factory=list)


class RecordService(YClientsModel):
    """A service line inside a record."""

    id: int
    title: str = ""
    cost: int | float = 0
    cost_per_unit: int | float = 0
    first_cost: int | float = 0
    amount: int = 1


class RecordClient(YClientsModel):
    """The client reference embedded in a record."""

    id: int
    name: str | None = ""
    phone: str | None = ""
    email: str | None = ""


class RecordStaff(YClientsModel):
    """The staff reference embedded in a record."""

    id: int
    name: str | None = ""


class YClientsRecord(YClientsModel):
    """
    An appointment ("record").

    ``date`` is local wall-clock "YYYY-MM-DD HH:MM:SS"; ``datetime`` is
    ISO 8601 with the company's offset. ``attendance``: -1 no-show,
    0 waiting, 1 visited, 2 confirmed.
    """

    id: int
    company_id: int | None = None
    staff_id: int = 0
    staff: RecordStaff | None = None
    services: list[RecordService] = Field(default_factory=list)
    client: RecordClient | None = None
    date: str = ""
    datetime: str = ""
    create_date: str | None = None
    last_change_date: str | None = None
    comment: str | None = ""
    online: bool = False
    visit_attendance: int = 0
    attendance: int = 0
    confirmed: int = 0
    seance_length: int | None = None
    length: int | None = None
    deleted: bool = False

    @property
    def client_id(self) -> int | None:
        return self.client.id if self.client else None

    @property
    def total_cost(self) -> int | float:
        return sum(service.cost for service in self.services)

    @property
    def service_titles(self) -> list[str]:
        return [service.title for service in self.services]


class StaffPosition(YClientsModel):
    id: int | None = None
    title: str = ""


class YClientsStaff(YClientsModel):
    """A staff member ("master")."""

    id: int
    name: str = ""
    specialization: str | None = ""
    position: StaffPosition | None = None
    avatar: str | None = ""
    avatar_big: str | None = ""
    rating: int | float = 0
    votes_count: int = 0
    show_rating: int = 0
    comments_count: int = 0
    bookable: bool = True
    status: int = 1
    hidden: int = 0
    fired: int = 0
    user_id: int | None = None

    @property
    def is_visible(self) -> bool:
        """Not fired and not hidden."""
        return not self.fired and not self.hidden


class YClientsService(YClientsModel):
    """A bookable service."""

    id: int
    title: str = ""
    category_id: int = 0
    price_min: int | float = 0
    price_max: int | float = 0
    discount: int | float = 0
    comment: str | None = ""
    weight: int = 0
    active: int = 1
    sex: int = 0
    image: str | None = ""
    prepaid: str | None = None
    seance_length: int | None = None
    booking_title: str | None = ""
