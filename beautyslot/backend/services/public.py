"""
Public Microsite Service.

Catalog, staff, free slots and bookings for the salon website and the
Telegram Mini App. Catalog and staff come from the sync store; slots,
booking management and client records go to YClients directly.

Services are placed into marketplace categories by keyword: the first
category with an alias contained in the service title wins. Services
matching no category are left out of the public catalog.
"""

import re
import time
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from beautyslot.backend.core.exceptions import ConflictError, NotFoundError, ValidationError
from beautyslot.backend.core.utils import (
    format_day_month,
    local_now,
    mask_phone,
    normalize_phone,
    parse_record_datetime,
)
from beautyslot.backend.integrations.yclients import YClientsClient, YClientsError, get_yclients_client
from beautyslot.backend.models.yclients import YClientsRecord, YClientsService
from beautyslot.backend.schemas.base import ListPage
from beautyslot.backend.schemas.public import (
    BookingCreate,
    BookingDetails,
    BookingReschedule,
    BookingResponse,
    ClientRecord,
    ClientRecordService,
    ClientRecordsResponse,
    ClientSummary,
    NamedRef,
    PublicCategory,
    PublicService,
    PublicStaff,
    RescheduledBooking,
    SlotsResponse,
    TimeSlot,
)
from beautyslot.backend.services.base import BaseService


@dataclass(frozen=True)
class MarketCategory:
    id: int
    name: str
    icon: str
    order: int
    aliases: tuple[str, ...]


MARKET_CATEGORIES: tuple[MarketCategory, ...] = (
    MarketCategory(1, "Маникюр", "💅", 1, ("маникюр", "ногти", "гель-лак", "shellac", "шеллак")),
    MarketCategory(2, "Педикюр", "🦶", 2, ("педикюр", "стопы", "пятки")),
    MarketCategory(3, "Брови", "👁️", 3, ("брови", "brow", "коррекция бровей", "окрашивание бровей")),
    MarketCategory(4, "Ресницы", "👁️", 4, ("ресницы", "наращивание ресниц", "ламинирование")),
    MarketCategory(5, "Волосы", "💇", 5, ("стрижка", "окрашивание", "укладка", "волосы", "hair")),
    MarketCategory(6, "Макияж", "💄", 6, ("макияж", "визаж", "makeup")),
    MarketCategory(7, "Косметология", "✨", 7, ("косметология", "чистка", "пилинг", "уход за лицом")),
    MarketCategory(8, "Массаж", "💆", 8, ("массаж", "spa", "спа")),
)

OTHER_CATEGORY_NAME = "Другое"

SLOT_START_HOUR = 9
SLOT_END_HOUR = 21
SLOT_STEP_MINUTES = 30

PHONE_PATTERN = re.compile(r"^[\d\s+\-()]{10,20}$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

RECORD_NOT_FOUND = "Запись не найдена"
SLOT_BUSY = "Выбранное время уже занято. Пожалуйста, выберите другое время."


def category_for(title: str) -> MarketCategory | None:
    lowered = title.lower()
    for category in MARKET_CATEGORIES:
        if any(alias in lowered for alias in category.aliases):
            return category
    return None


def _ru_sort_key(value: str) -> str:
    return value.casefold().replace("ё", "е")


def _duration_minutes(service: YClientsService) -> int:
    return (service.seance_length or 0) // 60


def _to_public_service(service: YClientsService, category: MarketCategory | None) -> PublicService:
    return PublicService(
        id=service.id,
        name=service.title,
        description=service.comment or "",
        category_id=category.id if category else 0,
        category_name=category.name if category else OTHER_CATEGORY_NAME,
        price_from=service.price_min,
        price_to=service.price_max,
        duration=_duration_minutes(service),
        image=service.image or None,
    )


def record_time(record: YClientsRecord) -> str:
    """HH:MM of a record start, empty when the datetime is unparsable."""
    parsed = parse_record_datetime(record.datetime)
    return parsed.strftime("%H:%M") if parsed else ""


def day_label(value: datetime, today: date) -> str:
    """Сегодня, Завтра or a Russian day-month such as "5 марта"."""
    if value.date() == today:
        return "Сегодня"
    if value.date() == today + timedelta(days=1):
        return "Завтра"
    return format_day_month(value)


def booking_status(record: YClientsRecord) -> str:
    if record.deleted:
        return "cancelled"
    if record.attendance == 1:
        return "completed"
    if record.confirmed:
        return "confirmed"
    return "pending"


class SalonSiteService(BaseService):
    """Read-only catalog over synced data plus YClients-backed booking."""

    def __init__(self, client: YClientsClient | None = None) -> None:
        super().__init__()
        self._client = client

    @property
    def client(self) -> YClientsClient:
        if self._client is None:
            self._client = get_yclients_client()
        return self._client

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def list_services(
        self,
        category_id: int | None = None,
        search: str | None = None,
        limit: int = 50,
    ) -> ListPage[PublicService]:
        """Active, categorized services sorted by name."""
        needle = search.lower() if search else None
        items = []
        for service in self.sync_store.services:
            if service.active != 1:
                continue
            category = category_for(service.title)
            if category is None:
                continue
            if category_id is not None and category.id != category_id:
                continue
            if needle and needle not in service.title.lower():
                continue
            items.append(_to_public_service(service, category))

        items.sort(key=lambda s: _ru_sort_key(s.name))
        if limit > 0:
            items = items[:limit]
        return ListPage(items=items, total=len(items))

    def get_service(self, service_id: str) -> PublicService:
        """
        Raises:
            ValidationError: If the id is not numeric
            NotFoundError: If no synced service has this id
        """
        parsed_id = self._parse_int_id(service_id, "Invalid service ID")
        service = self.sync_store.find_service(parsed_id)
        if service is None:
            raise NotFoundError("Service not found")
        return _to_public_service(service, category_for(service.title))

    def list_categories(self) -> ListPage[PublicCategory]:
        counts: dict[int, int] = {}
        for service in self.sync_store.services:
            if service.active != 1:
                continue
            category = category_for(service.title)
            if category is not None:
                counts[category.id] = counts.get(category.id, 0) + 1

        items = [
            PublicCategory(
                id=c.id,
                name=c.name,
                icon=c.icon,
                order=c.order,
                services_count=counts[c.id],
            )
            for c in sorted(MARKET_CATEGORIES, key=lambda c: c.order)
            if counts.get(c.id)
        ]
        return ListPage(items=items, total=len(items))

    def list_staff(self) -> ListPage[PublicStaff]:
        """Bookable staff, best rated first."""
        items = [
            PublicStaff(
                id=s.id,
                name=s.name,
                specialization=s.specialization or (s.position.title if s.position else "") or "",
                avatar=s.avatar or s.avatar_big or None,
                rating=s.rating or 0,
                reviews_count=s.comments_count or 0,
            )
            for s in self.sync_store.staff
            if s.bookable and s.fired != 1 and s.hidden != 1
        ]
        items.sort(key=lambda s: s.rating, reverse=True)
        return ListPage(items=items, total=len(items))

    # ------------------------------------------------------------------
    # Slots and booking
    # ------------------------------------------------------------------

    async def get_slots(
        self,
        service_id: str | None,
        day: str | None,
        staff_id: int | None = None,
        now: datetime | None = None,
    ) -> SlotsResponse:
        """
        Half-hour slots from 09:00 to 21:00 for one day.

        A slot is taken when a YClients record starts at that time, and
        unavailable once it is in the past.

        Raises:
            ValidationError: If service_id or date is missing or the date
                is not YYYY-MM-DD
        """
        if not service_id:
            raise ValidationError("service_id is required")
        if not day:
            raise ValidationError("date is required")
        if not DATE_PATTERN.match(day):
            raise ValidationError("date must be in YYYY-MM-DD format")
        try:
            slot_day = date.fromisoformat(day)
        except ValueError:
            raise ValidationError("date must be in YYYY-MM-DD format") from None

        records = await self.client.get_records(start_date=day, end_date=day, staff_id=staff_id)
        occupied = {record_time(r) for r in records}
        now = now or local_now()

        slots = []
        for hour in range(SLOT_START_HOUR, SLOT_END_HOUR):
            for minute in range(0, 60, SLOT_STEP_MINUTES):
                starts_at = datetime.combine(slot_day, datetime.min.time()).replace(hour=hour, minute=minute)
                time_str = starts_at.strftime("%H:%M")
                slots.append(
                    TimeSlot(
                        time=time_str,
                        datetime=f"{day}T{time_str}:00",
                        available=time_str not in occupied and starts_at >= now,
                    )
                )

        return SlotsResponse(date=day, staff_id=staff_id, slots=slots)

    def create_booking(self, data: BookingCreate) -> BookingResponse:
        """
        Accept a booking request; the salon confirms it later.

        Raises:
            ValidationError: On missing fields or a malformed phone
        """
        self._validate_required(
            data.model_dump(),
            ["service_id", "staff_id", "datetime", "client_name", "client_phone"],
            message="Missing required fields: service_id, staff_id, datetime, client_name, client_phone",
        )
        if not PHONE_PATTERN.match(data.client_phone):
            raise ValidationError("Invalid phone number format")

        service = self.sync_store.find_service(data.service_id)
        staff = self.sync_store.find_staff(data.staff_id)

        booking = BookingResponse(
            id=int(time.time() * 1000),
            service=NamedRef(id=data.service_id, name=service.title if service else "Услуга"),
            staff=NamedRef(id=data.staff_id, name=staff.name if staff else "Мастер"),
            datetime=data.datetime,
        )
        self._log_operation(
            "Booking request received",
            booking_id=booking.id,
            service_id=data.service_id,
            staff_id=data.staff_id,
            datetime=data.datetime,
            client_phone=mask_phone(data.client_phone),
        )
        return booking

    async def get_booking(self, record_id: str) -> BookingDetails:
        """
        Raises:
            ValidationError: If the id is not numeric
            NotFoundError: If YClients has no such record
        """
        parsed_id = self._parse_int_id(record_id, "Invalid record ID")
        try:
            record = await self.client.get_record(parsed_id)
        except YClientsError as exc:
            if exc.is_not_found:
                raise NotFoundError(RECORD_NOT_FOUND) from exc
            raise
        if record is None:
            raise NotFoundError(RECORD_NOT_FOUND)

        return BookingDetails(
            id=record.id,
            datetime=record.datetime,
            staff_id=record.staff_id,
            services=record.services,
            client=record.client,
            status=booking_status(record),
        )

    async def reschedule_booking(self, record_id: str, data: BookingReschedule) -> RescheduledBooking:
        """
        Move a record to a new time and/or staff member.

        Raises:
            ValidationError: If the id is not numeric or nothing changes
            NotFoundError: If YClients has no such record
            ConflictError: If the new slot is busy
        """
        parsed_id = self._parse_int_id(record_id, "Invalid record ID")
        if not data.datetime and not data.staff_id:
            raise ValidationError("At least datetime or staff_id must be provided")

        self._log_operation("Rescheduling record", record_id=parsed_id, datetime=data.datetime, staff_id=data.staff_id)
        try:
            record = await self.client.update_record(parsed_id, datetime=data.datetime, staff_id=data.staff_id)
        except YClientsError as exc:
            if exc.is_not_found:
                raise NotFoundError(RECORD_NOT_FOUND) from exc
            if exc.is_busy:
                raise ConflictError(SLOT_BUSY) from exc
            raise

        return RescheduledBooking(id=record.id, datetime=record.datetime, staff_id=record.staff_id)

    async def cancel_booking(self, record_id: str) -> None:
        """
        Raises:
            ValidationError: If the id is not numeric
            NotFoundError: If YClients has no such record
        """
        parsed_id = self._parse_int_id(record_id, "Invalid record ID")
        try:
            await self.client.delete_record(parsed_id)
        except YClientsError as exc:
            if exc.is_not_found:
                raise NotFoundError(RECORD_NOT_FOUND) from exc
            raise
        self._log_operation("Record cancelled", record_id=parsed_id)

    # ------------------------------------------------------------------
    # Client records
    # ------------------------------------------------------------------

    @staticmethod
    def _format_record(record: YClientsRecord, staff_names: dict[int, str], now: datetime) -> ClientRecord:
        starts_at = parse_record_datetime(record.datetime) or parse_record_datetime(record.date) or now

        if record.attendance == -1 or record.deleted:
            status = "cancelled"
        elif starts_at < now:
            status = "completed"
        else:
            status = "upcoming"

        services = [ClientRecordService(id=s.id, title=s.title, cost=s.cost) for s in record.services]
        return ClientRecord(
            id=record.id,
            service=", ".join(s.title for s in services) or "Услуга",
            services=services,
            master=staff_names.get(record.staff_id, "Мастер"),
            master_id=record.staff_id,
            date=day_label(starts_at, now.date()),
            time=starts_at.strftime("%H:%M"),
            datetime=record.datetime,
            price=sum(s.cost for s in services),
            status=status,
            confirmed=record.confirmed == 1,
        )

    async def get_client_records(self, phone: str | None, now: datetime | None = None) -> ClientRecordsResponse:
        """
        A client's upcoming and past appointments, looked up by phone.

        Raises:
            ValidationError: If the phone is missing or not 10-12 digits
        """
        if not phone:
            raise ValidationError("Phone number is required")
        normalized = normalize_phone(phone)
        if not 10 <= len(normalized) <= 12:
            raise ValidationError("Invalid phone number format")

        clients = await self.client.get_clients(phone=normalized)
        if not clients:
            return ClientRecordsResponse(client=None, upcoming=[], past=[])
        client = clients[0]

        staff_names = {s.id: s.name for s in await self.client.get_staff()}
        now = now or local_now()
        records = await self.client.get_records(
            client_id=client.id,
            start_date=(now - timedelta(days=365)).date().isoformat(),
            end_date=(now + timedelta(days=365)).date().isoformat(),
        )

        formatted = [
            (parse_record_datetime(r.datetime) or now, self._format_record(r, staff_names, now))
            for r in records
            if not r.deleted
        ]
        upcoming = sorted((f for f in formatted if f[1].status == "upcoming"), key=lambda f: f[0])
        past = sorted((f for f in formatted if f[1].status != "upcoming"), key=lambda f: f[0], reverse=True)

        return ClientRecordsResponse(
            client=ClientSummary(
                id=client.id,
                name=client.name,
                phone=client.phone,
                visit_count=client.visit_count,
                last_visit_date=client.last_visit_date,
            ),
            upcoming=[f[1] for f in upcoming],
            past=[f[1] for f in past],
        )
