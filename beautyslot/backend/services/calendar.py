"""
Calendar Service.

Builds the admin calendar grid from the sync store.
"""

from datetime import datetime, timedelta, timezone

from beautyslot.backend.core.utils import record_day, salon_zone
from beautyslot.backend.models.yclients import YClientsRecord
from beautyslot.backend.schemas.calendar import (
    CalendarAppointment,
    CalendarClient,
    CalendarData,
    CalendarRisk,
    CalendarService,
    CalendarStaff,
    CalendarStatus,
)
from beautyslot.backend.services.base import BaseService

STAFF_COLORS = (
    "#7950f2", "#228be6", "#12b886", "#fd7e14",
    "#e64980", "#40c057", "#fab005", "#15aabf",
    "#be4bdb", "#4c6ef5", "#82c91e", "#f06595",
)

CLIENTS_LIMIT = 100
DEFAULT_SEANCE_SECONDS = 3600
DEFAULT_ROLE = "Мастер"
NO_NAME = "Без имени"


def calculate_risk_level(client: CalendarClient) -> CalendarRisk:
    """
    Risk of a client not showing up, from their attendance history.

    A client with no history at all is treated as medium risk.
    """
    total = client.visit_count + client.cancel_count + client.no_show_count
    if total == 0:
        return "medium"
    cancel_rate = (client.cancel_count + client.no_show_count) / total
    if cancel_rate > 0.3:
        return "high"
    if client.visit_count == 1 and client.cancel_count == 0:
        return "medium"
    return "low"


def map_calendar_status(record: YClientsRecord) -> CalendarStatus:
    if record.deleted:
        return "canceled"
    if record.attendance == -1:
        return "no_show"
    if record.attendance == 1:
        return "completed"
    if record.confirmed == 1:
        return "confirmed"
    return "new"


def _to_utc_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def record_time_range(record: YClientsRecord, tz_name: str) -> tuple[str, str]:
    """
    Start and end of a record as UTC ISO strings.

    Offset-free YClients datetimes are read in the salon timezone.
    """
    raw = (record.datetime or record.date).strip().replace(" ", "T", 1)
    start = datetime.fromisoformat(raw)
    if start.tzinfo is None:
        start = start.replace(tzinfo=salon_zone(tz_name))
    minutes = round((record.seance_length or DEFAULT_SEANCE_SECONDS) / 60)
    end = start + timedelta(minutes=minutes)
    return _to_utc_iso(start), _to_utc_iso(end)


class CalendarDataService(BaseService):
    """Assembles staff, services, clients and appointments for the calendar."""

    def __init__(self, tz_name: str = "Europe/Moscow") -> None:
        super().__init__()
        self._tz_name = tz_name

    def get_data(self, date_from: str | None = None, date_to: str | None = None) -> CalendarData:
        """
        Build the calendar payload.

        Args:
            date_from: Inclusive first day (YYYY-MM-DD)
            date_to: Inclusive last day (YYYY-MM-DD)

        Returns:
            CalendarData with ``total_records`` counting every synced record
            and ``filtered_records`` the appointments actually returned
        """
        store = self.sync_store

        staff_by_id: dict[int, CalendarStaff] = {}
        visible_staff = [s for s in store.staff if not s.fired and not s.hidden]
        for index, s in enumerate(visible_staff):
            staff_by_id[s.id] = CalendarStaff(
                id=str(s.id),
                name=s.name or NO_NAME,
                role=s.specialization or DEFAULT_ROLE,
                avatar=s.avatar_big or s.avatar or None,
                color=STAFF_COLORS[index % len(STAFF_COLORS)],
            )

        clients_by_id: dict[int, CalendarClient] = {
            c.id: CalendarClient(
                id=str(c.id),
                name=c.name or NO_NAME,
                phone=c.phone or "",
                email=c.email or None,
                visit_count=c.visit_count or 0,
                last_visit_at=c.last_visit_date or None,
            )
            for c in store.clients
        }

        services_by_id: dict[int, CalendarService] = {
            s.id: CalendarService(
                id=str(s.id),
                name=s.title or "Услуга",
                duration_minutes=(s.seance_length // 60) if s.seance_length else 60,
                price=s.price_min or 0,
            )
            for s in store.services
        }

        records = store.records
        filtered = records
        if date_from:
            filtered = [r for r in filtered if record_day(r.date) >= date_from]
        if date_to:
            filtered = [r for r in filtered if record_day(r.date) <= date_to]

        appointments = [
            self._to_appointment(r, clients_by_id, staff_by_id, services_by_id)
            for r in filtered
            if not r.deleted
        ]

        return CalendarData(
            staff=list(staff_by_id.values()),
            services=list(services_by_id.values()),
            clients=list(clients_by_id.values())[:CLIENTS_LIMIT],
            appointments=appointments,
            total_records=len(records),
            filtered_records=len(appointments),
        )

    def _to_appointment(
        self,
        record: YClientsRecord,
        clients_by_id: dict[int, CalendarClient],
        staff_by_id: dict[int, CalendarStaff],
        services_by_id: dict[int, CalendarService],
    ) -> CalendarAppointment:
        fallback_minutes = (record.seance_length // 60) if record.seance_length else 60

        if record.client and record.client.id in clients_by_id:
            client = clients_by_id[record.client.id]
        elif record.client:
            client = CalendarClient(
                id=str(record.client.id),
                name=record.client.name or NO_NAME,
                phone=record.client.phone or "",
                email=record.client.email or None,
                visit_count=1,
            )
        else:
            client = CalendarClient(id="0", name="Неизвестный клиент", phone="", visit_count=0)

        staff = staff_by_id.get(record.staff_id) or CalendarStaff(
            id=str(record.staff_id),
            name="Неизвестный мастер",
            role=DEFAULT_ROLE,
            color=STAFF_COLORS[0],
        )

        first = record.services[0] if record.services else None
        if first and first.id in services_by_id:
            service = services_by_id[first.id]
        elif first:
            service = CalendarService(
                id=str(first.id),
                name=first.title or "Услуга",
                duration_minutes=fallback_minutes,
                price=first.cost or 0,
            )
        else:
            service = CalendarService(
                id="0",
                name="Неизвестная услуга",
                duration_minutes=fallback_minutes,
                price=0,
            )

        start_time, end_time = record_time_range(record, self._tz_name)

        return CalendarAppointment(
            id=str(record.id),
            client_id=client.id,
            client=client,
            staff_id=staff.id,
            staff=staff,
            service_id=service.id,
            service=service,
            start_time=start_time,
            end_time=end_time,
            status=map_calendar_status(record),
            risk_level=calculate_risk_level(client),
            notes=record.comment or None,
        )
