"""
Appointment Service.

Admin view of synced YClients records.
"""

from collections import Counter
from datetime import datetime

from beautyslot.backend.core.pagination import SkipLimit
from beautyslot.backend.core.utils import local_now, parse_record_datetime, record_day
from beautyslot.backend.models.yclients import YClientsRecord
from beautyslot.backend.schemas.appointment import (
    AppointmentResponse,
    AppointmentServiceLine,
    AppointmentStats,
    AppointmentStatus,
)
from beautyslot.backend.schemas.base import ListPage
from beautyslot.backend.services.base import BaseService
from beautyslot.backend.services.client import NOT_SYNCED_MESSAGE

DEFAULT_DURATION_MINUTES = 60


def map_status(record: YClientsRecord) -> AppointmentStatus:
    """
    Map YClients state to an admin status.

    attendance: -1 no-show, 0 waiting, 1 visited, 2 confirmed.
    """
    if record.deleted:
        return AppointmentStatus.CANCELLED
    if record.attendance == -1:
        return AppointmentStatus.NO_SHOW
    if record.attendance == 1:
        return AppointmentStatus.COMPLETED
    if record.confirmed == 1:
        return AppointmentStatus.CONFIRMED
    return AppointmentStatus.PENDING


def duration_minutes(record: YClientsRecord) -> int:
    """Record length in minutes; ``seance_length`` is in seconds."""
    if record.seance_length:
        return record.seance_length // 60
    return DEFAULT_DURATION_MINUTES


class AppointmentService(BaseService):
    """Lists appointments and counts them by status."""

    def _to_response(self, record: YClientsRecord) -> AppointmentResponse:
        store = self.sync_store
        staff = store.find_staff(record.staff_id)
        client = store.find_client(record.client.id) if record.client else None

        client_name = client.name if client else (record.client.name if record.client else None)
        client_phone = client.phone if client else (record.client.phone if record.client else None)
        staff_name = staff.name if staff else (record.staff.name if record.staff else None)

        return AppointmentResponse(
            id=record.id,
            client_id=record.client_id,
            client_name=client_name or None,
            client_phone=client_phone or None,
            staff_id=record.staff_id,
            staff_name=staff_name or None,
            service_name=", ".join(t for t in record.service_titles if t) or "Услуга",
            services=[
                AppointmentServiceLine(id=s.id, title=s.title, cost=s.cost)
                for s in record.services
            ],
            scheduled_at=record.datetime or record.date,
            duration_minutes=duration_minutes(record),
            price=record.total_cost,
            status=map_status(record),
            comment=record.comment or None,
            created_at=record.create_date,
            online=record.online,
        )

    def list_appointments(
        self,
        page: SkipLimit,
        status: AppointmentStatus | None = None,
        staff_id: int | None = None,
        client_id: int | None = None,
        date: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> ListPage[AppointmentResponse]:
        """
        List appointments, newest first.

        ``date`` selects a single day (YYYY-MM-DD) and takes precedence over
        the inclusive ``date_from``/``date_to`` range.
        """
        records = self.sync_store.records
        if not records:
            return ListPage(items=[], total=0, skip=page.skip, limit=page.limit, message=NOT_SYNCED_MESSAGE)

        if date:
            records = [r for r in records if record_day(r.date) == date]
        else:
            if date_from:
                records = [r for r in records if record_day(r.date) >= date_from]
            if date_to:
                records = [r for r in records if record_day(r.date) <= date_to]
        if staff_id is not None:
            records = [r for r in records if r.staff_id == staff_id]
        if client_id is not None:
            records = [r for r in records if r.client_id == client_id]

        items = [self._to_response(r) for r in records]
        if status is not None:
            items = [a for a in items if a.status == status]

        items.sort(
            key=lambda a: parse_record_datetime(a.scheduled_at) or datetime.min,
            reverse=True,
        )
        return ListPage(items=page.apply(items), total=len(items), skip=page.skip, limit=page.limit)

    def stats_for_day(self, day: str | None = None) -> AppointmentStats:
        """Count a day's records by status; defaults to today."""
        day = day or local_now().date().isoformat()
        statuses = Counter(
            map_status(r) for r in self.sync_store.records if record_day(r.date) == day
        )
        return AppointmentStats(
            date=day,
            total=sum(statuses.values()),
            pending=statuses[AppointmentStatus.PENDING],
            confirmed=statuses[AppointmentStatus.CONFIRMED],
            completed=statuses[AppointmentStatus.COMPLETED],
            cancelled=statuses[AppointmentStatus.CANCELLED],
            no_show=statuses[AppointmentStatus.NO_SHOW],
        )
