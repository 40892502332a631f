"""
Dashboard Service.

Headline numbers of the admin dashboard: revenue, week occupancy,
monthly retention, clients who stopped coming and alerts. Everything is
computed from the sync store relative to a selected date.

Occupancy assumes 8 one-hour slots per working staff member per day.
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from beautyslot.backend.core.exceptions import ValidationError
from beautyslot.backend.core.utils import local_now, parse_record_datetime, record_day, round_half_up
from beautyslot.backend.models.yclients import YClientsRecord, YClientsStaff
from beautyslot.backend.schemas.dashboard import (
    DashboardAlert,
    DashboardStats,
    LostClient,
    LostClientStats,
    OccupancyDay,
    OccupancyStats,
    RetentionMonth,
    RetentionStats,
    RevenueStats,
)
from beautyslot.backend.services.base import BaseService

WEEKDAYS_SHORT = ("Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Вс")
MONTHS_SHORT = ("Янв", "Фев", "Мар", "Апр", "Май", "Июн", "Июл", "Авг", "Сен", "Окт", "Ноя", "Дек")
SLOTS_PER_STAFF_DAY = 8
LOST_AFTER_DAYS = 30
LOST_CLIENTS_SHOWN = 10


def record_moment(record: YClientsRecord) -> datetime | None:
    """Start of a record in salon time, from ``datetime`` or else ``date``."""
    return parse_record_datetime(record.datetime or record.date)


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days from earlier to later, rounded down."""
    return (later - earlier) // timedelta(days=1)


def working_staff(staff: Iterable[YClientsStaff]) -> list[YClientsStaff]:
    """Bookable staff who are not fired, else everyone not fired."""
    staff = list(staff)
    bookable = [s for s in staff if not s.fired and s.bookable]
    return bookable or [s for s in staff if not s.fired]


def revenue_of(records: Iterable[YClientsRecord]) -> int | float:
    return sum(r.total_cost for r in records)


def parse_day(value: str | None, default: date) -> date:
    """
    Parse a YYYY-MM-DD query value.

    Raises:
        ValidationError: If the value is not a date
    """
    if not value:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}") from None


def month_start(day: date, months_back: int = 0) -> date:
    year, month = divmod(day.year * 12 + day.month - 1 - months_back, 12)
    return date(year, month + 1, 1)


def month_end(day: date, months_back: int = 0) -> date:
    return month_start(day, months_back - 1) - timedelta(days=1)


class DashboardService(BaseService):
    """Builds the dashboard payload."""

    def get_stats(self, selected_date: str | None = None) -> DashboardStats:
        """
        Compute dashboard stats.

        Args:
            selected_date: YYYY-MM-DD the figures are relative to, today
                by default

        Raises:
            ValidationError: If selected_date is malformed
        """
        real_today = local_now().date()
        day = parse_day(selected_date, real_today)
        base = datetime.combine(day, time(12))

        store = self.sync_store
        live = [r for r in store.records if not r.deleted]

        week_start = day - timedelta(days=day.weekday())
        revenue = self._revenue(live, day, week_start)
        staff_count = len(working_staff(store.staff)) or len(store.staff)
        occupancy = self._occupancy(live, day, week_start, real_today, staff_count)
        retention = self._retention(day)
        lost = self._lost_clients(base)

        cancellations = sum(
            1 for r in store.records
            if r.deleted and self._between(r, week_start, week_start + timedelta(days=6))
        )
        alerts = self._alerts(occupancy.week_data, cancellations, lost.risk60plus)

        self._log_debug("Dashboard stats computed", selected_date=day.isoformat())
        return DashboardStats(
            selected_date=day.isoformat(),
            revenue=revenue,
            occupancy=occupancy,
            retention=retention,
            lost_clients=lost,
            alerts=alerts,
        )

    @staticmethod
    def _between(record: YClientsRecord, first: date, last: date) -> bool:
        moment = record_moment(record)
        return moment is not None and first <= moment.date() <= last

    def _revenue(self, live: list[YClientsRecord], day: date, week_start: date) -> RevenueStats:
        def select(first: date, last: date) -> list[YClientsRecord]:
            return [r for r in live if self._between(r, first, last)]

        month = select(month_start(day), month_end(day))
        week = select(week_start, day)
        today = select(day, day)
        return RevenueStats(
            today=revenue_of(today),
            week=revenue_of(week),
            month=revenue_of(month),
            records_today=sum(1 for r in live if record_day(r.date) == day.isoformat()),
            records_this_week=len(week),
            records_this_month=len(month),
        )

    @staticmethod
    def _occupancy(
        live: list[YClientsRecord],
        day: date,
        week_start: date,
        real_today: date,
        staff_count: int,
    ) -> OccupancyStats:
        total_slots = staff_count * SLOTS_PER_STAFF_DAY
        week_data = []
        for index, name in enumerate(WEEKDAYS_SHORT):
            current = week_start + timedelta(days=index)
            booked = sum(1 for r in live if record_day(r.date) == current.isoformat())
            occupancy = round_half_up(booked / total_slots * 100) if total_slots else 0
            week_data.append(
                OccupancyDay(
                    day=name,
                    date=current.isoformat(),
                    occupancy=min(occupancy, 100),
                    booked_slots=booked,
                    total_slots=total_slots,
                    is_past=current < real_today,
                    is_today=current == day,
                )
            )
        return OccupancyStats(
            week_data=week_data,
            avg_occupancy=round_half_up(sum(d.occupancy for d in week_data) / 7),
        )

    def _retention(self, day: date) -> RetentionStats:
        clients = self.sync_store.clients
        months = []
        for months_back in range(5, -1, -1):
            first, last = month_start(day, months_back), month_end(day, months_back)

            def within(value: str | None) -> bool:
                moment = parse_record_datetime(value)
                return moment is not None and first <= moment.date() <= last

            new_clients = sum(1 for c in clients if within(c.first_visit_date))
            returned = sum(1 for c in clients if c.visit_count > 1 and within(c.last_visit_date))
            rate = round_half_up(returned / new_clients * 100) if new_clients else 0
            months.append(
                RetentionMonth(
                    month=MONTHS_SHORT[first.month - 1],
                    new_clients=new_clients,
                    returned=returned,
                    rate=min(rate, 100),
                )
            )
        return RetentionStats(data=months, current_rate=months[-1].rate)

    def _lost_clients(self, base: datetime) -> LostClientStats:
        items = []
        for client in self.sync_store.clients:
            last_visit = parse_record_datetime(client.last_visit_date)
            if last_visit is None:
                continue
            days_ago = days_between(last_visit, base)
            if days_ago >= LOST_AFTER_DAYS:
                items.append(
                    LostClient(
                        id=client.id,
                        name=client.name or "",
                        phone=client.phone or "",
                        last_visit=client.last_visit_date,
                        days_ago=days_ago,
                    )
                )
        items.sort(key=lambda c: c.days_ago)
        items = items[:LOST_CLIENTS_SHOWN]
        return LostClientStats(
            items=items,
            risk30_60=sum(1 for c in items if c.days_ago < 60),
            risk60plus=sum(1 for c in items if c.days_ago >= 60),
        )

    @staticmethod
    def _alerts(week: list[OccupancyDay], cancellations: int, risk60plus: int) -> list[DashboardAlert]:
        alerts = []
        low_days = [d for d in week if not d.is_past and 0 < d.occupancy < 50]
        if low_days:
            alerts.append(
                DashboardAlert(
                    type="warning",
                    title="Низкая загрузка " + ", ".join(d.day for d in low_days),
                    count=f"{min(d.occupancy for d in low_days)}%",
                )
            )
        if cancellations > 3:
            alerts.append(DashboardAlert(type="error", title="Всплеск отмен", count=str(cancellations)))
        if risk60plus > 5:
            alerts.append(DashboardAlert(type="warning", title="Затухание клиентов", count=str(risk60plus)))
        return alerts

