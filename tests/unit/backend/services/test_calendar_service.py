"""
Unit Tests for Calendar Service.
"""

import pytest

from beautyslot.backend.models.yclients import YClientsRecord
from beautyslot.backend.schemas.calendar import CalendarClient
from beautyslot.backend.services.calendar import (
    STAFF_COLORS,
    CalendarDataService,
    calculate_risk_level,
    map_calendar_status,
    record_time_range,
)


def _client(visits: int, cancels: int = 0, no_shows: int = 0) -> CalendarClient:
    return CalendarClient(
        id="1", name="Анна", phone="", visit_count=visits,
        cancel_count=cancels, no_show_count=no_shows,
    )


class TestCalculateRiskLevel:
    def test_no_history_is_medium(self):
        assert calculate_risk_level(_client(0)) == "medium"

    def test_high_cancel_rate(self):
        assert calculate_risk_level(_client(2, cancels=1)) == "high"

    def test_single_visit_is_medium(self):
        assert calculate_risk_level(_client(1)) == "medium"

    def test_regular_is_low(self):
        assert calculate_risk_level(_client(9, no_shows=1)) == "low"


class TestMapCalendarStatus:
    @pytest.mark.parametrize(
        "fields,expected",
        [
            ({"deleted": True}, "canceled"),
            ({"attendance": -1}, "no_show"),
            ({"attendance": 1}, "completed"),
            ({"confirmed": 1}, "confirmed"),
            ({}, "new"),
        ],
    )
    def test_mapping(self, fields, expected):
        assert map_calendar_status(YClientsRecord(id=1, **fields)) == expected


class TestRecordTimeRange:
    def test_offset_datetime(self):
        record = YClientsRecord(id=1, datetime="2026-03-05T14:00:00+03:00", seance_length=5400)

        assert record_time_range(record, "Europe/Moscow") == (
            "2026-03-05T11:00:00.000Z",
            "2026-03-05T12:30:00.000Z",
        )

    def test_naive_date_uses_salon_timezone(self):
        record = YClientsRecord(id=1, date="2026-03-05 14:00:00")

        start, end = record_time_range(record, "Asia/Yekaterinburg")

        assert start == "2026-03-05T09:00:00.000Z"
        assert end == "2026-03-05T10:00:00.000Z"


@pytest.fixture
def calendar_store(sync_store, make_client, make_staff, make_service, make_record):
    sync_store.set_synced_data(
        staff=[
            make_staff(id=10, name="Мария", specialization=""),
            make_staff(id=11, name="Скрытый", hidden=1),
            make_staff(id=12, name="Елена", specialization="Маникюр"),
        ],
        clients=[make_client(id=1, name="Анна", visit_count=5)],
        services=[make_service(id=100, title="Стрижка", seance_length=2700, price_min=1500)],
        records=[
            make_record(id=1, date="2026-03-05 10:00:00", client_id=1, staff_id=10, service_id=100),
            make_record(id=2, date="2026-03-05 12:00:00", client_id=7, client_name="Ольга",
                        staff_id=99, service_id=555, service_title="Укладка", cost=900),
            make_record(id=3, date="2026-03-06 12:00:00", deleted=True),
            make_record(id=4, date="2026-03-08 12:00:00", client_id=None, services=[]),
        ],
    )


class TestGetData:
    def test_staff_columns(self, calendar_store):
        data = CalendarDataService().get_data()

        assert [s.id for s in data.staff] == ["10", "12"]
        assert data.staff[0].role == "Мастер"
        assert data.staff[1].role == "Маникюр"
        assert [s.color for s in data.staff] == list(STAFF_COLORS[:2])

    def test_services_in_minutes(self, calendar_store):
        service = CalendarDataService().get_data().services[0]

        assert service.duration_minutes == 45
        assert service.price == 1500

    def test_deleted_records_skipped(self, calendar_store):
        data = CalendarDataService().get_data()

        assert {a.id for a in data.appointments} == {"1", "2", "4"}
        assert data.total_records == 4
        assert data.filtered_records == 3

    def test_date_range(self, calendar_store):
        data = CalendarDataService().get_data(date_from="2026-03-05", date_to="2026-03-05")

        assert {a.id for a in data.appointments} == {"1", "2"}
        assert data.total_records == 4

    def test_known_references(self, calendar_store):
        appointment = next(a for a in CalendarDataService().get_data().appointments if a.id == "1")

        assert appointment.client.name == "Анна"
        assert appointment.staff.name == "Мария"
        assert appointment.service.name == "Стрижка"
        assert appointment.risk_level == "low"
        assert appointment.source == "yclients"
        assert appointment.start_time == "2026-03-05T07:00:00.000Z"

    def test_unknown_references_fall_back(self, calendar_store):
        appointment = next(a for a in CalendarDataService().get_data().appointments if a.id == "2")

        assert appointment.client.name == "Ольга"
        assert appointment.client.visit_count == 1
        assert appointment.risk_level == "medium"
        assert appointment.staff.name == "Неизвестный мастер"
        assert appointment.service.name == "Укладка"
        assert appointment.service.price == 900

    def test_record_without_client_or_services(self, calendar_store):
        appointment = next(a for a in CalendarDataService().get_data().appointments if a.id == "4")

        assert appointment.client_id == "0"
        assert appointment.client.name == "Неизвестный клиент"
        assert appointment.service.name == "Неизвестная услуга"
        assert appointment.service.duration_minutes == 60
