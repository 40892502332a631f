"""
Unit Tests for Appointment Service.
"""

import pytest

from beautyslot.backend.core.pagination import SkipLimit
from beautyslot.backend.models.yclients import YClientsRecord
from beautyslot.backend.schemas.appointment import AppointmentStatus
from beautyslot.backend.services.appointment import AppointmentService, duration_minutes, map_status
from beautyslot.backend.services.client import NOT_SYNCED_MESSAGE

PAGE = SkipLimit(skip=0, limit=50)


class TestMapStatus:
    @pytest.mark.parametrize(
        "fields,expected",
        [
            ({"deleted": True, "attendance": 1}, AppointmentStatus.CANCELLED),
            ({"attendance": -1}, AppointmentStatus.NO_SHOW),
            ({"attendance": 1}, AppointmentStatus.COMPLETED),
            ({"attendance": 2, "confirmed": 1}, AppointmentStatus.CONFIRMED),
            ({"attendance": 0}, AppointmentStatus.PENDING),
        ],
    )
    def test_mapping(self, fields, expected):
        assert map_status(YClientsRecord(id=1, **fields)) == expected


class TestDurationMinutes:
    def test_seconds_to_minutes(self):
        assert duration_minutes(YClientsRecord(id=1, seance_length=5400)) == 90

    def test_default(self):
        assert duration_minutes(YClientsRecord(id=1)) == 60


@pytest.fixture
def records(sync_store, make_record, make_client, make_staff):
    sync_store.set_synced_data(
        clients=[make_client(id=1, name="Анна (YClients)", phone="+79160000001")],
        staff=[make_staff(id=10, name="Мария")],
        records=[
            make_record(id=1, date="2026-03-05 10:00:00", client_id=1, staff_id=10, confirmed=1),
            make_record(id=2, date="2026-03-05 15:00:00", client_id=2, client_name="Ольга", staff_id=11,
                        staff_name="Елена", attendance=1),
            make_record(id=3, date="2026-03-06 11:00:00", client_id=1, staff_id=10, deleted=True),
            make_record(id=4, date="2026-03-07 09:00:00", client_id=None, staff_id=11, attendance=-1),
        ],
    )


class TestListAppointments:
    def test_hint_when_not_synced(self):
        result = AppointmentService().list_appointments(PAGE)

        assert result.total == 0
        assert result.message == NOT_SYNCED_MESSAGE

    def test_newest_first(self, records):
        result = AppointmentService().list_appointments(PAGE)

        assert [a.id for a in result.items] == [4, 3, 2, 1]

    def test_names_prefer_synced_directories(self, records):
        items = {a.id: a for a in AppointmentService().list_appointments(PAGE).items}

        assert items[1].client_name == "Анна (YClients)"
        assert items[1].client_phone == "+79160000001"
        assert items[1].staff_name == "Мария"
        # fall back to the names embedded in the record
        assert items[2].client_name == "Ольга"
        assert items[2].staff_name == "Елена"
        assert items[4].client_id is None
        assert items[4].client_name is None

    def test_response_fields(self, records):
        first = AppointmentService().list_appointments(PAGE, date="2026-03-05").items[-1]

        assert first.service_name == "Стрижка"
        assert first.price == 2000
        assert first.duration_minutes == 60
        assert first.status == AppointmentStatus.CONFIRMED
        assert first.scheduled_at == "2026-03-05T10:00:00+03:00"

    def test_single_day_wins_over_range(self, records):
        result = AppointmentService().list_appointments(
            PAGE, date="2026-03-06", date_from="2026-03-01", date_to="2026-03-31",
        )
        assert [a.id for a in result.items] == [3]

    def test_inclusive_range(self, records):
        result = AppointmentService().list_appointments(PAGE, date_from="2026-03-05", date_to="2026-03-06")
        assert {a.id for a in result.items} == {1, 2, 3}

    def test_filter_staff_client_status(self, records):
        service = AppointmentService()

        assert {a.id for a in service.list_appointments(PAGE, staff_id=11).items} == {2, 4}
        assert {a.id for a in service.list_appointments(PAGE, client_id=1).items} == {1, 3}
        cancelled = service.list_appointments(PAGE, status=AppointmentStatus.CANCELLED)
        assert [a.id for a in cancelled.items] == [3]

    def test_pagination(self, records):
        result = AppointmentService().list_appointments(SkipLimit(skip=2, limit=1))

        assert result.total == 4
        assert [a.id for a in result.items] == [2]

    def test_untitled_services(self, sync_store, make_record):
        sync_store.set_synced_data(records=[make_record(id=9, service_title="")])

        assert AppointmentService().list_appointments(PAGE).items[0].service_name == "Услуга"


class TestStatsForDay:
    def test_counts_by_status(self, records):
        stats = AppointmentService().stats_for_day("2026-03-05")

        assert stats.date == "2026-03-05"
        assert stats.total == 2
        assert stats.confirmed == 1
        assert stats.completed == 1
        assert stats.pending == 0

    def test_cancelled_and_no_show(self, records):
        service = AppointmentService()

        assert service.stats_for_day("2026-03-06").cancelled == 1
        assert service.stats_for_day("2026-03-07").no_show == 1

    def test_defaults_to_today(self, records):
        stats = AppointmentService().stats_for_day()

        assert stats.total == 0
        assert len(stats.date) == 10
