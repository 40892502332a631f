"""
Integration Tests for the Public Microsite API.

Catalog endpoints read the sync store; slots and bookings go to the
mocked YClients client injected by the ``yclients`` fixture.
"""

import pytest
from httpx import AsyncClient

from beautyslot.backend.integrations.yclients import YClientsError

PUBLIC = "/api/v1/public"


@pytest.fixture
def catalog(sync_store, make_service, make_staff):
    sync_store.set_synced_data(
        services=[
            make_service(id=1, title="Стрижка женская", price_min=2000, price_max=3500),
            make_service(id=2, title="Маникюр с покрытием гель-лак", seance_length=5400),
            make_service(id=3, title="Аренда кабинета"),
        ],
        staff=[
            make_staff(id=10, name="Мария Иванова", rating=4.8),
            make_staff(id=11, name="Светлана Орлова", fired=1),
        ],
    )


class TestCatalog:
    """Tests for services, categories and staff."""

    @pytest.mark.asyncio
    async def test_services(self, client: AsyncClient, api, catalog):
        data = api.assert_success(await client.get(f"{PUBLIC}/services"))

        assert [s["id"] for s in data["items"]] == [2, 1]
        assert data["items"][0]["duration"] == 90
        assert data["items"][0]["category_name"] == "Маникюр"

    @pytest.mark.asyncio
    async def test_service_details(self, client: AsyncClient, api, catalog):
        data = api.assert_success(await client.get(f"{PUBLIC}/services/1"))

        assert (data["price_from"], data["price_to"]) == (2000, 3500)

    @pytest.mark.asyncio
    async def test_service_errors(self, client: AsyncClient, api, catalog):
        api.assert_error(await client.get(f"{PUBLIC}/services/abc"), 400)
        api.assert_error(await client.get(f"{PUBLIC}/services/999"), 404)

    @pytest.mark.asyncio
    async def test_categories(self, client: AsyncClient, api, catalog):
        data = api.assert_success(await client.get(f"{PUBLIC}/categories"))

        assert {c["name"]: c["services_count"] for c in data["items"]} == {"Маникюр": 1, "Волосы": 1}

    @pytest.mark.asyncio
    async def test_staff(self, client: AsyncClient, api, catalog):
        data = api.assert_success(await client.get(f"{PUBLIC}/staff"))

        assert [s["id"] for s in data["items"]] == [10]
        assert data["items"][0]["rating"] == 4.8


class TestSlots:
    @pytest.mark.asyncio
    async def test_taken_slot(self, client: AsyncClient, api, yclients, make_record):
        yclients.get_records.return_value = [make_record(date="2030-01-15 14:00:00")]

        data = api.assert_success(
            await client.get(f"{PUBLIC}/slots", params={"service_id": "1", "date": "2030-01-15", "staff_id": 10})
        )

        slots = {s["time"]: s["available"] for s in data["slots"]}
        assert len(slots) == 24
        assert slots["09:00"] is True
        assert slots["14:00"] is False
        yclients.get_records.assert_awaited_once_with(
            start_date="2030-01-15", end_date="2030-01-15", staff_id=10
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params",
        [{"date": "2030-01-15"}, {"service_id": "1"}, {"service_id": "1", "date": "15.01.2030"}],
    )
    async def test_invalid_params(self, client: AsyncClient, api, params):
        api.assert_error(await client.get(f"{PUBLIC}/slots", params=params), 400, "VAL_VALIDATION_ERROR")


class TestBooking:
    """Tests for the booking lifecycle."""

    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient, api, catalog):
        body = {
            "service_id": 1,
            "staff_id": 10,
            "datetime": "2030-01-15T14:00:00",
            "client_name": "Анна",
            "client_phone": "+7 (916) 123-45-67",
        }

        data = api.assert_success(await client.post(f"{PUBLIC}/booking", json=body))

        assert data["service"] == {"id": 1, "name": "Стрижка женская"}
        assert data["staff"] == {"id": 10, "name": "Мария Иванова"}
        assert data["status"] == "pending"

    @pytest.mark.asyncio
    async def test_create_missing_fields(self, client: AsyncClient, api):
        body = api.assert_error(await client.post(f"{PUBLIC}/booking", json={"service_id": 1}), 400)

        assert "client_phone" in body["error"]["details"]["missing_fields"]

    @pytest.mark.asyncio
    async def test_get(self, client: AsyncClient, api, yclients, make_record):
        yclients.get_record.return_value = make_record(id=555, date="2030-01-15 14:00:00", confirmed=1)

        data = api.assert_success(await client.get(f"{PUBLIC}/booking/555"))

        assert data["id"] == 555
        assert data["status"] == "confirmed"
        yclients.get_record.assert_awaited_once_with(555)

    @pytest.mark.asyncio
    async def test_get_missing(self, client: AsyncClient, api, yclients):
        yclients.get_record.side_effect = YClientsError(404, "Record not found")

        api.assert_error(await client.get(f"{PUBLIC}/booking/555"), 404)

    @pytest.mark.asyncio
    async def test_reschedule(self, client: AsyncClient, api, yclients, make_record):
        yclients.update_record.return_value = make_record(id=555, date="2030-01-16 10:00:00", staff_id=11)

        data = api.assert_success(
            await client.put(f"{PUBLIC}/booking/555", json={"datetime": "2030-01-16T10:00:00", "staff_id": 11})
        )

        assert data["staff_id"] == 11
        assert data["datetime"].startswith("2030-01-16T10:00:00")

    @pytest.mark.asyncio
    async def test_reschedule_busy(self, client: AsyncClient, api, yclients):
        yclients.update_record.side_effect = YClientsError(422, "Staff is busy at this time")

        response = await client.put(f"{PUBLIC}/booking/555", json={"datetime": "2030-01-16T10:00:00"})

        api.assert_error(response, 409, "RES_CONFLICT")

    @pytest.mark.asyncio
    async def test_reschedule_without_changes(self, client: AsyncClient, api):
        api.assert_error(await client.put(f"{PUBLIC}/booking/555", json={}), 400)

    @pytest.mark.asyncio
    async def test_yclients_failure_is_bad_gateway(self, client: AsyncClient, api, yclients):
        yclients.delete_record.side_effect = YClientsError(500, "boom")

        api.assert_error(await client.delete(f"{PUBLIC}/booking/555"), 502, "SYS_EXTERNAL_SERVICE_ERROR")

    @pytest.mark.asyncio
    async def test_cancel(self, client: AsyncClient, api, yclients):
        data = api.assert_success(await client.delete(f"{PUBLIC}/booking/555"))

        assert data == {"message": "Booking cancelled"}
        yclients.delete_record.assert_awaited_once_with(555)


class TestClientRecords:
    @pytest.mark.asyncio
    async def test_unknown_phone(self, client: AsyncClient, api, yclients):
        data = api.assert_success(await client.get(f"{PUBLIC}/client/records", params={"phone": "+79161234567"}))

        assert data == {"client": None, "upcoming": [], "past": []}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{}, {"phone": "123"}])
    async def test_phone_required(self, client: AsyncClient, api, params):
        api.assert_error(await client.get(f"{PUBLIC}/client/records", params=params), 400)
