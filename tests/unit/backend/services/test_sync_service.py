"""
Unit Tests for Sync Service.

YClients is replaced by the ``mock_yclients`` AsyncMock; retries run
without delays.
"""

import asyncio
from unittest.mock import patch

import pytest

from beautyslot.backend.core.config_schema import RetrySchema, SyncFetchSchema
from beautyslot.backend.core.exceptions import ConflictError, ExternalServiceError
from beautyslot.backend.models.yclients import YClientsClient
from beautyslot.backend.schemas.sync import SyncConfigUpdate
from beautyslot.backend.services.sync import (
    SyncService,
    apply_visit_stats,
    cancel_running_sync,
    get_running_task,
)

RETRY = RetrySchema(
    max_attempts=2,
    request_delay_seconds=0,
    rate_limit_delay_seconds=0,
    error_delay_seconds=0,
)
FETCH = SyncFetchSchema(
    clients_page_size=2,
    records_page_size=2,
    records_days_back=90,
    records_days_ahead=14,
)


@pytest.fixture
def service(mock_yclients):
    return SyncService(mock_yclients, retry=RETRY, fetch=FETCH)


@pytest.fixture
def yclients_data(mock_yclients, make_client, make_staff, make_service, make_record):
    """Two clients, two staff, one service and three records (two pages)."""
    mock_yclients.get_staff.return_value = [make_staff(id=10), make_staff(id=11)]
    mock_yclients.get_services.return_value = [make_service(id=100)]
    mock_yclients.get_clients.side_effect = [
        [make_client(id=1, sold_amount=9000), make_client(id=2, sold_amount=0)],
        [],
    ]
    mock_yclients.get_records.side_effect = [
        [make_record(client_id=1, attendance=1), make_record(client_id=1, attendance=1)],
        [make_record(client_id=1, attendance=1)],
    ]
    return mock_yclients


class TestApplyVisitStats:
    def test_counts_visited_records_only(self, make_client, make_record):
        clients = [make_client(id=1, sold_amount=10001, visit_count=99), make_client(id=2)]
        records = [
            make_record(client_id=1, attendance=1),
            make_record(client_id=1, attendance=1),
            make_record(client_id=1, attendance=-1),
            make_record(client_id=2, attendance=0),
            make_record(client_id=2, attendance=2),
            make_record(client_id=None, attendance=1),
        ]

        updated, skipped = apply_visit_stats(clients, records, min_visits_threshold=2)

        assert (updated, skipped) == (1, 1)
        assert clients[0].visit_count == 2
        assert clients[0].spent == 10001
        assert clients[0].avg_sum == 5001
        assert clients[1].visit_count == 0
        assert clients[1].avg_sum == 0


class TestRunOnce:
    """Tests for a full sync run awaited in place."""

    async def test_successful_sync(self, service, yclients_data, sync_store):
        summary = await service.run_once()

        assert summary.status == "success"
        assert summary.sync_id == 1
        assert (summary.staff, summary.services, summary.clients, summary.records) == (2, 1, 2, 3)
        assert (summary.clients_updated, summary.clients_skipped) == (1, 1)
        assert summary.errors == []

        info = sync_store.get_synced_data_info()
        assert (info.staff, info.services, info.clients, info.records) == (2, 1, 2, 3)
        assert info.last_sync_at is not None
        assert sync_store.find_client(1).visit_count == 3
        assert sync_store.find_client(1).avg_sum == 3000

    async def test_history_and_status(self, service, yclients_data, sync_store):
        await service.run_once()

        item = sync_store.get_history()[0]
        assert item.status == "success"
        assert item.finished_at is not None
        assert item.clients_created == 0
        assert item.clients_updated == 1
        assert item.clients_skipped == 1

        status = sync_store.get_status()
        assert status.is_running is False
        assert status.last_sync_at == item.finished_at
        assert sync_store.current_sync_id is None

    async def test_paging_parameters(self, service, yclients_data):
        await service.run_once()

        first_clients = yclients_data.get_clients.await_args_list[0]
        assert first_clients.kwargs == {"page": 1, "count": 2}
        records_calls = yclients_data.get_records.await_args_list
        assert [c.kwargs["page"] for c in records_calls] == [1, 2]
        assert records_calls[0].kwargs["start_date"] < records_calls[0].kwargs["end_date"]

    async def test_failed_source_makes_run_partial(self, service, yclients_data, sync_store):
        yclients_data.get_staff.side_effect = ExternalServiceError("YClients API error: 500")

        summary = await service.run_once()

        assert summary.status == "partial"
        assert summary.staff == 0
        assert summary.errors == ["Staff: YClients API error: 500"]
        assert yclients_data.get_staff.await_count == RETRY.max_attempts
        assert sync_store.get_history()[0].error_message == "Staff: YClients API error: 500"
        assert sync_store.get_status().errors == summary.errors

    async def test_retry_recovers(self, service, yclients_data, make_service):
        yclients_data.get_services.side_effect = [ConnectionError("reset"), [make_service()]]

        summary = await service.run_once()

        assert summary.status == "success"
        assert summary.services == 1

    async def test_clients_page_failure(self, service, yclients_data):
        yclients_data.get_clients.side_effect = ExternalServiceError("boom")

        summary = await service.run_once()

        assert summary.status == "partial"
        assert summary.clients == 0
        assert summary.errors == ["Clients page 1: boom"]

    async def test_fatal_error_marks_run_failed(self, service, yclients_data, sync_store, make_staff):
        """An unexpected failure ends the run as error and keeps the previous data."""
        sync_store.set_synced_data(staff=[make_staff(id=99)])

        with patch(
            "beautyslot.backend.services.sync.apply_visit_stats",
            side_effect=RuntimeError("boom"),
        ):
            summary = await service.run_once()

        assert summary.status == "error"
        assert summary.errors == ["boom"]

        item = sync_store.get_history()[0]
        assert item.status == "error"
        assert item.error_message == "boom"
        assert item.finished_at is not None

        status = sync_store.get_status()
        assert status.errors == ["boom"]
        assert status.is_running is False
        assert sync_store.current_sync_id is None
        assert [s.id for s in sync_store.staff] == [99]

    async def test_conflict_when_running(self, service, sync_store):
        sync_store.update_status(is_running=True)

        with pytest.raises(ConflictError):
            await service.run_once()

    async def test_history_ids_increase(self, service, yclients_data, mock_yclients):
        await service.run_once()
        mock_yclients.get_clients.side_effect = None
        mock_yclients.get_records.side_effect = None

        second = await service.run_once()

        assert second.sync_id == 2
        assert [item.id for item in service.get_history()] == [2, 1]


class TestBackgroundSync:
    """Tests for start/stop of the background task."""

    async def test_start_runs_in_background(self, service, yclients_data, sync_store):
        response = service.start()

        assert response.sync_id == 1
        assert sync_store.get_status().is_running is True

        await get_running_task()

        assert sync_store.get_status().is_running is False
        assert sync_store.get_history()[0].status == "success"

    async def test_start_conflict(self, service, sync_store):
        sync_store.update_status(is_running=True)

        with pytest.raises(ConflictError):
            service.start()
        assert service.start_if_idle() is None

    async def test_stop_when_idle(self, service):
        assert service.stop() == {"message": "Sync is not running"}

    async def test_stop_cancels_running_task(self, service, mock_yclients, sync_store):
        blocker = asyncio.Event()

        async def slow_staff():
            await blocker.wait()
            return []

        mock_yclients.get_staff.side_effect = slow_staff
        service.start()
        await asyncio.sleep(0)

        assert service.stop() == {"message": "Sync stopped"}

        task = get_running_task()
        with pytest.raises(asyncio.CancelledError):
            await task

        item = sync_store.get_history()[0]
        assert item.status == "partial"
        assert item.error_message == "Stopped by user"
        status = sync_store.get_status()
        assert status.is_running is False
        assert status.errors == ["Sync stopped by user"]

    async def test_cancel_running_sync(self, service, mock_yclients):
        async def hanging_staff():
            await asyncio.sleep(3600)

        mock_yclients.get_staff.side_effect = hanging_staff
        service.start()
        await asyncio.sleep(0)
        task = get_running_task()

        await cancel_running_sync()

        assert task.cancelled()
        assert get_running_task() is None

    async def test_cancel_without_task(self):
        await cancel_running_sync()
        assert get_running_task() is None


class TestStatusAndConfig:
    def test_status_includes_synced_counts(self, service, sync_store, make_staff):
        sync_store.set_synced_data(staff=[make_staff()])

        status = service.get_status()

        assert status.is_running is False
        assert status.synced_data.staff == 1
        assert status.synced_data.clients == 0

    def test_default_config(self, service):
        config = service.get_config()

        assert config.auto_sync_enabled is False
        assert config.sync_interval_hours == 24
        assert config.min_visits_threshold == 3

    def test_partial_update(self, service):
        config = service.update_config(SyncConfigUpdate(sync_interval_hours=6, auto_sync_enabled=True))

        assert config.sync_interval_hours == 6
        assert config.auto_sync_enabled is True
        assert config.min_visits_threshold == 3
        assert service.get_config() == config


class TestConnection:
    async def test_not_configured(self, service, mock_yclients):
        mock_yclients.is_configured = False

        result = await service.test_connection()

        assert result.success is False
        assert result.configured is False
        mock_yclients.test_connection.assert_not_awaited()

    async def test_reachable(self, service):
        result = await service.test_connection()

        assert result.success is True
        assert result.configured is True
        assert result.latency_ms == 12
        assert result.message == "YClients API доступен"

    async def test_unreachable(self, service, mock_yclients):
        mock_yclients.test_connection.return_value = {
            "success": False, "latency_ms": 30, "error": "YClients API error: 401 - Unauthorized",
        }

        result = await service.test_connection()

        assert result.success is False
        assert result.error == "YClients API error: 401 - Unauthorized"
