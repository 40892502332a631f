"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

All application state lives in module-level in-memory stores. The
autouse ``fresh_state`` fixture resets every one of them before each
test so that no test can affect another.

Data factories build YClients payload models with sensible defaults:

    def test_visible_staff(make_staff, sync_store):
        sync_store.set_synced_data(staff=[make_staff(id=1, fired=1)])
"""

from collections.abc import Callable, Generator
from itertools import count
from typing import Any

import pytest

from beautyslot.backend.models.yclients import (
    RecordClient,
    RecordService,
    RecordStaff,
    YClientsClient,
    YClientsRecord,
    YClientsService,
    YClientsStaff,
)
from beautyslot.backend.repositories.broadcast import reset_broadcast_repository
from beautyslot.backend.repositories.notification import reset_notification_store
from beautyslot.backend.repositories.order import reset_order_repository
from beautyslot.backend.repositories.sync import SyncStore, get_sync_store, reset_sync_store
from beautyslot.backend.repositories.telegram import reset_telegram_store
from beautyslot.backend.services.realtime import reset_realtime_simulator
from beautyslot.backend.tasks.scheduler import reset_scheduler
from beautyslot.telegram.services.notifications import reset_notification_service


# =============================================================================
# State Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Reset every in-memory store and process-wide singleton."""
    reset_sync_store()
    reset_telegram_store()
    reset_broadcast_repository()
    reset_order_repository()
    reset_notification_store()
    reset_realtime_simulator()
    reset_notification_service()
    reset_scheduler()
    monkeypatch.setattr("beautyslot.backend.services.sync._running_task", None)
    monkeypatch.setattr("beautyslot.backend.integrations.yclients._client", None)
    monkeypatch.setattr("beautyslot.telegram.bot._bot", None)
    monkeypatch.setattr("beautyslot.telegram.bot._dispatcher", None)
    yield


@pytest.fixture
def sync_store() -> SyncStore:
    """The sync store of the current test."""
    return get_sync_store()


# =============================================================================
# Data Factories
# =============================================================================


_ids = count(1000)


@pytest.fixture
def make_client() -> Callable[..., YClientsClient]:
    """Factory for synced clients."""

    def factory(**overrides: Any) -> YClientsClient:
        data: dict[str, Any] = {
            "id": next(_ids),
            "name": "Анна Петрова",
            "phone": "+79161234567",
            "visit_count": 0,
            "spent": 0,
        }
        data.update(overrides)
        return YClientsClient.model_validate(data)

    return factory


@pytest.fixture
def make_staff() -> Callable[..., YClientsStaff]:
    """Factory for synced staff members."""

    def factory(**overrides: Any) -> YClientsStaff:
        data: dict[str, Any] = {
            "id": next(_ids),
            "name": "Мария Иванова",
            "specialization": "Парикмахер",
        }
        data.update(overrides)
        return YClientsStaff.model_validate(data)

    return factory


@pytest.fixture
def make_service() -> Callable[..., YClientsService]:
    """Factory for synced services."""

    def factory(**overrides: Any) -> YClientsService:
        data: dict[str, Any] = {
            "id": next(_ids),
            "title": "Стрижка",
            "category_id": 1,
            "price_min": 1500,
            "price_max": 2000,
            "seance_length": 3600,
        }
        data.update(overrides)
        return YClientsService.model_validate(data)

    return factory


@pytest.fixture
def make_record() -> Callable[..., YClientsRecord]:
    """
    Factory for synced records.

    Shortcuts: ``client_id``/``client_name``/``client_phone`` build the
    embedded client, ``staff_name`` the embedded staff, and ``cost`` a
    single service line titled ``service_title``.
    """

    def factory(
        date: str = "2026-03-05 14:00:00",
        client_id: int | None = 1,
        client_name: str = "Анна Петрова",
        client_phone: str = "+79161234567",
        staff_id: int = 10,
        staff_name: str = "Мария Иванова",
        service_id: int = 100,
        service_title: str = "Стрижка",
        cost: float = 2000,
        **overrides: Any,
    ) -> YClientsRecord:
        data: dict[str, Any] = {
            "id": next(_ids),
            "date": date,
            "datetime": date.replace(" ", "T") + "+03:00",
            "staff_id": staff_id,
            "staff": RecordStaff(id=staff_id, name=staff_name),
            "services": [RecordService(id=service_id, title=service_title, cost=cost)],
            "client": (
                RecordClient(id=client_id, name=client_name, phone=client_phone)
                if client_id is not None
                else None
            ),
            "seance_length": 3600,
        }
        data.update(overrides)
        return YClientsRecord.model_validate(data)

    return factory


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"
