"""
Sync Store.

In-memory cache of the last YClients fetch plus the sync status, run
history, configuration and staff active overrides. Collections are
replaced wholesale by each sync and read by every admin endpoint.

Usage:
    from beautyslot.backend.repositories.sync import get_sync_store

    store = get_sync_store()
    store.set_synced_data(staff=staff, services=services)
    info = store.get_synced_data_info()
"""

from datetime import datetime
from typing import Any

from beautyslot.backend.core.utils import utc_now
from beautyslot.backend.models.sync import (
    SyncConfig,
    SyncedDataInfo,
    SyncHistoryItem,
    SyncStatus,
)
from beautyslot.backend.models.yclients import (
    YClientsClient,
    YClientsRecord,
    YClientsService,
    YClientsStaff,
)

_SYNCED_COLLECTIONS = ("clients", "staff", "services", "records")


class SyncStore:
    """Module-wide container for synced data and sync bookkeeping."""

    def __init__(self) -> None:
        self.clients: list[YClientsClient] = []
        self.staff: list[YClientsStaff] = []
        self.services: list[YClientsService] = []
        self.records: list[YClientsRecord] = []
        self.last_sync_at: datetime | None = None
        self.status = SyncStatus()
        self.config = SyncConfig()
        self.current_sync_id: int | None = None
        self._history: list[SyncHistoryItem] = []
        self._staff_overrides: dict[int, bool] = {}

    # ------------------------------------------------------------------
    # Synced data
    # ------------------------------------------------------------------

    def set_synced_data(self, **data: Any) -> None:
        """
        Replace only the given collections.

        Accepts ``clients``, ``staff``, ``services``, ``records`` and
        ``last_sync_at``.

        Raises:
            TypeError: For any other keyword
        """
        unknown = set(data) - set(_SYNCED_COLLECTIONS) - {"last_sync_at"}
        if unknown:
            raise TypeError(f"Unknown synced data fields: {sorted(unknown)}")
        for key, value in data.items():
            setattr(self, key, list(value) if key in _SYNCED_COLLECTIONS else value)

    def get_synced_data_info(self) -> SyncedDataInfo:
        return SyncedDataInfo(
            clients=len(self.clients),
            staff=len(self.staff),
            services=len(self.services),
            records=len(self.records),
            last_sync_at=self.last_sync_at,
        )

    def find_client(self, client_id: int) -> YClientsClient | None:
        return next((c for c in self.clients if c.id == client_id), None)

    def find_staff(self, staff_id: int) -> YClientsStaff | None:
        return next((s for s in self.staff if s.id == staff_id), None)

    def find_service(self, service_id: int) -> YClientsService | None:
        return next((s for s in self.services if s.id == service_id), None)

    # ------------------------------------------------------------------
    # Staff overrides
    # ------------------------------------------------------------------

    def set_staff_active_override(self, staff_id: int, is_active: bool) -> None:
        self._staff_overrides[staff_id] = is_active

    def get_staff_active_override(self, staff_id: int) -> bool | None:
        return self._staff_overrides.get(staff_id)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def update_status(self, **fields: Any) -> SyncStatus:
        for key, value in fields.items():
            setattr(self.status, key, value)
        return self.status.model_copy(deep=True)

    def get_status(self) -> SyncStatus:
        return self.status.model_copy(deep=True)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def add_history_item(self, **fields: Any) -> SyncHistoryItem:
        """Prepend a run with ``id = max(existing) + 1`` (1 when empty)."""
        next_id = max((item.id for item in self._history), default=0) + 1
        fields.setdefault("started_at", utc_now())
        item = SyncHistoryItem(id=next_id, **fields)
        self._history.insert(0, item)
        return item

    def get_history(self, limit: int = 10) -> list[SyncHistoryItem]:
        return self._history[:limit]

    def update_history_item(self, item_id: int, **fields: Any) -> SyncHistoryItem | None:
        for item in self._history:
            if item.id == item_id:
                for key, value in fields.items():
                    setattr(item, key, value)
                return item
        return None

    # ------------------------------------------------------------------
    # Config
    # ------------------------------------------------------------------

    def update_config(self, **fields: Any) -> SyncConfig:
        """Apply a partial update; values are validated by SyncConfig."""
        merged = self.config.model_dump() | fields
        self.config = SyncConfig.model_validate(merged)
        return self.config.model_copy()

    def get_config(self) -> SyncConfig:
        return self.config.model_copy()


_store: SyncStore | None = None


def get_sync_store() -> SyncStore:
    """Get the process-wide sync store, creating it on first use."""
    global _store
    if _store is None:
        _store = SyncStore()
    return _store


def reset_sync_store() -> None:
    """Restore the initial empty state."""
    global _store
    _store = SyncStore()
