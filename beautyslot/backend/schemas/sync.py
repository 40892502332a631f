"""
Sync Schemas.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt

from beautyslot.backend.models.sync import SyncedDataInfo, SyncHistoryItem, SyncStatus


class SyncStartResponse(BaseModel):
    message: str
    sync_id: int


class SyncStatusResponse(SyncStatus):
    synced_data: SyncedDataInfo


class SyncHistoryResponse(BaseModel):
    items: list[SyncHistoryItem]


class SyncConfigUpdate(BaseModel):
    """Partial update of the sync configuration. Unset fields are kept."""

    model_config = ConfigDict(extra="forbid")

    auto_sync_enabled: StrictBool | None = None
    sync_interval_hours: StrictInt | None = Field(default=None, ge=1)
    min_visits_threshold: StrictInt | None = Field(default=None, ge=0)
    realtime_enabled: StrictBool | None = None


class ConnectionTestResponse(BaseModel):
    success: bool
    configured: bool
    latency_ms: int | None = None
    message: str
    error: str | None = None


class RealtimeStats(BaseModel):
    is_connected: bool
    active_connections: int
    uptime_seconds: int
    events_today: int
    clients_synced_today: int
    appointments_synced_today: int
    last_event_at: str | None = None
    events_by_type: dict[str, int]
