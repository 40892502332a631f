"""
Sync Models.

State of the YClients sync: live status, run history and configuration.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from beautyslot.backend.models.base import Base

SyncRunStatus = Literal["running", "success", "error", "partial"]


class SyncStatus(Base):
    is_running: bool = False
    last_sync_at: datetime | None = None
    clients_synced: int = 0
    clients_skipped: int = 0
    errors: list[str] = Field(default_factory=list)


class SyncHistoryItem(Base):
    """One sync run. Newest runs are kept first."""

    id: int
    started_at: datetime
    finished_at: datetime | None = None
    status: SyncRunStatus = "running"
    clients_created: int = 0
    clients_updated: int = 0
    clients_skipped: int = 0
    error_message: str | None = None


class SyncConfig(Base):
    auto_sync_enabled: bool = False
    sync_interval_hours: int = Field(default=24, ge=1)
    min_visits_threshold: int = Field(default=3, ge=0)
    realtime_enabled: bool = False


class SyncedDataInfo(BaseModel):
    """Counts of what the last sync left in memory."""

    clients: int
    staff: int
    services: int
    records: int
    last_sync_at: datetime | None = None
