"""
Sync Service.

Pulls staff, services, clients and records from YClients into the sync
store. A full sync runs as a background asyncio task; at most one runs at
a time.

Each fetch goes through a tenacity retry; the YClients client itself sits
behind a circuit breaker. A failing source is recorded in ``errors`` and
skipped, so a run with some failed sources finishes as ``partial``.
"""

import asyncio
from collections import Counter
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TypeVar

from beautyslot.backend.core.config import get_app_config
from beautyslot.backend.core.config_schema import RetrySchema, SyncFetchSchema
from beautyslot.backend.core.exceptions import ConflictError
from beautyslot.backend.core.logging import get_logger, log_with_source
from beautyslot.backend.core.resilience import create_retrying
from beautyslot.backend.core.utils import local_now, round_half_up, utc_now
from beautyslot.backend.integrations.yclients import YClientsClient, get_yclients_client
from beautyslot.backend.models.sync import SyncConfig, SyncHistoryItem
from beautyslot.backend.models.yclients import (
    YClientsClient as YClientsClientModel,
    YClientsRecord,
    YClientsService,
    YClientsStaff,
)
from beautyslot.backend.schemas.sync import (
    ConnectionTestResponse,
    SyncConfigUpdate,
    SyncStartResponse,
    SyncStatusResponse,
)
from beautyslot.backend.services.base import BaseService

logger = get_logger(__name__)

T = TypeVar("T")

_running_task: asyncio.Task | None = None


@dataclass
class SyncSummary:
    """Outcome of one full sync run."""

    sync_id: int
    status: str
    staff: int = 0
    services: int = 0
    clients: int = 0
    records: int = 0
    clients_updated: int = 0
    clients_skipped: int = 0
    errors: list[str] = field(default_factory=list)


def _error_text(exc: BaseException) -> str:
    return getattr(exc, "message", None) or str(exc) or exc.__class__.__name__


def apply_visit_stats(
    clients: list[YClientsClientModel],
    records: list[YClientsRecord],
    min_visits_threshold: int,
) -> tuple[int, int]:
    """
    Recompute client visit statistics from synced records.

    ``visit_count`` counts records with ``attendance == 1`` (visited);
    ``spent`` mirrors ``sold_amount`` and ``avg_sum`` is the rounded
    average check. Clients below the visit threshold count as skipped.

    Returns:
        Tuple of (updated, skipped)
    """
    visits = Counter(
        r.client.id for r in records if r.client and r.client.id and r.attendance == 1
    )
    updated = skipped = 0
    for client in clients:
        count = visits.get(client.id, 0)
        sold = client.sold_amount or 0
        client.visit_count = count
        client.spent = sold
        client.avg_sum = round_half_up(sold / count) if count and sold else 0
        if count < min_visits_threshold:
            skipped += 1
        else:
            updated += 1
    return updated, skipped


class SyncService(BaseService):
    """Starts, stops and reports on YClients syncs."""

    def __init__(
        self,
        client: YClientsClient | None = None,
        retry: RetrySchema | None = None,
        fetch: SyncFetchSchema | None = None,
    ) -> None:
        super().__init__()
        config = get_app_config().yclients
        self._client = client
        self._retry = retry or config.retry
        self._fetch = fetch or config.sync

    @property
    def client(self) -> YClientsClient:
        if self._client is None:
            self._client = get_yclients_client()
        return self._client

    # ------------------------------------------------------------------
    # Run control
    # ------------------------------------------------------------------

    def _begin_run(self) -> SyncHistoryItem:
        store = self.sync_store
        if store.status.is_running:
            raise ConflictError("Sync is already running")

        item = store.add_history_item(status="running")
        store.current_sync_id = item.id
        store.update_status(is_running=True, errors=[])
        return item

    def start(self) -> SyncStartResponse:
        """
        Launch a full sync in the background.

        Raises:
            ConflictError: If a sync is already running
        """
        global _running_task
        item = self._begin_run()
        _running_task = asyncio.create_task(self.run_full_sync(item.id), name=f"sync-{item.id}")
        self._log_operation("Full sync started", sync_id=item.id)
        return SyncStartResponse(message="Full sync started", sync_id=item.id)

    def start_if_idle(self) -> int | None:
        """Start a sync unless one is running. Returns the new sync id."""
        if self.sync_store.status.is_running:
            return None
        return self.start().sync_id

    async def run_once(self) -> SyncSummary:
        """
        Run a full sync in the current task and wait for it.

        Raises:
            ConflictError: If a sync is already running
        """
        item = self._begin_run()
        return await self.run_full_sync(item.id)

    def stop(self) -> dict[str, str]:
        store = self.sync_store
        if not store.status.is_running:
            return {"message": "Sync is not running"}

        if store.current_sync_id is not None:
            store.update_history_item(
                store.current_sync_id,
                finished_at=utc_now(),
                status="partial",
                error_message="Stopped by user",
            )
        if _running_task is not None and not _running_task.done():
            _running_task.cancel()

        store.current_sync_id = None
        store.update_status(is_running=False, errors=["Sync stopped by user"])
        self._log_operation("Sync stopped by user")
        return {"message": "Sync stopped"}

    # ------------------------------------------------------------------
    # Full sync
    # ------------------------------------------------------------------

    async def _fetch_with_retry(self, fetch: Callable[[], Awaitable[T]]) -> T:
        async for attempt in create_retrying(
            max_attempts=self._retry.max_attempts,
            rate_limit_delay=self._retry.rate_limit_delay_seconds,
            error_delay=self._retry.error_delay_seconds,
        ):
            with attempt:
                result = await fetch()
        await asyncio.sleep(self._retry.request_delay_seconds)
        return result

    async def _fetch_clients(self, errors: list[str]) -> list[YClientsClientModel]:
        clients: list[YClientsClientModel] = []
        page = 1
        page_size = self._fetch.clients_page_size
        while True:
            try:
                batch = await self._fetch_with_retry(
                    lambda: self.client.get_clients(page=page, count=page_size)
                )
            except Exception as exc:
                errors.append(f"Clients page {page}: {_error_text(exc)}")
                log_with_source(logger, "sync", "error", "Clients page failed", page=page, error=_error_text(exc))
                break
            if not batch:
                break
            clients.extend(batch)
            self.sync_store.update_status(clients_synced=len(clients))
            log_with_source(logger, "sync", "debug", "Clients page loaded", page=page, total=len(clients))
            page += 1
        return clients

    async def _fetch_records(self, errors: list[str]) -> list[YClientsRecord]:
        today = local_now().date()
        start_date = (today - timedelta(days=self._fetch.records_days_back)).isoformat()
        end_date = (today + timedelta(days=self._fetch.records_days_ahead)).isoformat()

        records: list[YClientsRecord] = []
        page = 1
        page_size = self._fetch.records_page_size
        while True:
            try:
                batch = await self._fetch_with_retry(
                    lambda: self.client.get_records(
                        start_date=start_date, end_date=end_date, page=page, count=page_size,
                    )
                )
            except Exception as exc:
                errors.append(f"Records page {page}: {_error_text(exc)}")
                log_with_source(logger, "sync", "error", "Records page failed", page=page, error=_error_text(exc))
                break
            if not batch:
                break
            records.extend(batch)
            page += 1
            if len(batch) < page_size:
                break
        return records

    async def run_full_sync(self, sync_id: int) -> SyncSummary:
        """
        Fetch everything from YClients and replace the synced data.

        The caller must have marked the run as started (see ``start``).

        Args:
            sync_id: History item id of this run

        Returns:
            SyncSummary of the finished run
        """
        store = self.sync_store
        config = store.get_config()
        errors: list[str] = []
        summary = SyncSummary(sync_id=sync_id, status="running", errors=errors)
        updated = skipped = 0

        log_with_source(logger, "sync", "info", "Full sync running", sync_id=sync_id)
        try:
            staff: list[YClientsStaff] = []
            try:
                staff = await self._fetch_with_retry(self.client.get_staff)
            except Exception as exc:
                errors.append(f"Staff: {_error_text(exc)}")

            services: list[YClientsService] = []
            try:
                services = await self._fetch_with_retry(self.client.get_services)
            except Exception as exc:
                errors.append(f"Services: {_error_text(exc)}")

            clients = await self._fetch_clients(errors)
            records = await self._fetch_records(errors)

            updated, skipped = apply_visit_stats(clients, records, config.min_visits_threshold)

            finished_at = utc_now()
            summary.status = "partial" if errors else "success"
            store.update_history_item(
                sync_id,
                finished_at=finished_at,
                status=summary.status,
                clients_created=0,
                clients_updated=updated,
                clients_skipped=skipped,
                error_message="; ".join(errors) if errors else None,
            )
            store.update_status(
                is_running=False,
                last_sync_at=finished_at,
                clients_synced=updated,
                clients_skipped=skipped,
                errors=list(errors),
            )
            store.set_synced_data(
                clients=clients,
                staff=staff,
                services=services,
                records=records,
                last_sync_at=finished_at,
            )

            summary.staff = len(staff)
            summary.services = len(services)
            summary.clients = len(clients)
            summary.records = len(records)
            summary.clients_updated = updated
            summary.clients_skipped = skipped
            log_with_source(
                logger, "sync", "info", "Full sync finished",
                sync_id=sync_id,
                status=summary.status,
                staff=summary.staff,
                services=summary.services,
                clients=summary.clients,
                records=summary.records,
                clients_updated=updated,
                clients_skipped=skipped,
                errors=errors,
            )
        except asyncio.CancelledError:
            log_with_source(logger, "sync", "warning", "Full sync cancelled", sync_id=sync_id)
            raise
        except Exception as exc:
            message = _error_text(exc)
            logger.exception("Full sync failed", extra={"sync_id": sync_id, "error": message})
            summary.status = "error"
            summary.errors = [message]
            store.update_history_item(
                sync_id,
                finished_at=utc_now(),
                status="error",
                clients_updated=updated,
                clients_skipped=skipped,
                error_message=message,
            )
            store.update_status(is_running=False, errors=[message])
        finally:
            if store.current_sync_id == sync_id:
                store.current_sync_id = None
                store.update_status(is_running=False)
        return summary

    # ------------------------------------------------------------------
    # Status and configuration
    # ------------------------------------------------------------------

    def get_status(self) -> SyncStatusResponse:
        store = self.sync_store
        return SyncStatusResponse(
            **store.get_status().model_dump(),
            synced_data=store.get_synced_data_info(),
        )

    def get_history(self, limit: int = 10) -> list[SyncHistoryItem]:
        return self.sync_store.get_history(limit)

    def get_config(self) -> SyncConfig:
        return self.sync_store.get_config()

    def update_config(self, update: SyncConfigUpdate) -> SyncConfig:
        changes = update.model_dump(exclude_none=True)
        config = self.sync_store.update_config(**changes)
        self._log_operation("Sync config updated", **changes)
        return config

    async def test_connection(self) -> ConnectionTestResponse:
        """Check the YClients connection and report whether credentials are configured."""
        client = self.client
        if not client.is_configured:
            return ConnectionTestResponse(
                success=False,
                configured=False,
                message="YClients не настроен",
                error="YCLIENTS_PARTNER_TOKEN and YCLIENTS_COMPANY_ID are required",
            )
        result = await client.test_connection()
        return ConnectionTestResponse(
            success=result["success"],
            configured=True,
            latency_ms=result.get("latency_ms"),
            message="YClients API доступен" if result["success"] else "Ошибка подключения к YClients",
            error=result.get("error"),
        )


def get_running_task() -> asyncio.Task | None:
    return _running_task


async def cancel_running_sync() -> None:
    """Cancel the background sync task, if any, and wait for it to end."""
    global _running_task
    task, _running_task = _running_task, None
    if task is not None and not task.done():
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
