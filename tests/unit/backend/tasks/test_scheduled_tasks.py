"""
Unit tests for scheduled background tasks.

Task functions are called directly; the sync and reminder services they
start are patched.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from beautyslot.backend.core.utils import utc_now
from beautyslot.backend.schemas.notification import ReminderRunResult
from beautyslot.backend.services.notification import ReminderService
from beautyslot.backend.services.sync import SyncService
from beautyslot.backend.tasks.scheduled import SCHEDULED_TASKS, auto_sync, send_reminders


class TestAutoSync:
    """Tests for the auto_sync task."""

    @pytest.mark.asyncio
    async def test_disabled_by_default(self):
        """Nothing happens while auto sync is off."""
        with patch.object(SyncService, "start_if_idle") as start:
            result = await auto_sync()

        assert result == {"status": "disabled"}
        start.assert_not_called()

    @pytest.mark.asyncio
    async def test_first_sync_starts_immediately(self, sync_store):
        """Without a previous sync the task starts one."""
        sync_store.update_config(auto_sync_enabled=True)

        with patch.object(SyncService, "start_if_idle", return_value=7):
            result = await auto_sync()

        assert result == {"status": "started", "sync_id": 7}

    @pytest.mark.asyncio
    async def test_not_due_within_interval(self, sync_store):
        """A sync newer than sync_interval_hours is left alone."""
        sync_store.update_config(auto_sync_enabled=True, sync_interval_hours=6)
        sync_store.update_status(last_sync_at=utc_now() - timedelta(hours=5))

        with patch.object(SyncService, "start_if_idle") as start:
            result = await auto_sync()

        assert result == {"status": "not_due"}
        start.assert_not_called()

    @pytest.mark.asyncio
    async def test_due_after_interval(self, sync_store):
        """Once the interval has passed a new sync starts."""
        sync_store.update_config(auto_sync_enabled=True, sync_interval_hours=6)
        sync_store.update_status(last_sync_at=utc_now() - timedelta(hours=7))

        with patch.object(SyncService, "start_if_idle", return_value=3):
            result = await auto_sync()

        assert result["status"] == "started"

    @pytest.mark.asyncio
    async def test_already_running(self, sync_store):
        """A sync in progress is reported, not duplicated."""
        sync_store.update_config(auto_sync_enabled=True)

        with patch.object(SyncService, "start_if_idle", return_value=None):
            result = await auto_sync()

        assert result == {"status": "running"}


class TestSendReminders:
    """Tests for the send_reminders task."""

    @pytest.mark.asyncio
    async def test_disabled_by_feature_flag(self):
        """Reminders are skipped when the feature flag is off."""
        app_config = MagicMock()
        app_config.features.reminders_enabled = False

        with (
            patch("beautyslot.backend.tasks.scheduled.get_app_config", return_value=app_config),
            patch.object(ReminderService, "run", AsyncMock()) as run,
        ):
            result = await send_reminders()

        assert result == {"status": "disabled"}
        run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_returns_run_result(self):
        """The reminder run result is returned as JSON-ready dict."""
        app_config = MagicMock()
        app_config.features.reminders_enabled = True

        with (
            patch("beautyslot.backend.tasks.scheduled.get_app_config", return_value=app_config),
            patch.object(ReminderService, "run", AsyncMock(return_value=ReminderRunResult(cleaned=2))),
        ):
            result = await send_reminders()

        assert result["ok"] is True
        assert result["cleaned"] == 2
        assert result["results"]["reminder_day"] == {"sent": 0, "skipped": 0, "failed": 0}
        assert isinstance(result["timestamp"], str)


class TestScheduledTasksConfig:
    """Tests for the SCHEDULED_TASKS schedule."""

    def test_all_tasks_registered(self):
        """Both periodic jobs are scheduled."""
        assert set(SCHEDULED_TASKS) == {"auto_sync", "send_reminders"}

    def test_tasks_run_every_minute(self):
        """Each job has a callable and a one-minute interval."""
        for name, config in SCHEDULED_TASKS.items():
            assert callable(config["function"]), name
            assert config["interval_seconds"] == 60, name
            assert config["description"], name
