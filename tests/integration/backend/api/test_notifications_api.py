"""
Integration Tests for Notification Settings and the Reminder Cron.
"""

from unittest.mock import patch

import pytest
from httpx import AsyncClient

SETTINGS = "/api/v1/admin/notification-settings"
CRON = "/api/v1/notifications/cron"


class TestNotificationSettings:
    @pytest.mark.asyncio
    async def test_lists_default_templates(self, client: AsyncClient, api):
        data = api.assert_success(await client.get(SETTINGS))

        assert len(data["items"]) == 8
        assert data["stats"]["total"] == 0
        post_visit = next(t for t in data["items"] if t["id"] == "6")
        assert post_visit["is_active"] is False

    @pytest.mark.asyncio
    async def test_update_template(self, client: AsyncClient, api):
        data = api.assert_success(
            await client.patch(SETTINGS, json={"id": "2", "message": "До встречи завтра!", "is_active": False})
        )

        assert data["message"] == "До встречи завтра!"
        assert data["is_active"] is False

        listed = api.assert_success(await client.get(SETTINGS))
        assert next(t for t in listed["items"] if t["id"] == "2")["is_active"] is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body,status",
        [
            ({"message": "text"}, 400),
            ({"id": "2"}, 400),
            ({"id": "99", "is_active": True}, 404),
        ],
    )
    async def test_update_errors(self, client: AsyncClient, api, body, status):
        api.assert_error(await client.patch(SETTINGS, json=body), status)

    @pytest.mark.asyncio
    async def test_flag_must_be_boolean(self, client: AsyncClient, api):
        response = await client.patch(SETTINGS, json={"id": "2", "is_active": "no"})

        api.assert_validation_error(response, field="is_active")


class TestReminderCron:
    @pytest.mark.asyncio
    async def test_reports_unconfigured_bot(self, client: AsyncClient, api):
        with patch("beautyslot.telegram.bot.is_bot_configured", return_value=False):
            data = api.assert_success(await client.get(CRON))

        assert data["ok"] is False
        assert data["errors"] == ["Telegram bot not configured"]

    @pytest.mark.asyncio
    async def test_nothing_due(self, client: AsyncClient, api):
        with patch("beautyslot.telegram.bot.is_bot_configured", return_value=True):
            data = api.assert_success(await client.get(CRON))

        assert data["ok"] is True
        assert data["results"]["reminder_day"] == {"sent": 0, "skipped": 0, "failed": 0}
        assert data["results"]["post_visit"]["sent"] == 0
