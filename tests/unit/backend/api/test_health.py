"""
Unit Tests for Health Check Endpoints.

Tests the health check functionality including:
- Liveness check (/health)
- Readiness check (/health/ready)
- Detailed health check (/health/detailed)
- YClients and Telegram connectivity checks
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException


class TestHealthCheck:
    """Tests for the liveness health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_returns_healthy(self):
        """Should return healthy status."""
        from beautyslot.backend.api.health import health_check

        result = await health_check()

        assert result == {"status": "healthy"}


class TestCheckYClients:
    """Tests for the YClients health check function."""

    @pytest.mark.asyncio
    async def test_returns_not_configured_without_credentials(self):
        """Should return not_configured when the partner token is not set."""
        from beautyslot.backend.api.health import check_yclients

        mock_settings = MagicMock()
        mock_settings.yclients_configured = False

        with patch("beautyslot.backend.api.health.get_settings", return_value=mock_settings):
            result = await check_yclients()

        assert result == {"status": "not_configured"}

    @pytest.mark.asyncio
    async def test_returns_healthy_with_latency(self, mock_yclients):
        """Should return healthy with latency when YClients answers."""
        from beautyslot.backend.api.health import check_yclients

        mock_settings = MagicMock()
        mock_settings.yclients_configured = True

        with (
            patch("beautyslot.backend.api.health.get_settings", return_value=mock_settings),
            patch(
                "beautyslot.backend.integrations.yclients.get_yclients_client",
                return_value=mock_yclients,
            ),
        ):
            result = await check_yclients()

        assert result == {"status": "healthy", "latency_ms": 12}

    @pytest.mark.asyncio
    async def test_returns_unhealthy_on_failure(self, mock_yclients):
        """Should return unhealthy with the error when the check fails."""
        from beautyslot.backend.api.health import check_yclients

        mock_settings = MagicMock()
        mock_settings.yclients_configured = True
        mock_yclients.test_connection.return_value = {
            "success": False,
            "latency_ms": 30000,
            "error": "YClients request failed: timeout",
        }

        with (
            patch("beautyslot.backend.api.health.get_settings", return_value=mock_settings),
            patch(
                "beautyslot.backend.integrations.yclients.get_yclients_client",
                return_value=mock_yclients,
            ),
        ):
            result = await check_yclients()

        assert result["status"] == "unhealthy"
        assert result["error"] == "YClients request failed: timeout"


class TestCheckTelegram:
    """Tests for the Telegram health check function."""

    @pytest.mark.asyncio
    async def test_returns_not_configured_without_token(self):
        """Should return not_configured when no bot token is set."""
        from beautyslot.backend.api.health import check_telegram

        with patch("beautyslot.telegram.bot.is_bot_configured", return_value=False):
            result = await check_telegram()

        assert result == {"status": "not_configured"}

    @pytest.mark.asyncio
    async def test_returns_healthy_with_bot_username(self, mock_bot):
        """Should report the bot username from getMe."""
        from beautyslot.backend.api.health import check_telegram

        mock_bot.get_me.return_value = MagicMock(username="beauty_slot_bot")

        with (
            patch("beautyslot.telegram.bot.is_bot_configured", return_value=True),
            patch("beautyslot.telegram.bot.get_bot", return_value=mock_bot),
        ):
            result = await check_telegram()

        assert result["status"] == "healthy"
        assert result["bot"] == "beauty_slot_bot"
        assert "latency_ms" in result

    @pytest.mark.asyncio
    async def test_returns_unhealthy_on_error(self, mock_bot):
        """Should return unhealthy when getMe fails."""
        from beautyslot.backend.api.health import check_telegram

        mock_bot.get_me.side_effect = Exception("Unauthorized")

        with (
            patch("beautyslot.telegram.bot.is_bot_configured", return_value=True),
            patch("beautyslot.telegram.bot.get_bot", return_value=mock_bot),
        ):
            result = await check_telegram()

        assert result == {"status": "unhealthy", "error": "Unauthorized"}


class TestReadinessCheck:
    """Tests for the readiness check endpoint."""

    @pytest.mark.asyncio
    async def test_returns_healthy_when_not_configured(self):
        """Unconfigured integrations do not fail readiness."""
        from beautyslot.backend.api.health import readiness_check

        with (
            patch(
                "beautyslot.backend.api.health.check_yclients",
                AsyncMock(return_value={"status": "not_configured"}),
            ),
            patch(
                "beautyslot.backend.api.health.check_telegram",
                AsyncMock(return_value={"status": "not_configured"}),
            ),
        ):
            result = await readiness_check()

        assert result["status"] == "healthy"
        assert set(result["checks"]) == {"yclients", "telegram"}
        assert "timestamp" in result

    @pytest.mark.asyncio
    async def test_raises_503_when_dependency_unhealthy(self):
        """A configured but failing dependency makes the service not ready."""
        from beautyslot.backend.api.health import readiness_check

        with (
            patch(
                "beautyslot.backend.api.health.check_yclients",
                AsyncMock(return_value={"status": "unhealthy", "error": "down"}),
            ),
            patch(
                "beautyslot.backend.api.health.check_telegram",
                AsyncMock(return_value={"status": "healthy", "bot": "b"}),
            ),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await readiness_check()

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail["checks"]["yclients"]["error"] == "down"

    @pytest.mark.asyncio
    async def test_crashed_check_reported_as_error(self):
        """A check that raises is reported as error instead of crashing."""
        from beautyslot.backend.api.health import readiness_check

        with (
            patch(
                "beautyslot.backend.api.health.check_yclients",
                AsyncMock(side_effect=RuntimeError("boom")),
            ),
            patch(
                "beautyslot.backend.api.health.check_telegram",
                AsyncMock(return_value={"status": "not_configured"}),
            ),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await readiness_check()

        assert exc_info.value.detail["checks"]["yclients"]["status"] == "error"


class TestDetailedHealthCheck:
    """Tests for the detailed health check endpoint."""

    @pytest.mark.asyncio
    async def test_includes_application_and_sync_info(self, sync_store, make_staff):
        """Should report app info and what the sync store holds."""
        from beautyslot.backend.api.health import detailed_health_check

        sync_store.set_synced_data(staff=[make_staff(), make_staff()])

        with (
            patch(
                "beautyslot.backend.api.health.check_yclients",
                AsyncMock(return_value={"status": "not_configured"}),
            ),
            patch(
                "beautyslot.backend.api.health.check_telegram",
                AsyncMock(return_value={"status": "not_configured"}),
            ),
        ):
            result = await detailed_health_check()

        assert result["status"] == "healthy"
        assert result["application"]["timezone"]
        assert result["sync"]["is_running"] is False
        assert result["sync"]["synced_data"]["staff"] == 2
