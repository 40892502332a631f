"""
Integration Tests for Health Endpoints.

Without credentials in config/.env both integrations report
``not_configured``, which keeps the service ready.
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient


class TestLiveness:
    @pytest.mark.asyncio
    async def test_liveness_always_healthy(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestReadiness:
    """Tests for GET /health/ready."""

    @pytest.mark.asyncio
    async def test_ready_when_nothing_configured(self, client: AsyncClient) -> None:
        """Unconfigured integrations do not fail readiness."""
        with patch("beautyslot.backend.api.health.get_settings") as settings, \
             patch("beautyslot.telegram.bot.is_bot_configured", return_value=False):
            settings.return_value.yclients_configured = False
            response = await client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["yclients"] == {"status": "not_configured"}
        assert data["checks"]["telegram"] == {"status": "not_configured"}

    @pytest.mark.asyncio
    async def test_unhealthy_dependency_returns_503(self, client: AsyncClient) -> None:
        failing = AsyncMock(return_value={"status": "unhealthy", "error": "timeout"})
        with patch("beautyslot.backend.api.health.check_yclients", failing), \
             patch("beautyslot.telegram.bot.is_bot_configured", return_value=False):
            response = await client.get("/health/ready")

        assert response.status_code == 503
        detail = response.json()["detail"]
        assert detail["status"] == "unhealthy"
        assert detail["checks"]["yclients"]["error"] == "timeout"


class TestDetailed:
    """Tests for GET /health/detailed."""

    @pytest.mark.asyncio
    async def test_returns_app_info(self, client: AsyncClient) -> None:
        response = await client.get("/health/detailed")

        assert response.status_code == 200
        app_info = response.json()["application"]
        assert app_info["name"] == "BeautySlot Admin"
        assert app_info["timezone"] == "Europe/Moscow"
        assert "version" in app_info

    @pytest.mark.asyncio
    async def test_reports_sync_store(self, client: AsyncClient, sync_store, make_staff, make_client) -> None:
        sync_store.set_synced_data(staff=[make_staff()], clients=[make_client(), make_client()])

        response = await client.get("/health/detailed")

        sync_info = response.json()["sync"]
        assert sync_info["is_running"] is False
        assert sync_info["synced_data"]["staff"] == 1
        assert sync_info["synced_data"]["clients"] == 2

    @pytest.mark.asyncio
    async def test_failing_check_marks_unhealthy(self, client: AsyncClient) -> None:
        with patch("beautyslot.backend.api.health.check_telegram", AsyncMock(side_effect=RuntimeError("boom"))):
            response = await client.get("/health/detailed")

        data = response.json()
        assert response.status_code == 200
        assert data["status"] == "unhealthy"
        assert data["checks"]["telegram"]["status"] == "error"
