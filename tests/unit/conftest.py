"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked.
Unit tests should be fast and isolated, never touching YClients or the
Telegram Bot API.
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from beautyslot.backend.integrations.yclients import YClientsClient


# =============================================================================
# YClients Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_yclients() -> AsyncMock:
    """
    Mock YClients client for unit tests.

    Every operation is an AsyncMock returning an empty result.

    Usage:
        async def test_sync(mock_yclients, make_staff):
            mock_yclients.get_staff.return_value = [make_staff()]
            summary = await SyncService(mock_yclients).run_once()
    """
    client = AsyncMock(spec=YClientsClient)
    client.is_configured = True
    client.get_clients.return_value = []
    client.get_client.return_value = None
    client.get_records.return_value = []
    client.get_record.return_value = None
    client.get_staff.return_value = []
    client.get_services.return_value = []
    client.delete_record.return_value = True
    client.test_connection.return_value = {"success": True, "latency_ms": 12}
    return client


class MockResponse:
    """Canned YClients answer for httpx.MockTransport handlers."""

    def __init__(
        self,
        status_code: int,
        json_data: dict[str, Any] | None = None,
        text: str = "",
    ) -> None:
        self.status_code = status_code
        self._json_data = json_data
        self.text = text

    def to_httpx(self, request: httpx.Request) -> httpx.Response:
        if self._json_data is not None:
            return httpx.Response(self.status_code, json=self._json_data, request=request)
        return httpx.Response(self.status_code, text=self.text, request=request)


@pytest.fixture
def mock_response() -> type[MockResponse]:
    """Provide MockResponse class for creating mock HTTP responses."""
    return MockResponse


# =============================================================================
# Telegram Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_bot() -> MagicMock:
    """
    Mock aiogram Bot.

    Usage:
        async def test_send(mock_bot):
            with patch("beautyslot.telegram.bot.get_bot", return_value=mock_bot):
                ...
            mock_bot.send_message.assert_awaited_once()
    """
    bot = MagicMock()
    bot.send_message = AsyncMock()
    bot.get_me = AsyncMock()
    bot.get_webhook_info = AsyncMock()
    bot.set_webhook = AsyncMock(return_value=True)
    bot.delete_webhook = AsyncMock(return_value=True)
    return bot


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                # Test code that logs
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
