"""
Integration Test Fixtures.

Fixtures for integration tests - requests go through the full FastAPI
application (middleware, routers, exception handlers) while YClients is
replaced by a mock through ``app.dependency_overrides``. The in-memory
stores are reset by the root conftest before every test.
"""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from beautyslot.backend.core.dependencies import get_yclients
from beautyslot.backend.integrations.yclients import YClientsClient


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def yclients() -> AsyncMock:
    """Mock YClients client injected into every endpoint that depends on it."""
    client = AsyncMock(spec=YClientsClient)
    client.is_configured = True
    client.get_clients.return_value = []
    client.get_staff.return_value = []
    client.get_services.return_value = []
    client.get_records.return_value = []
    client.get_record.return_value = None
    client.delete_record.return_value = True
    client.test_connection.return_value = {"success": True, "latency_ms": 8}
    return client


@pytest.fixture
def app(yclients: AsyncMock) -> FastAPI:
    """Application with the YClients dependency overridden."""
    from beautyslot.backend.main import create_app

    application = create_app()
    application.dependency_overrides[get_yclients] = lambda: yclients
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client bound to the application.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> Any:
        """
        Assert API response is successful.

        Args:
            response: httpx Response object
            expected_status: Expected HTTP status code

        Returns:
            The ``data`` field of the envelope

        Raises:
            AssertionError: If response is not successful
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        body = response.json()
        assert body.get("success") is True, f"Response not successful: {body}"
        assert body.get("error") is None
        return body["data"]

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error.

        Args:
            response: httpx Response object
            expected_status: Expected HTTP status code
            expected_code: Expected error code (optional)

        Returns:
            Response JSON body

        Raises:
            AssertionError: If response is not an error or codes don't match
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        body = response.json()
        assert body.get("success") is False, f"Response should be error: {body}"
        assert body.get("data") is None
        assert body.get("error") is not None, f"Missing error details: {body}"

        if expected_code:
            actual_code = body["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return body

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is a request validation error (422).

        Args:
            response: httpx Response object
            field: Expected field with validation error (optional)

        Returns:
            Response JSON body
        """
        body = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = body["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return body


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()
