"""
Integration Tests for Request Context.

Every answer, successful or not, carries the request ID and timing
headers, and error envelopes repeat the request ID in their metadata.
"""

import pytest
from httpx import AsyncClient


class TestRequestHeaders:
    """X-Request-ID and X-Response-Time on admin, public and health routes."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path",
        ["/health", "/api/v1/admin/staff", "/api/v1/public/categories", "/api/v1/admin/clients/999"],
    )
    async def test_generated_request_id(self, client: AsyncClient, path):
        response = await client.get(path)

        assert len(response.headers["X-Request-ID"]) == 36
        assert response.headers["X-Response-Time"][:-2].isdigit()

    @pytest.mark.asyncio
    async def test_caller_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/public/services",
            headers={"X-Request-ID": "microsite-7f3a", "X-Frontend-ID": "web"},
        )

        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == "microsite-7f3a"


class TestRequestIdInErrors:
    """The envelope metadata repeats the caller's request ID."""

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient, api):
        response = await client.get("/api/v1/admin/clients/999", headers={"X-Request-ID": "admin-404"})

        body = api.assert_error(response, 404, "RES_NOT_FOUND")
        assert body["metadata"]["request_id"] == "admin-404"

    @pytest.mark.asyncio
    async def test_query_validation(self, client: AsyncClient, api):
        response = await client.get(
            "/api/v1/admin/clients",
            params={"min_score": 500},
            headers={"X-Request-ID": "admin-422"},
        )

        body = api.assert_validation_error(response, field="min_score")
        assert body["metadata"]["request_id"] == "admin-422"

    @pytest.mark.asyncio
    async def test_upstream_failure_reports_status(self, client: AsyncClient, api, yclients):
        from beautyslot.backend.integrations.yclients import YClientsError

        yclients.get_record.side_effect = YClientsError(500, "internal")

        response = await client.get("/api/v1/public/booking/77", headers={"X-Request-ID": "yc-502"})

        body = api.assert_error(response, 502, "SYS_EXTERNAL_SERVICE_ERROR")
        assert body["error"]["details"] == {"upstream_status": 500}
        assert body["metadata"]["request_id"] == "yc-502"
