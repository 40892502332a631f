"""
YClients API Client.

Async client for the YClients REST API (https://api.yclients.com/api/v1).

Authentication uses two tokens: the partner token from config/.env, and
a user token obtained from ``POST /auth`` with the salon login and
password. The user token is cached for ``token_ttl_hours``.

Every call goes through a circuit breaker. Retries are the caller's
decision (the sync service wraps each fetch in a retry policy).

Usage:
    from beautyslot.backend.integrations.yclients import get_yclients_client

    client = get_yclients_client()
    staff = await client.get_staff()
"""

import time
from typing import Any

import aiobreaker
import httpx

from beautyslot.backend.core.config import get_app_config, get_settings
from beautyslot.backend.core.exceptions import ExternalServiceError, ServiceUnavailableError
from beautyslot.backend.core.logging import get_logger
from beautyslot.backend.core.resilience import create_circuit_breaker
from beautyslot.backend.models.yclients import (
    YClientsClient as YClientsClientModel,
    YClientsRecord,
    YClientsService,
    YClientsStaff,
)

logger = get_logger(__name__)

ACCEPT_HEADER = "application/vnd.api.v2+json"

# Fields requested from the client search; the value index needs all of them.
CLIENT_SEARCH_FIELDS = [
    "id", "name", "phone", "email", "sex", "sex_id",
    "importance_id", "importance", "discount",
    "first_visit_date", "last_visit_date",
    "sold_amount", "visit_count", "avg_sum",
    "balance", "spent", "paid",
    "birth_date", "comment", "categories",
]


class YClientsError(ExternalServiceError):
    """Non-2xx answer from YClients."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"YClients API error: {status_code} - {body}",
            details={"upstream_status": status_code},
        )

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404 or "not found" in self.body.lower()

    @property
    def is_busy(self) -> bool:
        body = self.body.lower()
        return "busy" in body or "занят" in body


def _is_client_error(exc: BaseException) -> bool:
    """4xx answers other than 429 are the caller's fault, not an outage."""
    return (
        isinstance(exc, YClientsError)
        and 400 <= exc.status_code < 500
        and exc.status_code != 429
    )


def _decode(response: httpx.Response) -> dict[str, Any]:
    """JSON object body of a 2xx answer."""
    try:
        payload = response.json()
    except ValueError as exc:
        raise ExternalServiceError("YClients returned a non-JSON response") from exc
    if not isinstance(payload, dict):
        raise ExternalServiceError("YClients returned an unexpected response")
    return payload


class YClientsClient:
    """
    YClients REST client bound to one company.

    Args:
        api_url: Base API URL
        partner_token: Partner (developer) token
        user_login: Salon user login, for the user token
        user_password: Salon user password
        company_id: YClients company (salon) id
        timeout: Per-request timeout in seconds
        token_ttl_hours: How long a user token is reused
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        api_url: str,
        partner_token: str,
        user_login: str,
        user_password: str,
        company_id: str,
        timeout: float = 30.0,
        token_ttl_hours: float = 23,
        breaker: aiobreaker.CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.partner_token = partner_token
        self.user_login = user_login
        self.user_password = user_password
        self.company_id = company_id
        self.token_ttl_seconds = token_ttl_hours * 3600
        self._breaker = breaker or create_circuit_breaker(
            "yclients", exclude=[_is_client_error],
        )
        self._http = httpx.AsyncClient(
            base_url=self.api_url,
            timeout=timeout,
            transport=transport,
        )
        self._user_token: str | None = None
        self._token_expires_at = 0.0

    @property
    def is_configured(self) -> bool:
        return bool(self.partner_token and self.company_id)

    async def close(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Auth and transport
    # ------------------------------------------------------------------

    async def _get_user_token(self) -> str | None:
        """
        Get a cached user token, authenticating when it has expired.

        Returns:
            The user token, or None when no salon login is configured

        Raises:
            YClientsError: If YClients rejects the credentials
            ExternalServiceError: If the answer carries no token
        """
        if not (self.user_login and self.user_password):
            return None
        if self._user_token and time.monotonic() < self._token_expires_at:
            return self._user_token

        try:
            response = await self._http.post(
                "/auth",
                headers={
                    "Content-Type": "application/json",
                    "Accept": ACCEPT_HEADER,
                    "Authorization": f"Bearer {self.partner_token}",
                },
                json={"login": self.user_login, "password": self.user_password},
            )
        except httpx.HTTPError as exc:
            raise ExternalServiceError(f"YClients auth request failed: {exc}") from exc
        if not response.is_success:
            raise YClientsError(response.status_code, response.text)

        payload = _decode(response)
        token = (payload.get("data") or {}).get("user_token")
        if not payload.get("success", True) or not token:
            raise ExternalServiceError("Failed to get user token from YClients")

        self._user_token = token
        self._token_expires_at = time.monotonic() + self.token_ttl_seconds
        logger.info("YClients user token refreshed")
        return token

    async def _headers(self) -> dict[str, str]:
        user_token = await self._get_user_token()
        authorization = f"Bearer {self.partner_token}"
        if user_token:
            authorization = f"{authorization}, User {user_token}"
        return {
            "Content-Type": "application/json",
            "Accept": ACCEPT_HEADER,
            "Authorization": authorization,
        }

    async def _send(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        headers = await self._headers()
        try:
            response = await self._http.request(
                method, endpoint, params=params, json=json, headers=headers,
            )
        except httpx.HTTPError as exc:
            raise ExternalServiceError(f"YClients request failed: {exc}") from exc

        if not response.is_success:
            raise YClientsError(response.status_code, response.text)
        if response.status_code == 204 or not response.content:
            return {}
        return _decode(response)

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        """
        Send a request through the circuit breaker.

        Raises:
            ServiceUnavailableError: If credentials are not configured
            YClientsError: For non-2xx answers
            ExternalServiceError: For transport failures or an open breaker
        """
        if not self.is_configured:
            raise ServiceUnavailableError("YClients credentials are not configured")
        try:
            return await self._breaker.call_async(self._send, method, endpoint, params, json)
        except aiobreaker.CircuitBreakerError as exc:
            raise ExternalServiceError("YClients is temporarily unavailable") from exc

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def get_clients(
        self,
        page: int = 1,
        count: int = 100,
        fullname: str | None = None,
        phone: str | None = None,
    ) -> list[YClientsClientModel]:
        """Search company clients, one page at a time."""
        body: dict[str, Any] = {
            "page": page,
            "page_size": count,
            "fields": CLIENT_SEARCH_FIELDS,
        }
        if fullname:
            body["fullname"] = fullname
        if phone:
            body["phone"] = phone

        payload = await self._request(
            "POST", f"/company/{self.company_id}/clients/search", json=body,
        )
        return [YClientsClientModel.model_validate(item) for item in payload.get("data") or []]

    async def get_client(self, client_id: int) -> YClientsClientModel | None:
        payload = await self._request("GET", f"/company/{self.company_id}/clients/{client_id}")
        data = payload.get("data")
        return YClientsClientModel.model_validate(data) if data else None

    async def get_records(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
        staff_id: int | None = None,
        client_id: int | None = None,
        page: int | None = None,
        count: int | None = None,
    ) -> list[YClientsRecord]:
        """List records. Dates are YYYY-MM-DD; unset filters are omitted."""
        params = {
            key: value
            for key, value in {
                "start_date": start_date,
                "end_date": end_date,
                "staff_id": staff_id,
                "client_id": client_id,
                "page": page,
                "count": count,
            }.items()
            if value
        }
        payload = await self._request("GET", f"/records/{self.company_id}", params=params)
        return [YClientsRecord.model_validate(item) for item in payload.get("data") or []]

    async def get_record(self, record_id: int) -> YClientsRecord | None:
        payload = await self._request("GET", f"/record/{self.company_id}/{record_id}")
        data = payload.get("data")
        return YClientsRecord.model_validate(data) if data else None

    async def update_record(
        self,
        record_id: int,
        datetime: str | None = None,
        staff_id: int | None = None,
    ) -> YClientsRecord:
        """
        Move a record to another time and/or staff member.

        YClients replaces the whole record on PUT, so the current record
        is read first and resent with the changed fields.

        Raises:
            YClientsError: 404 when the record is gone, 4xx "busy" when the
                slot is taken
        """
        current = await self.get_record(record_id)
        if current is None:
            raise YClientsError(404, "Record not found")

        body: dict[str, Any] = {
            "staff_id": staff_id or current.staff_id,
            "services": [
                {"id": s.id, "cost": s.cost, "first_cost": s.first_cost, "amount": s.amount}
                for s in current.services
            ],
            "datetime": datetime or current.datetime,
            "seance_length": current.seance_length or current.length or 3600,
            "comment": current.comment or "",
            "save_if_busy": False,
        }
        if current.client is not None:
            body["client"] = {
                "id": current.client.id,
                "name": current.client.name or "",
                "phone": current.client.phone or "",
            }

        payload = await self._request("PUT", f"/record/{self.company_id}/{record_id}", json=body)
        data = payload.get("data")
        if not data:
            return current.model_copy(update={k: v for k, v in body.items() if k in ("staff_id", "datetime")})
        return YClientsRecord.model_validate(data)

    async def delete_record(self, record_id: int) -> bool:
        await self._request("DELETE", f"/record/{self.company_id}/{record_id}")
        return True

    async def get_staff(self) -> list[YClientsStaff]:
        payload = await self._request("GET", f"/company/{self.company_id}/staff")
        return [YClientsStaff.model_validate(item) for item in payload.get("data") or []]

    async def get_services(self) -> list[YClientsService]:
        payload = await self._request("GET", f"/company/{self.company_id}/services")
        return [YClientsService.model_validate(item) for item in payload.get("data") or []]

    async def test_connection(self) -> dict[str, Any]:
        """
        Check the API by listing staff.

        Returns:
            ``{success, latency_ms}`` plus ``error`` on failure
        """
        started = time.perf_counter()
        try:
            await self.get_staff()
        except (ExternalServiceError, ServiceUnavailableError) as exc:
            latency_ms = round((time.perf_counter() - started) * 1000)
            logger.warning("YClients connection test failed", extra={"error": exc.message})
            return {"success": False, "latency_ms": latency_ms, "error": exc.message}
        latency_ms = round((time.perf_counter() - started) * 1000)
        return {"success": True, "latency_ms": latency_ms}

    async def get_clients_count(self) -> int:
        """Number of clients on the first page of size 1 (0 or 1)."""
        return len(await self.get_clients(count=1))


_client: YClientsClient | None = None


def get_yclients_client() -> YClientsClient:
    """Get the process-wide YClients client built from configuration."""
    global _client
    if _client is None:
        settings = get_settings()
        config = get_app_config()
        _client = YClientsClient(
            api_url=config.yclients.api_url,
            partner_token=settings.yclients_partner_token,
            user_login=settings.yclients_user_login,
            user_password=settings.yclients_user_password,
            company_id=settings.yclients_company_id,
            timeout=float(config.application.timeouts.external_api),
            token_ttl_hours=config.yclients.token_ttl_hours,
            breaker=create_circuit_breaker(
                "yclients",
                fail_max=config.yclients.circuit_breaker.fail_max,
                timeout_duration=config.yclients.circuit_breaker.timeout_duration,
                exclude=[_is_client_error],
            ),
        )
    return _client


async def close_yclients_client() -> None:
    """Close the shared client's HTTP pool."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
