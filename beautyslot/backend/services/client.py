"""
Client Service.

Read-only admin view over synced clients, scored with the value index.
"""

from beautyslot.backend.core.exceptions import MethodNotAllowedError, NotFoundError
from beautyslot.backend.core.pagination import SkipLimit
from beautyslot.backend.core.utils import local_now
from beautyslot.backend.models.yclients import YClientsClient
from beautyslot.backend.schemas.base import ListPage
from beautyslot.backend.schemas.client import ClientDetailResponse, ClientResponse, IVKDetails
from beautyslot.backend.services.base import BaseService
from beautyslot.backend.services.ivk import (
    IVKResult,
    calculate_ivk,
    calculate_risk,
    determine_client_status,
)

NOT_SYNCED_MESSAGE = "Данные не синхронизированы. Запустите синхронизацию на странице /apps/sync"
READ_ONLY_MESSAGE = "Данные клиентов синхронизируются из YClients и доступны только для чтения"


def _to_response(client: YClientsClient, ivk: IVKResult) -> dict:
    fallback_time = local_now().isoformat(timespec="seconds")
    return {
        "id": client.id,
        "yclients_id": str(client.id),
        "name": client.name or "Без имени",
        "phone": client.phone or "",
        "email": client.email or None,
        "birth_date": client.birth_date or None,
        "comment": client.comment or None,
        "created_at": client.first_visit_date or fallback_time,
        "updated_at": client.last_visit_date or fallback_time,
        "last_visit_at": client.last_visit_date or None,
        "visits_count": client.visit_count or 0,
        "total_spent": client.spent or 0,
        "score": ivk.score,
        "risk_level": calculate_risk(ivk),
        "client_status": determine_client_status(ivk),
        "days_since_last_visit": ivk.days_since_last_visit,
        "tier": ivk.tier,
    }


class ClientService(BaseService):
    """Lists and inspects synced clients."""

    def list_clients(
        self,
        page: SkipLimit,
        search: str | None = None,
        client_status: str | None = None,
        risk_level: str | None = None,
        has_subscription: bool | None = None,
        min_score: int | None = None,
        min_visits: int | None = None,
        days_inactive: int | None = None,
    ) -> ListPage[ClientResponse]:
        """
        List clients sorted by value index, best first.

        Args:
            page: skip/limit window
            search: Substring of name, phone or email (case-insensitive)
            client_status: VIP, REGULAR, PROBLEM, LOST; ALL disables the filter
            risk_level: LOW, MEDIUM, HIGH, CRITICAL
            has_subscription: Only clients with an active subscription
            min_score: Minimum value index
            min_visits: Minimum number of visits
            days_inactive: Minimum days since the last visit

        Returns:
            Page of clients; a hint message when nothing is synced yet
        """
        synced = self.sync_store.clients
        if not synced:
            return ListPage(items=[], total=0, skip=page.skip, limit=page.limit, message=NOT_SYNCED_MESSAGE)

        now = local_now()
        clients = [ClientResponse(**_to_response(c, calculate_ivk(c, now))) for c in synced]

        if search:
            needle = search.lower()
            clients = [
                c for c in clients
                if needle in c.name.lower()
                or needle in c.phone
                or (c.email and needle in c.email.lower())
            ]
        if client_status and client_status != "ALL":
            clients = [c for c in clients if c.client_status == client_status]
        if risk_level:
            clients = [c for c in clients if c.risk_level == risk_level]
        if has_subscription:
            clients = [c for c in clients if c.has_active_subscription]
        if min_score is not None:
            clients = [c for c in clients if c.score >= min_score]
        if min_visits is not None:
            clients = [c for c in clients if c.visits_count >= min_visits]
        if days_inactive is not None:
            clients = [
                c for c in clients
                if c.days_since_last_visit is not None and c.days_since_last_visit >= days_inactive
            ]

        clients.sort(key=lambda c: c.score, reverse=True)
        return ListPage(items=page.apply(clients), total=len(clients), skip=page.skip, limit=page.limit)

    def get_client(self, client_id: str) -> ClientDetailResponse:
        """
        Get one client with the value index breakdown.

        Raises:
            ValidationError: If the id is not numeric
            NotFoundError: If no synced client has this id
        """
        numeric_id = self._parse_int_id(client_id, "Invalid client ID")
        client = self.sync_store.find_client(numeric_id)
        if client is None:
            raise NotFoundError("Client not found")

        ivk = calculate_ivk(client)
        return ClientDetailResponse(
            **_to_response(client, ivk),
            ivk_details=IVKDetails(
                components=ivk.components,
                percentages=ivk.percentages,
                metrics=ivk.metrics,
                tier=ivk.tier,
            ),
            recommendations=ivk.recommendations,
        )

    def update_client(self, client_id: str) -> ClientDetailResponse:
        """Clients are read-only here; returns the client unchanged."""
        client = self.get_client(client_id)
        self._log_debug("Client update ignored, data is read-only", client_id=client.id)
        client.message = READ_ONLY_MESSAGE
        return client

    def delete_client(self, client_id: str) -> None:
        """
        Raises:
            MethodNotAllowedError: Always; clients are managed in YClients
        """
        raise MethodNotAllowedError("Cannot delete synced clients. Manage clients in YClients.")
