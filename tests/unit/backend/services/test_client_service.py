"""
Unit Tests for Client Service.
"""

from datetime import timedelta

import pytest

from beautyslot.backend.core.exceptions import MethodNotAllowedError, NotFoundError, ValidationError
from beautyslot.backend.core.pagination import SkipLimit
from beautyslot.backend.core.utils import local_now
from beautyslot.backend.services.client import NOT_SYNCED_MESSAGE, READ_ONLY_MESSAGE, ClientService

PAGE = SkipLimit(skip=0, limit=20)


def _days_ago(days: int) -> str:
    return (local_now() - timedelta(days=days)).strftime("%Y-%m-%d %H:%M:%S")


@pytest.fixture
def clients(sync_store, make_client):
    """Three clients: a VIP, a regular and a lost one."""
    vip = make_client(
        id=1,
        name="Анна Петрова",
        phone="+79161111111",
        email="anna@example.com",
        last_visit_date=_days_ago(3),
        first_visit_date=_days_ago(800),
        visit_count=60,
        spent=150000,
    )
    regular = make_client(
        id=2,
        name="Ольга Смирнова",
        phone="+79162222222",
        last_visit_date=_days_ago(20),
        first_visit_date=_days_ago(200),
        visit_count=6,
        spent=20000,
    )
    lost = make_client(
        id=3,
        name="Ирина Козлова",
        phone="+79163333333",
        last_visit_date=_days_ago(120),
        visit_count=1,
        spent=1500,
    )
    sync_store.set_synced_data(clients=[lost, regular, vip])
    return vip, regular, lost


class TestListClients:
    """Tests for listing and filtering clients."""

    def test_hint_when_not_synced(self):
        result = ClientService().list_clients(PAGE)

        assert result.items == []
        assert result.total == 0
        assert result.message == NOT_SYNCED_MESSAGE

    def test_sorted_by_score(self, clients):
        result = ClientService().list_clients(PAGE)

        assert [c.id for c in result.items] == [1, 2, 3]
        scores = [c.score for c in result.items]
        assert scores == sorted(scores, reverse=True)
        assert result.message is None

    def test_response_fields(self, clients):
        vip = ClientService().list_clients(PAGE).items[0]

        assert vip.yclients_id == "1"
        assert vip.client_status == "VIP"
        assert vip.risk_level == "LOW"
        assert vip.visits_count == 60
        assert vip.total_spent == 150000
        assert vip.days_since_last_visit == 3

    def test_search_name_case_insensitive(self, clients):
        result = ClientService().list_clients(PAGE, search="ольга")
        assert [c.id for c in result.items] == [2]

    def test_search_phone_and_email(self, clients):
        assert ClientService().list_clients(PAGE, search="3333").items[0].id == 3
        assert ClientService().list_clients(PAGE, search="ANNA@").items[0].id == 1

    def test_filter_status(self, clients):
        result = ClientService().list_clients(PAGE, client_status="LOST")
        assert [c.id for c in result.items] == [3]

    def test_status_all_disables_filter(self, clients):
        assert ClientService().list_clients(PAGE, client_status="ALL").total == 3

    def test_filter_min_visits(self, clients):
        result = ClientService().list_clients(PAGE, min_visits=5)
        assert {c.id for c in result.items} == {1, 2}

    def test_filter_days_inactive(self, clients):
        result = ClientService().list_clients(PAGE, days_inactive=30)
        assert [c.id for c in result.items] == [3]

    def test_filter_min_score(self, clients):
        result = ClientService().list_clients(PAGE, min_score=90)
        assert [c.id for c in result.items] == [1]

    def test_subscription_filter_matches_nothing(self, clients):
        assert ClientService().list_clients(PAGE, has_subscription=True).total == 0

    def test_pagination_keeps_total(self, clients):
        result = ClientService().list_clients(SkipLimit(skip=1, limit=1))

        assert result.total == 3
        assert [c.id for c in result.items] == [2]
        assert result.skip == 1
        assert result.limit == 1


class TestGetClient:
    def test_detail_includes_breakdown(self, clients):
        client = ClientService().get_client("1")

        assert client.id == 1
        assert set(client.ivk_details.components) == {"recency", "frequency", "monetary", "loyalty"}
        assert client.ivk_details.tier == client.tier
        assert client.ivk_details.metrics.days_since_last_visit == 3
        assert client.recommendations

    def test_non_numeric_id(self, clients):
        with pytest.raises(ValidationError):
            ClientService().get_client("abc")

    def test_missing_client(self, clients):
        with pytest.raises(NotFoundError):
            ClientService().get_client("999")

    def test_missing_name_falls_back(self, sync_store, make_client):
        sync_store.set_synced_data(clients=[make_client(id=5, name=None, phone=None)])

        client = ClientService().get_client("5")

        assert client.name == "Без имени"
        assert client.phone == ""


class TestReadOnly:
    def test_update_returns_client_unchanged(self, clients):
        client = ClientService().update_client("2")

        assert client.name == "Ольга Смирнова"
        assert client.message == READ_ONLY_MESSAGE

    def test_delete_not_allowed(self, clients):
        with pytest.raises(MethodNotAllowedError):
            ClientService().delete_client("1")
