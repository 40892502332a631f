"""
Unit Tests for the Shop Order Repository.
"""

import pytest

from beautyslot.backend.core.exceptions import NotFoundError
from beautyslot.backend.models.order import OrderCustomer, OrderItem, OrderProduct, OrderStatus
from beautyslot.backend.repositories.order import OrderRepository


def _items() -> list[OrderItem]:
    return [
        OrderItem(product=OrderProduct(id="p1", title="Шампунь", price=1200), quantity=2),
        OrderItem(product=OrderProduct(id="p2", title="Маска", price=850.5)),
    ]


@pytest.fixture
def repo() -> OrderRepository:
    return OrderRepository()


@pytest.fixture
def customer() -> OrderCustomer:
    return OrderCustomer(name="Анна", phone="+7 (916) 123-45-67")


class TestCreate:
    def test_numbers_and_total(self, repo, customer):
        first = repo.create(_items(), customer)
        second = repo.create(_items(), customer, notes="Позвонить")

        assert first.order_number == "ORD-0001"
        assert second.order_number == "ORD-0002"
        assert first.total == 3250.5
        assert first.status == OrderStatus.PENDING
        assert second.notes == "Позвонить"
        assert first.id != second.id


class TestQueries:
    def test_get_by_number(self, repo, customer):
        order = repo.create(_items(), customer)

        assert repo.get_by_number("ORD-0001") is order
        assert repo.get_by_number("ORD-9999") is None

    def test_get_by_status(self, repo, customer):
        first = repo.create(_items(), customer)
        repo.create(_items(), customer)
        repo.update_status(first.id, OrderStatus.CONFIRMED)

        assert repo.get_by_status(OrderStatus.CONFIRMED) == [first]
        assert len(repo.get_by_status(OrderStatus.PENDING)) == 1

    def test_get_by_phone_ignores_formatting(self, repo, customer):
        order = repo.create(_items(), customer)
        repo.create(_items(), OrderCustomer(name="Ольга", phone="+79990000000"))

        assert repo.get_by_phone("79161234567") == [order]


class TestUpdates:
    def test_update_status_touches(self, repo, customer):
        order = repo.create(_items(), customer)
        before = order.updated_at

        repo.update_status(order.id, OrderStatus.PROCESSING)

        assert order.status == OrderStatus.PROCESSING
        assert order.updated_at >= before

    def test_update_notes(self, repo, customer):
        order = repo.create(_items(), customer)

        assert repo.update_notes(order.id, "Самовывоз").notes == "Самовывоз"

    def test_cancel_keeps_order(self, repo, customer):
        order = repo.create(_items(), customer)

        repo.cancel(order.id)

        assert repo.get_by_id(order.id).status == OrderStatus.CANCELLED
        assert repo.count() == 1

    def test_unknown_order(self, repo):
        with pytest.raises(NotFoundError, match="Заказ не найден"):
            repo.cancel("missing")
