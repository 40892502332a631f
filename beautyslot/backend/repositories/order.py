"""
Shop Order Repository.

Orders get a uuid4 id and a sequential ``ORD-0001`` style number.
"""

from beautyslot.backend.core.utils import digits_only
from beautyslot.backend.models.order import OrderCustomer, OrderItem, OrderStatus, ShopOrder
from beautyslot.backend.repositories.base import InMemoryRepository


class OrderRepository(InMemoryRepository[ShopOrder]):
    """Repository for shop orders."""

    model = ShopOrder
    not_found_message = "Заказ не найден"

    def __init__(self) -> None:
        super().__init__()
        self._counter = 0

    def _next_order_number(self) -> str:
        self._counter += 1
        return f"ORD-{self._counter:04d}"

    def create(
        self,
        items: list[OrderItem],
        customer: OrderCustomer,
        notes: str | None = None,
    ) -> ShopOrder:
        """Create a pending order; ``total`` is the sum of price * quantity."""
        order = ShopOrder(
            order_number=self._next_order_number(),
            items=items,
            customer=customer,
            total=sum(item.product.price * item.quantity for item in items),
            notes=notes,
        )
        return self.add(order)

    def get_by_number(self, order_number: str) -> ShopOrder | None:
        return next((o for o in self._items if o.order_number == order_number), None)

    def get_by_status(self, status: OrderStatus) -> list[ShopOrder]:
        return [o for o in self._items if o.status == status]

    def get_by_phone(self, phone: str) -> list[ShopOrder]:
        wanted = digits_only(phone)
        return [o for o in self._items if digits_only(o.customer.phone) == wanted]

    def update_status(self, order_id: str, status: OrderStatus) -> ShopOrder:
        """
        Change the status of an order.

        Raises:
            NotFoundError: If the order does not exist
        """
        order = self.update(order_id, status=status)
        order.touch()
        return order

    def update_notes(self, order_id: str, notes: str) -> ShopOrder:
        order = self.update(order_id, notes=notes)
        order.touch()
        return order

    def cancel(self, order_id: str) -> ShopOrder:
        """Soft delete: the order stays with status cancelled."""
        return self.update_status(order_id, OrderStatus.CANCELLED)


_repo: OrderRepository | None = None


def get_order_repository() -> OrderRepository:
    global _repo
    if _repo is None:
        _repo = OrderRepository()
    return _repo


def reset_order_repository() -> None:
    global _repo
    _repo = OrderRepository()
