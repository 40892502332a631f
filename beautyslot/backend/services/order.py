"""
Shop Order Service.

Order intake for the salon shop. New orders are announced to the admin
chat and, when the customer's phone is linked, to the customer in
Telegram. Notification problems are logged and never fail the order.
"""

from beautyslot.backend.core.config import get_settings
from beautyslot.backend.core.exceptions import ValidationError
from beautyslot.backend.core.utils import mask_phone, normalize_phone, utc_now
from beautyslot.backend.models.order import OrderCustomer, OrderStatus, ShopOrder
from beautyslot.backend.repositories.order import OrderRepository, get_order_repository
from beautyslot.backend.repositories.telegram import get_telegram_store
from beautyslot.backend.schemas.order import OrderCreate, OrderListResponse, OrderStats, OrderUpdate
from beautyslot.backend.services.base import BaseService


def format_rub(amount: int | float) -> str:
    """Group thousands with a non-breaking space: 12500 -> "12 500 ₽"."""
    return f"{amount:,.0f}".replace(",", " ") + " ₽"


def format_admin_notification(order: ShopOrder) -> str:
    from beautyslot.telegram.services.notifications import escape_html

    items = "\n".join(
        f"  • {escape_html(item.product.title)} × {item.quantity} = "
        f"{format_rub(item.product.price * item.quantity)}"
        for item in order.items
    )
    lines = [
        f"🛒 <b>Новый заказ {order.order_number}</b>",
        "",
        f"👤 <b>Клиент:</b> {escape_html(order.customer.name)}",
        f"📞 <b>Телефон:</b> {escape_html(order.customer.phone)}",
    ]
    if order.customer.email:
        lines.append(f"📧 <b>Email:</b> {escape_html(order.customer.email)}")
    if order.customer.notes:
        lines.append(f"💬 <b>Комментарий:</b> {escape_html(order.customer.notes)}")
    lines += [
        "",
        "📦 <b>Состав заказа:</b>",
        items,
        "",
        f"💰 <b>Итого:</b> {format_rub(order.total)}",
        "",
        f"🕐 <b>Создан:</b> {order.created_at:%d.%m.%Y %H:%M} UTC",
    ]
    return "\n".join(lines)


def format_customer_notification(order: ShopOrder) -> str:
    from beautyslot.telegram.services.notifications import escape_html

    items = "\n".join(
        f"• {escape_html(item.product.title)} × {item.quantity}" for item in order.items
    )
    return (
        f"✅ <b>Заказ {order.order_number} принят!</b>\n\n"
        "Спасибо за ваш заказ!\n\n"
        f"📦 <b>Состав:</b>\n{items}\n\n"
        f"💰 <b>Сумма:</b> {format_rub(order.total)}\n\n"
        "Мы свяжемся с вами для подтверждения в ближайшее время."
    )


def _chat_id(value: str) -> int | str:
    return int(value) if value.lstrip("-").isdigit() else value


class OrderService(BaseService):
    """Creates, lists and updates shop orders."""

    def __init__(self, notifier=None) -> None:
        super().__init__()
        self._notifier = notifier

    @property
    def repository(self) -> OrderRepository:
        return get_order_repository()

    @property
    def notifier(self):
        if self._notifier is None:
            from beautyslot.telegram.services import get_notification_service

            self._notifier = get_notification_service()
        return self._notifier

    def list_orders(self) -> OrderListResponse:
        orders = sorted(self.repository.get_all(), key=lambda o: o.created_at, reverse=True)
        return OrderListResponse(items=orders, total=len(orders), stats=self.get_stats())

    def get_order(self, order_id: str) -> ShopOrder:
        return self.repository.get_by_id(order_id)

    async def create_order(self, data: OrderCreate) -> ShopOrder:
        """
        Create a pending order and notify about it.

        Raises:
            ValidationError: On an empty cart or missing customer name/phone
        """
        if not data.items:
            raise ValidationError("Корзина пуста")
        customer = data.customer
        if customer is None or not customer.name or not customer.phone:
            raise ValidationError("Заполните обязательные поля: имя и телефон")

        order = self.repository.create(
            items=data.items,
            customer=OrderCustomer(**customer.model_dump()),
            notes=customer.notes,
        )
        self._log_operation(
            "Shop order created",
            order_number=order.order_number,
            phone=mask_phone(customer.phone),
            total=order.total,
            items_count=len(order.items),
        )

        await self._notify_new_order(order)
        return order

    async def _notify_new_order(self, order: ShopOrder) -> None:
        from beautyslot.telegram.bot import is_bot_configured

        if not is_bot_configured():
            return

        try:
            admin_chat_id = get_settings().telegram_admin_chat_id
            if admin_chat_id:
                await self.notifier.send(_chat_id(admin_chat_id), format_admin_notification(order))

            link = get_telegram_store().get_by_phone(normalize_phone(order.customer.phone))
            if link is not None:
                await self.notifier.send(link.telegram_id, format_customer_notification(order))
        except Exception as e:
            self._logger.error(
                "Failed to send order notifications",
                extra={"order_number": order.order_number, "error": str(e)},
            )

    def update_order(self, order_id: str, data: OrderUpdate) -> ShopOrder:
        """
        Update status and/or notes.

        Raises:
            NotFoundError: If the order does not exist
            ValidationError: If the status is not a known order status
        """
        order = self.repository.get_by_id(order_id)

        if data.status:
            try:
                status = OrderStatus(data.status)
            except ValueError:
                raise ValidationError("Некорректный статус") from None
            order = self.repository.update_status(order_id, status)
            self._log_operation("Order status updated", order_number=order.order_number, status=str(status))

        if data.notes is not None:
            order = self.repository.update_notes(order_id, data.notes)

        return order

    def get_stats(self) -> OrderStats:
        orders = self.repository.get_all()
        today = utc_now().date()

        by_status = {status.value: 0 for status in OrderStatus}
        total_revenue = 0
        today_orders = 0
        today_revenue = 0

        for order in orders:
            by_status[order.status.value] += 1
            completed = order.status == OrderStatus.COMPLETED
            if completed:
                total_revenue += order.total
            if order.created_at.date() == today:
                today_orders += 1
                if completed:
                    today_revenue += order.total

        return OrderStats(
            total=len(orders),
            by_status=by_status,
            total_revenue=total_revenue,
            today_orders=today_orders,
            today_revenue=today_revenue,
        )
