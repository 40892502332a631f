"""
Notification Template Repository and Sent Log.

Eight default client-facing templates, editable at runtime, and a log of
reminders already delivered so the cron never sends one twice.
"""

from collections import Counter
from datetime import timedelta

from beautyslot.backend.core.utils import utc_now
from beautyslot.backend.models.notification import (
    NotificationTemplate,
    NotificationType,
    SentNotification,
)
from beautyslot.backend.repositories.base import InMemoryRepository

SENT_LOG_RETENTION = timedelta(days=7)

DEFAULT_TEMPLATES: tuple[dict, ...] = (
    {
        "id": "1",
        "type": NotificationType.AFTER_BOOKING,
        "name": "После записи",
        "description": "Отправляется сразу после создания записи",
        "category": "visits",
        "message": (
            "Здравствуйте, {client_name}!\n\n"
            "Вы записаны на {service_name} к мастеру {staff_name} на {visit_date} в {visit_time}.\n\n"
            "Ждём вас!"
        ),
        "is_active": True,
        "variables": ["client_name", "service_name", "staff_name", "visit_date", "visit_time"],
    },
    {
        "id": "2",
        "type": NotificationType.BOOKING_REMINDER_DAY,
        "name": "Напоминание за день",
        "description": "Отправляется в 10:00 за день до визита",
        "category": "visits",
        "message": "{client_name}, напоминаем о вашей записи завтра в {visit_time} на {service_name}.\n\nЖдём вас!",
        "is_active": True,
        "variables": ["client_name", "service_name", "visit_time", "staff_name"],
    },
    {
        "id": "3",
        "type": NotificationType.BOOKING_REMINDER_HOUR,
        "name": "Напоминание за час",
        "description": "Отправляется за 1 час до визита",
        "category": "visits",
        "message": "{client_name}, через час вас ждёт {service_name} у мастера {staff_name}!\n\nНе забудьте!",
        "is_active": True,
        "variables": ["client_name", "service_name", "staff_name", "visit_time"],
    },
    {
        "id": "4",
        "type": NotificationType.BOOKING_RESCHEDULED,
        "name": "Запись перенесена",
        "description": "При изменении даты/времени записи",
        "category": "visits",
        "message": (
            "{client_name}, ваша запись перенесена на {visit_date} в {visit_time}.\n\n"
            "Если у вас есть вопросы, свяжитесь с нами."
        ),
        "is_active": True,
        "variables": ["client_name", "visit_date", "visit_time"],
    },
    {
        "id": "5",
        "type": NotificationType.BOOKING_CANCELLED,
        "name": "Запись отменена",
        "description": "При отмене записи",
        "category": "visits",
        "message": "{client_name}, ваша запись на {visit_date} отменена.\n\nБудем рады видеть вас снова!",
        "is_active": True,
        "variables": ["client_name", "visit_date"],
    },
    {
        "id": "6",
        "type": NotificationType.POST_VISIT,
        "name": "После посещения",
        "description": "Отправляется через 2 часа после визита",
        "category": "visits",
        "message": (
            "{client_name}, спасибо за визит!\n\n"
            "Надеемся, вам всё понравилось. Будем рады видеть вас снова!"
        ),
        "is_active": False,
        "variables": ["client_name", "service_name", "staff_name"],
    },
    {
        "id": "7",
        "type": NotificationType.BIRTHDAY,
        "name": "День рождения",
        "description": "Поздравление с днём рождения",
        "category": "marketing",
        "message": (
            "{client_name}, поздравляем с днём рождения!\n\n"
            "Дарим вам скидку 15% на любую услугу в течение недели!"
        ),
        "is_active": True,
        "variables": ["client_name"],
    },
    {
        "id": "8",
        "type": NotificationType.WELCOME,
        "name": "Приветствие",
        "description": "При первом подключении к боту",
        "category": "marketing",
        "message": (
            "Добро пожаловать, {client_name}!\n\n"
            "Мы рады, что вы с нами. Через этот бот вы сможете:\n\n"
            "📝 Записаться на услугу\n"
            "📋 Посмотреть свои записи\n"
            "📖 Просмотреть историю визитов"
        ),
        "is_active": True,
        "variables": ["client_name"],
    },
)


def substitute_variables(template: str, variables: dict[str, str | None]) -> str:
    """
    Replace ``{name}`` placeholders with values.

    Placeholders without a value (missing or None) are left as they are.
    """
    result = template
    for key, value in variables.items():
        if value is not None:
            result = result.replace(f"{{{key}}}", str(value))
    return result


class NotificationTemplateRepository(InMemoryRepository[NotificationTemplate]):
    """Repository for notification templates."""

    model = NotificationTemplate
    not_found_message = "Шаблон не найден"

    def __init__(self) -> None:
        super().__init__()
        for data in DEFAULT_TEMPLATES:
            self.add(NotificationTemplate(**data))

    def get_by_type(self, type_: NotificationType) -> NotificationTemplate | None:
        return next((t for t in self._items if t.type == type_), None)

    def get_active(self, type_: NotificationType) -> NotificationTemplate | None:
        """Template of the given type, only when it is switched on."""
        template = self.get_by_type(type_)
        if template is None or not template.is_active:
            return None
        return template

    def list_active(self) -> list[NotificationTemplate]:
        return [t for t in self._items if t.is_active]


class SentNotificationLog:
    """Log of delivered reminders keyed ``record_id:type:dedupe_key``."""

    def __init__(self) -> None:
        self._entries: dict[str, SentNotification] = {}

    def mark_sent(
        self,
        record_id: int,
        type_: NotificationType,
        dedupe_key: str,
        telegram_id: int,
    ) -> SentNotification:
        entry = SentNotification(
            record_id=record_id,
            type=type_,
            dedupe_key=dedupe_key,
            telegram_id=telegram_id,
        )
        self._entries[entry.key] = entry
        return entry

    def was_sent(self, record_id: int, type_: NotificationType, dedupe_key: str) -> bool:
        return f"{record_id}:{type_}:{dedupe_key}" in self._entries

    def cleanup(self) -> int:
        """Drop entries older than a week. Returns how many were removed."""
        cutoff = utc_now() - SENT_LOG_RETENTION
        stale = [key for key, entry in self._entries.items() if entry.sent_at < cutoff]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def stats(self) -> dict:
        by_type = Counter(str(entry.type) for entry in self._entries.values())
        return {"total": len(self._entries), "by_type": dict(by_type)}


_templates: NotificationTemplateRepository | None = None
_sent_log: SentNotificationLog | None = None


def get_template_repository() -> NotificationTemplateRepository:
    global _templates
    if _templates is None:
        _templates = NotificationTemplateRepository()
    return _templates


def get_sent_log() -> SentNotificationLog:
    global _sent_log
    if _sent_log is None:
        _sent_log = SentNotificationLog()
    return _sent_log


def reset_notification_store() -> None:
    """Restore default templates and empty the sent log."""
    global _templates, _sent_log
    _templates = NotificationTemplateRepository()
    _sent_log = SentNotificationLog()
