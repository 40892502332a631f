"""
Notification Service.

Template management for client notifications and the reminder run that
the cron endpoint and the scheduler trigger every minute.

Reminder windows, all in salon time:

    booking_reminder_day    10:00-10:04, for tomorrow's appointments
    booking_reminder_hour   appointments today starting now + 1h +- 5 min
    post_visit              today's attended visits that started in the
                            clock hour two hours ago

Every send is de-duplicated through the sent log, so running the job
more often than once a minute is harmless.
"""

from datetime import datetime, timedelta
from typing import Literal

from beautyslot.backend.core.config import get_app_config
from beautyslot.backend.core.exceptions import NotFoundError, ValidationError
from beautyslot.backend.core.logging import log_with_source
from beautyslot.backend.core.utils import (
    format_day_month,
    local_now,
    parse_record_datetime,
    record_day,
    utc_now,
)
from beautyslot.backend.models.notification import NotificationTemplate, NotificationType
from beautyslot.backend.models.yclients import YClientsRecord
from beautyslot.backend.repositories.notification import (
    NotificationTemplateRepository,
    SentNotificationLog,
    get_sent_log,
    get_template_repository,
    substitute_variables,
)
from beautyslot.backend.repositories.telegram import get_telegram_store
from beautyslot.backend.schemas.notification import (
    NotificationSettingsResponse,
    NotificationTemplateUpdate,
    ReminderCounts,
    ReminderRunResult,
    SentNotificationStats,
)
from beautyslot.backend.services.base import BaseService

SendOutcome = Literal["sent", "skipped", "failed"]

DAY_REMINDER_HOUR = 10
DAY_REMINDER_MINUTES = 5
HOUR_REMINDER_TOLERANCE = timedelta(minutes=5)


class NotificationSettingsService(BaseService):
    """Lists and edits notification templates."""

    @property
    def templates(self) -> NotificationTemplateRepository:
        return get_template_repository()

    def get_settings(self) -> NotificationSettingsResponse:
        return NotificationSettingsResponse(
            items=self.templates.get_all(),
            stats=SentNotificationStats(**get_sent_log().stats()),
        )

    def update_template(self, data: NotificationTemplateUpdate) -> NotificationTemplate:
        """
        Change a template's message and/or active flag.

        Raises:
            ValidationError: Without an id or without any update
            NotFoundError: If no template has this id
        """
        if not data.id:
            raise ValidationError("Notification setting ID is required")

        updates = data.model_dump(exclude={"id"}, exclude_none=True)
        if not updates:
            raise ValidationError("No valid updates provided")

        if not self.templates.exists(data.id):
            raise NotFoundError("Notification setting not found")

        template = self.templates.update(data.id, **updates)
        template.updated_at = utc_now()
        self._log_operation("Notification template updated", template_id=data.id, fields=sorted(updates))
        return template


class ReminderService(BaseService):
    """Sends due reminders to linked clients."""

    def __init__(self, notifier=None) -> None:
        super().__init__()
        self._notifier = notifier

    @property
    def notifier(self):
        if self._notifier is None:
            from beautyslot.telegram.services import get_notification_service

            self._notifier = get_notification_service()
        return self._notifier

    @property
    def sent_log(self) -> SentNotificationLog:
        return get_sent_log()

    def _active_records(self) -> list[YClientsRecord]:
        return [
            r for r in self.sync_store.records
            if not r.deleted and r.client is not None and r.client.id
        ]

    @staticmethod
    def _starts_at(record: YClientsRecord) -> datetime | None:
        return parse_record_datetime(record.datetime or record.date)

    def _variables(self, record: YClientsRecord) -> dict[str, str | None]:
        from beautyslot.telegram.services.notifications import escape_html

        staff = self.sync_store.find_staff(record.staff_id) if record.staff_id else None
        starts_at = self._starts_at(record)
        visit_day = parse_record_datetime(record.date) or starts_at

        return {
            "client_name": escape_html(record.client.name or "Уважаемый клиент"),
            "client_phone": escape_html(record.client.phone),
            "service_name": escape_html(record.services[0].title if record.services else "услугу"),
            "staff_name": escape_html(staff.name if staff and staff.name else "мастера"),
            "visit_date": format_day_month(visit_day) if visit_day else "",
            "visit_time": starts_at.strftime("%H:%M") if starts_at and record.datetime else "",
            "salon_name": escape_html(get_app_config().application.salon_name),
        }

    async def send_reminder(
        self,
        record: YClientsRecord,
        type_: NotificationType,
        dedupe_key: str,
    ) -> SendOutcome:
        """
        Send one reminder for a record.

        Skipped when already sent, when the template is off, or when the
        client has no linked Telegram account.
        """
        try:
            if self.sent_log.was_sent(record.id, type_, dedupe_key):
                return "skipped"

            template = get_template_repository().get_active(type_)
            if template is None:
                return "skipped"

            if record.client is None or not record.client.phone:
                return "skipped"

            link = get_telegram_store().get_by_phone(record.client.phone)
            if link is None:
                return "skipped"

            text = substitute_variables(template.message, self._variables(record))
            result = await self.notifier.send(link.telegram_id, text)
        except Exception as e:
            log_with_source(
                self._logger,
                "tasks",
                "error",
                "Reminder send crashed",
                record_id=record.id,
                type=str(type_),
                error=str(e),
            )
            return "failed"

        if not result.success:
            return "failed"

        self.sent_log.mark_sent(record.id, type_, dedupe_key, link.telegram_id)
        log_with_source(
            self._logger,
            "tasks",
            "info",
            "Reminder sent",
            record_id=record.id,
            type=str(type_),
        )
        return "sent"

    async def _send_all(
        self,
        records: list[tuple[YClientsRecord, str]],
        type_: NotificationType,
        counts: ReminderCounts,
    ) -> None:
        for record, dedupe_key in records:
            outcome = await self.send_reminder(record, type_, dedupe_key)
            setattr(counts, outcome, getattr(counts, outcome) + 1)

    def due_day_reminders(self, now: datetime) -> list[tuple[YClientsRecord, str]]:
        if now.hour != DAY_REMINDER_HOUR or now.minute >= DAY_REMINDER_MINUTES:
            return []
        tomorrow = (now + timedelta(days=1)).date().isoformat()
        return [
            (r, record_day(r.date))
            for r in self._active_records()
            if record_day(r.date) == tomorrow and r.attendance != -1
        ]

    def due_hour_reminders(self, now: datetime) -> list[tuple[YClientsRecord, str]]:
        target = now + timedelta(hours=1)
        today = now.date().isoformat()
        due = []
        for record in self._active_records():
            if record_day(record.date) != today or record.attendance == -1:
                continue
            starts_at = self._starts_at(record)
            if starts_at is None:
                continue
            starts_at = datetime.combine(now.date(), starts_at.time())
            if abs(starts_at - target) <= HOUR_REMINDER_TOLERANCE:
                due.append((record, f"{today}:{starts_at:%H:%M:%S}"))
        return due

    def due_post_visit(self, now: datetime) -> list[tuple[YClientsRecord, str]]:
        two_hours_ago = now - timedelta(hours=2)
        day = two_hours_ago.date().isoformat()
        due = []
        for record in self._active_records():
            if record_day(record.date) != day or record.attendance != 1:
                continue
            starts_at = self._starts_at(record)
            if starts_at is not None and starts_at.hour == two_hours_ago.hour:
                due.append((record, f"{day}:post"))
        return due

    async def run(self, now: datetime | None = None) -> ReminderRunResult:
        """
        Send every reminder that is due at ``now`` (salon time).

        Returns:
            Per-kind counts, cleaned log entries and errors; ``ok`` is
            False when the bot is not configured or the run failed
        """
        from beautyslot.telegram.bot import is_bot_configured

        result = ReminderRunResult()

        if not is_bot_configured():
            result.ok = False
            result.errors.append("Telegram bot not configured")
            return result

        now = now or local_now()
        try:
            await self._send_all(
                self.due_day_reminders(now),
                NotificationType.BOOKING_REMINDER_DAY,
                result.results.reminder_day,
            )
            await self._send_all(
                self.due_hour_reminders(now),
                NotificationType.BOOKING_REMINDER_HOUR,
                result.results.reminder_hour,
            )
            await self._send_all(
                self.due_post_visit(now),
                NotificationType.POST_VISIT,
                result.results.post_visit,
            )
            result.cleaned = self.sent_log.cleanup()
        except Exception as e:
            log_with_source(self._logger, "tasks", "error", "Reminder run failed", error=str(e))
            result.ok = False
            result.errors.append(str(e))
            return result

        log_with_source(
            self._logger,
            "tasks",
            "info",
            "Reminder run completed",
            total_sent=result.total_sent,
            cleaned=result.cleaned,
        )
        return result
