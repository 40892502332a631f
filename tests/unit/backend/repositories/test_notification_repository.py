"""
Unit Tests for Notification Templates and the Sent Log.
"""

from datetime import timedelta

from beautyslot.backend.core.utils import utc_now
from beautyslot.backend.models.notification import NotificationType
from beautyslot.backend.repositories.notification import (
    NotificationTemplateRepository,
    SentNotificationLog,
    substitute_variables,
)


class TestSubstitution:
    def test_replaces_known_values(self):
        text = substitute_variables("{client_name}, ждём вас в {visit_time}", {
            "client_name": "Анна",
            "visit_time": "15:00",
        })
        assert text == "Анна, ждём вас в 15:00"

    def test_missing_values_stay(self):
        text = substitute_variables("{client_name} у {staff_name}", {"client_name": "Анна", "staff_name": None})
        assert text == "Анна у {staff_name}"

    def test_repeated_placeholder(self):
        assert substitute_variables("{a}-{a}", {"a": 1}) == "1-1"


class TestTemplates:
    def test_eight_defaults(self):
        repo = NotificationTemplateRepository()

        templates = repo.get_all()

        assert len(templates) == 8
        assert {t.type for t in templates} == set(NotificationType)

    def test_post_visit_off_by_default(self):
        repo = NotificationTemplateRepository()

        assert repo.get_by_type(NotificationType.POST_VISIT).is_active is False
        assert repo.get_active(NotificationType.POST_VISIT) is None
        assert len(repo.list_active()) == 7

    def test_instances_are_independent(self):
        first = NotificationTemplateRepository()
        first.update("2", message="changed")

        assert NotificationTemplateRepository().get_by_id("2").message != "changed"


class TestSentLog:
    def test_dedupe_key(self):
        log = SentNotificationLog()
        log.mark_sent(1, NotificationType.BOOKING_REMINDER_DAY, "2026-03-06", 111)

        assert log.was_sent(1, NotificationType.BOOKING_REMINDER_DAY, "2026-03-06")
        assert not log.was_sent(1, NotificationType.BOOKING_REMINDER_DAY, "2026-03-07")
        assert not log.was_sent(1, NotificationType.BOOKING_REMINDER_HOUR, "2026-03-06")

    def test_cleanup_drops_week_old_entries(self):
        log = SentNotificationLog()
        old = log.mark_sent(1, NotificationType.BOOKING_REMINDER_DAY, "2026-02-01", 111)
        old.sent_at = utc_now() - timedelta(days=8)
        log.mark_sent(2, NotificationType.BOOKING_REMINDER_DAY, "2026-03-06", 111)

        assert log.cleanup() == 1
        assert log.stats() == {"total": 1, "by_type": {"booking_reminder_day": 1}}
