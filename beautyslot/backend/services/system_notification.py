"""
System Notification Service.

Builds the admin notification feed from the synced data: today's
records, fresh bookings, cancellations, no-shows, fading and lost
clients, new clients, low occupancy ahead, sync freshness and the top
VIP client. The feed is regenerated on every request, newest first.
"""

from datetime import datetime, time, timedelta

from beautyslot.backend.core.utils import local_now, parse_record_datetime, record_day, round_half_up, utc_now
from beautyslot.backend.models.yclients import YClientsRecord
from beautyslot.backend.schemas.system_notification import (
    NotificationAction,
    NotificationActor,
    NotificationMeta,
    NotificationTarget,
    SystemNotification,
)
from beautyslot.backend.services.base import BaseService
from beautyslot.backend.services.dashboard import (
    SLOTS_PER_STAFF_DAY,
    WEEKDAYS_SHORT,
    days_between,
    working_staff,
)
from beautyslot.backend.services.order import format_rub

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"
VIP_MIN_SPENT = 50000
VIP_MIN_VISITS = 5


def pluralize(count: int, one: str, few: str, many: str) -> str:
    """Russian plural form: 1 запись, 2 записи, 5 записей."""
    if 11 <= count % 100 <= 14:
        return many
    if count % 10 == 1:
        return one
    if 2 <= count % 10 <= 4:
        return few
    return many


def _actor(name: str) -> NotificationActor:
    return NotificationActor(name=name, avatar=AVATAR_URL.format(seed="".join(name.split())))


def _open(url: str, label: str = "Посмотреть", primary: bool = True) -> NotificationAction:
    return NotificationAction(label=label, url=url, type="primary" if primary else None)


class SystemNotificationService(BaseService):
    """Generates the admin notification feed."""

    def generate(self) -> list[SystemNotification]:
        now = local_now()
        feed: list[SystemNotification] = []
        for section in (
            self._today_records,
            self._new_bookings,
            self._cancellations,
            self._no_shows,
            self._fading_clients,
            self._new_clients,
            self._low_occupancy,
            self._sync_state,
            self._vip_client,
        ):
            feed.extend(section(now))

        feed.sort(key=lambda n: parse_record_datetime(n.timestamp) or now, reverse=True)
        self._log_debug("System notifications generated", count=len(feed))
        return feed

    def _live(self) -> list[YClientsRecord]:
        return [r for r in self.sync_store.records if not r.deleted]

    def _today_records(self, now: datetime) -> list[SystemNotification]:
        today = now.date().isoformat()
        records = [r for r in self._live() if record_day(r.date) == today]
        if not records:
            return []
        confirmed = sum(1 for r in records if r.confirmed == 1)
        pending = sum(1 for r in records if r.attendance == 0)
        message = f"{len(records)} {pluralize(len(records), 'запись', 'записи', 'записей')} на сегодня"
        if confirmed:
            message += f", {confirmed} подтверждено"
        if pending:
            message += f", {pending} ожидает"
        return [
            SystemNotification(
                id=f"today-records-{today}",
                type="reminder",
                title="Записи на сегодня",
                message=message,
                timestamp=datetime.combine(now.date(), time(8)).isoformat(),
                metadata=NotificationMeta(workspace="Расписание", page_icon="📅"),
                action=_open("/apps/appointments", "Открыть расписание"),
            )
        ]

    def _new_bookings(self, now: datetime) -> list[SystemNotification]:
        fresh = []
        for r in self._live():
            created = parse_record_datetime(r.create_date)
            if created is not None and now - created < timedelta(hours=24):
                fresh.append((created, r))
        fresh.sort(key=lambda item: item[0], reverse=True)

        feed = []
        for created, record in fresh[:5]:
            client_name = (record.client.name if record.client else None) or "Клиент"
            service = record.service_titles[0] if record.service_titles else "услугу"
            staff = self.sync_store.find_staff(record.staff_id)
            feed.append(
                SystemNotification(
                    id=f"new-booking-{record.id}",
                    type="mention",
                    title="Новая запись",
                    message=f"{client_name} записался на {service} к {staff.name if staff else 'мастеру'}",
                    timestamp=created.isoformat(),
                    actor=_actor(client_name),
                    target=NotificationTarget(type="page", title=service, url="/apps/appointments"),
                    metadata=NotificationMeta(workspace="Записи", page_icon="💅"),
                    action=_open("/apps/appointments"),
                )
            )
        return feed

    def _cancellations(self, now: datetime) -> list[SystemNotification]:
        today = now.date().isoformat()
        recent = [
            r for r in self.sync_store.records
            if r.deleted and (day := parse_record_datetime(r.date)) is not None and days_between(day, now) <= 3
        ]
        feed = []
        today_count = sum(1 for r in recent if record_day(r.date) == today)
        if today_count:
            feed.append(
                SystemNotification(
                    id=f"cancellations-today-{today}",
                    type="mention",
                    title="Отмены сегодня",
                    message=(
                        f"{today_count} "
                        f"{pluralize(today_count, 'запись отменена', 'записи отменены', 'записей отменено')}"
                        " на сегодня"
                    ),
                    timestamp=now.isoformat(),
                    metadata=NotificationMeta(workspace="Записи", page_icon="❌"),
                    action=_open("/apps/appointments?status=CANCELLED", primary=False),
                )
            )
        if len(recent) >= 5:
            feed.append(
                SystemNotification(
                    id=f"cancellation-spike-{today}",
                    type="assignment",
                    title="Всплеск отмен",
                    message=f"{len(recent)} отмен за последние 3 дня. Рекомендуем проверить причины.",
                    timestamp=now.isoformat(),
                    metadata=NotificationMeta(workspace="Аналитика", page_icon="⚠️"),
                    action=_open("/dashboard/analytics", "Анализировать"),
                )
            )
        return feed

    def _no_shows(self, now: datetime) -> list[SystemNotification]:
        missed = []
        for r in self.sync_store.records:
            day = parse_record_datetime(r.date)
            if r.attendance == -1 and day is not None and days_between(day, now) <= 7:
                missed.append((day, r))
        missed.sort(key=lambda item: item[0], reverse=True)

        feed = []
        for day, record in missed[:3]:
            client_name = (record.client.name if record.client else None) or "Клиент"
            feed.append(
                SystemNotification(
                    id=f"no-show-{record.id}",
                    type="assignment",
                    title="Клиент не пришёл",
                    message=f"{client_name} не явился на запись {record.date}",
                    timestamp=day.isoformat(),
                    actor=_actor(client_name),
                    target=NotificationTarget(type="task", title="Пропущенная запись", url="/apps/customers"),
                    metadata=NotificationMeta(workspace="Записи", page_icon="🚫"),
                    action=_open("/apps/customers", "Связаться", primary=False),
                )
            )
        return feed

    def _fading_clients(self, now: datetime) -> list[SystemNotification]:
        fading = lost = 0
        for client in self.sync_store.clients:
            last_visit = parse_record_datetime(client.last_visit_date)
            if last_visit is None or client.visit_count < 2:
                continue
            days = days_between(last_visit, now)
            if 30 <= days < 60:
                fading += 1
            elif days >= 60:
                lost += 1

        today = now.date().isoformat()
        feed = []
        for count, key, title, tail, risk, icon, label in (
            (fading, "churning-clients", "Клиенты затухают", "30+ дней. Пора напомнить о себе!",
             "MEDIUM", "⏰", "Посмотреть"),
            (lost, "lost-clients", "Потерянные клиенты", "60+ дней. Требуется реактивация!",
             "HIGH", "😢", "Реактивировать"),
        ):
            if not count:
                continue
            url = f"/apps/customers?risk_level={risk}"
            feed.append(
                SystemNotification(
                    id=f"{key}-{today}",
                    type="comment",
                    title=title,
                    message=f"{count} {pluralize(count, 'клиент', 'клиента', 'клиентов')} не были {tail}",
                    timestamp=now.isoformat(),
                    target=NotificationTarget(type="page", title=title, url=url),
                    metadata=NotificationMeta(workspace="Клиенты", page_icon=icon),
                    action=_open(url, label),
                )
            )
        return feed

    def _new_clients(self, now: datetime) -> list[SystemNotification]:
        newcomers = []
        for client in self.sync_store.clients:
            first_visit = parse_record_datetime(client.first_visit_date)
            if first_visit is not None and days_between(first_visit, now) <= 7:
                newcomers.append((first_visit, client))
        newcomers.sort(key=lambda item: item[0], reverse=True)

        return [
            SystemNotification(
                id=f"new-client-{client.id}",
                type="invite",
                title="Новый клиент",
                message=f"Зарегистрирован новый клиент: {client.name}",
                timestamp=first_visit.isoformat(),
                actor=_actor(client.name or "Клиент"),
                metadata=NotificationMeta(workspace="Клиенты", page_icon="👤"),
                action=_open("/apps/customers", "Открыть профиль"),
            )
            for first_visit, client in newcomers[:3]
        ]

    def _low_occupancy(self, now: datetime) -> list[SystemNotification]:
        slots = (len(working_staff(self.sync_store.staff)) or 1) * SLOTS_PER_STAFF_DAY
        live = self._live()
        low_days = []
        for offset in range(1, 8):
            day = now.date() + timedelta(days=offset)
            booked = sum(1 for r in live if record_day(r.date) == day.isoformat())
            occupancy = round_half_up(booked / slots * 100)
            if 0 < occupancy < 50:
                low_days.append(f"{WEEKDAYS_SHORT[day.weekday()]} ({occupancy}%)")
        if not low_days:
            return []
        return [
            SystemNotification(
                id=f"low-occupancy-{now.date().isoformat()}",
                type="assignment",
                title="Низкая загрузка",
                message=", ".join(low_days) + ": загрузка менее 50%. Рекомендуем запустить акцию.",
                timestamp=now.isoformat(),
                metadata=NotificationMeta(workspace="Аналитика", page_icon="📊"),
                action=_open("/dashboard", "Открыть дашборд"),
            )
        ]

    def _sync_state(self, now: datetime) -> list[SystemNotification]:
        store = self.sync_store
        info = store.get_synced_data_info()
        today = now.date().isoformat()
        if info.last_sync_at is None:
            if store.records or store.clients:
                return []
            return [
                SystemNotification(
                    id=f"no-data-{today}",
                    type="system",
                    title="Нет данных",
                    message="Данные ещё не синхронизированы. Запустите синхронизацию с YClients.",
                    timestamp=now.isoformat(),
                    metadata=NotificationMeta(workspace="Система", page_icon="📭"),
                    action=_open("/apps/sync", "Настроить синхронизацию"),
                )
            ]

        # last_sync_at is UTC; the feed shows salon time
        age = utc_now() - info.last_sync_at
        synced_at = now - age
        hours = age / timedelta(hours=1)
        if hours <= 1:
            return [
                SystemNotification(
                    id=f"sync-completed-{info.last_sync_at.isoformat()}",
                    type="update",
                    title="Синхронизация завершена",
                    message=(
                        f"Синхронизировано: {info.clients} клиентов, {info.records} записей, "
                        f"{info.staff} мастеров"
                    ),
                    timestamp=synced_at.isoformat(),
                    metadata=NotificationMeta(workspace="Система", page_icon="🔄"),
                    action=_open("/apps/sync", "Подробнее", primary=False),
                )
            ]
        if hours > 24:
            return [
                SystemNotification(
                    id=f"sync-needed-{today}",
                    type="system",
                    title="Требуется синхронизация",
                    message=f"Данные не обновлялись более {int(hours)} часов. Рекомендуем синхронизировать.",
                    timestamp=now.isoformat(),
                    metadata=NotificationMeta(workspace="Система", page_icon="⚠️"),
                    action=_open("/apps/sync", "Синхронизировать"),
                )
            ]
        return []

    def _vip_client(self, now: datetime) -> list[SystemNotification]:
        vips = [
            c for c in self.sync_store.clients
            if c.spent > VIP_MIN_SPENT and c.visit_count >= VIP_MIN_VISITS
        ]
        if not vips:
            return []
        top = max(vips, key=lambda c: c.spent)
        last_visit = parse_record_datetime(top.last_visit_date)
        return [
            SystemNotification(
                id=f"vip-client-{top.id}",
                type="share",
                title="VIP клиент",
                message=f"{top.name}: {top.visit_count} визитов, потрачено {format_rub(top.spent)}",
                timestamp=(last_visit or now).isoformat(),
                read=True,
                actor=_actor(top.name or "Клиент"),
                metadata=NotificationMeta(workspace="Клиенты", page_icon="💎"),
                action=_open("/apps/customers", "Профиль", primary=False),
            )
        ]
