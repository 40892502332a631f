"""
Broadcast Service.

Creates broadcasts for linked Telegram clients and sends them through the
notification service. Audience resolution:

    ALL       every linked Telegram account
    CUSTOM    the given client ids whose phone is linked
    SEGMENT   the client ids matched when the broadcast was created,
              every linked account when none were stored
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from beautyslot.backend.core.exceptions import ServiceUnavailableError, ValidationError
from beautyslot.backend.core.pagination import SkipLimit
from beautyslot.backend.core.utils import (
    local_now,
    normalize_phone,
    parse_record_datetime,
    round_half_up,
    utc_now,
)
from beautyslot.backend.models.broadcast import Broadcast, BroadcastStatus, RecipientType
from beautyslot.backend.repositories.broadcast import BroadcastRepository, get_broadcast_repository
from beautyslot.backend.repositories.telegram import TelegramLinkStore, get_telegram_store
from beautyslot.backend.schemas.base import ListPage
from beautyslot.backend.schemas.broadcast import (
    BroadcastCreate,
    BroadcastSendResult,
    BroadcastStats,
    BroadcastUpdate,
    DeliveryError,
    SegmentBroadcastCreate,
    SegmentBroadcastResponse,
)
from beautyslot.backend.services.base import BaseService


@dataclass
class ClientActivity:
    """Visit count and last visit day of a client, from synced records."""

    visits_count: int = 0
    last_visit_date: str | None = None

    def days_since_last_visit(self, now: datetime) -> int | None:
        last = parse_record_datetime(self.last_visit_date)
        if last is None:
            return None
        return (now - last).days


@dataclass(frozen=True)
class Segment:
    id: str
    name: str
    matches: Callable[[ClientActivity, datetime], bool]


def _days_between(low: int, high: int | None = None) -> Callable[[ClientActivity, datetime], bool]:
    def matches(activity: ClientActivity, now: datetime) -> bool:
        days = activity.days_since_last_visit(now)
        if days is None:
            return False
        return days >= low and (high is None or days < high)

    return matches


SEGMENTS: dict[str, Segment] = {
    segment.id: segment
    for segment in (
        Segment("recoverable_7d", "Можно вернуть (7+ дней)", _days_between(7, 30)),
        Segment("at_risk_30d", "В зоне риска (30+ дней)", _days_between(30)),
        Segment("loyal", "Лояльные (5+ визитов)", lambda a, _: a.visits_count >= 5),
        Segment("new_clients", "Новые клиенты (1 визит)", lambda a, _: a.visits_count == 1),
        Segment("all_with_telegram", "Все с Telegram", lambda a, _: True),
    )
}


class BroadcastService(BaseService):
    """Broadcast CRUD, audience resolution and sending."""

    def __init__(self, notifier=None) -> None:
        super().__init__()
        self._notifier = notifier

    @property
    def repository(self) -> BroadcastRepository:
        return get_broadcast_repository()

    @property
    def links(self) -> TelegramLinkStore:
        return get_telegram_store()

    @property
    def notifier(self):
        if self._notifier is None:
            from beautyslot.telegram.services import get_notification_service

            self._notifier = get_notification_service()
        return self._notifier

    def _ensure_bot_configured(self) -> None:
        from beautyslot.telegram.bot import is_bot_configured

        if not is_bot_configured():
            raise ServiceUnavailableError(
                "Telegram bot is not configured. Set TELEGRAM_BOT_TOKEN in config/.env"
            )

    def _linked_chat_id(self, client_id: int) -> int | None:
        client = self.sync_store.find_client(client_id)
        if client is None:
            return None
        link = self.links.get_by_phone(normalize_phone(client.phone))
        return link.telegram_id if link else None

    def _chat_ids_for_clients(self, client_ids: list[int]) -> list[int]:
        chat_ids = []
        for client_id in client_ids:
            chat_id = self._linked_chat_id(client_id)
            if chat_id is not None:
                chat_ids.append(chat_id)
        return chat_ids

    def resolve_chat_ids(self, broadcast: Broadcast) -> list[int]:
        """Telegram chat ids a broadcast goes to."""
        if broadcast.recipient_type == RecipientType.CUSTOM:
            return self._chat_ids_for_clients(broadcast.client_ids)
        if broadcast.recipient_type == RecipientType.SEGMENT and broadcast.client_ids:
            return self._chat_ids_for_clients(broadcast.client_ids)
        return [link.telegram_id for link in self.links.all()]

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def list_broadcasts(
        self,
        page: SkipLimit,
        status: BroadcastStatus | None = None,
    ) -> ListPage[Broadcast]:
        items = self.repository.list_by_status(status)
        return ListPage(
            items=page.apply(items),
            total=len(items),
            skip=page.skip,
            limit=page.limit,
        )

    def get_broadcast(self, broadcast_id: int) -> Broadcast:
        return self.repository.get_by_id(broadcast_id)

    def create_broadcast(self, data: BroadcastCreate) -> Broadcast:
        """
        Create a DRAFT broadcast and count its current recipients.

        Raises:
            ValidationError: If title or message is missing
        """
        self._validate_required(
            {"title": data.title, "message": data.message},
            ["title", "message"],
            message="Title and message are required",
        )

        if data.recipient_type == RecipientType.CUSTOM:
            recipients = len(self._chat_ids_for_clients(data.client_ids))
        else:
            recipients = self.links.count()

        broadcast = self.repository.create(
            title=data.title,
            message=data.message,
            recipient_type=data.recipient_type,
            segment_id=data.segment_id,
            client_ids=data.client_ids,
            recipients_count=recipients,
            scheduled_at=data.scheduled_at,
        )
        self._log_operation(
            "Broadcast created",
            broadcast_id=broadcast.id,
            recipient_type=str(broadcast.recipient_type),
            recipients=recipients,
        )
        return broadcast

    def update_broadcast(self, broadcast_id: int, data: BroadcastUpdate) -> Broadcast:
        """
        Update a broadcast that has not been sent.

        Raises:
            NotFoundError: If the broadcast does not exist
            ValidationError: If it was already sent
        """
        broadcast = self.repository.get_by_id(broadcast_id)
        if broadcast.status == BroadcastStatus.SENT:
            raise ValidationError("Cannot edit sent broadcast")

        updates = {k: v for k, v in data.model_dump(exclude_none=True).items() if v != ""}
        return self.repository.update(broadcast_id, **updates)

    def delete_broadcast(self, broadcast_id: int) -> None:
        """
        Delete a broadcast unless it is being sent.

        Raises:
            NotFoundError: If the broadcast does not exist
            ValidationError: If it is SCHEDULED
        """
        broadcast = self.repository.get_by_id(broadcast_id)
        if broadcast.status == BroadcastStatus.SCHEDULED:
            raise ValidationError("Cannot delete scheduled broadcast. Cancel it first.")
        self.repository.delete(broadcast_id)
        self._log_operation("Broadcast deleted", broadcast_id=broadcast_id)

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def _deliver(self, broadcast: Broadcast, chat_ids: list[int]) -> BroadcastSendResult:
        from beautyslot.telegram.keyboards import get_book_button_keyboard

        self.repository.update(broadcast.id, status=BroadcastStatus.SCHEDULED)

        try:
            result = await self.notifier.broadcast(
                chat_ids,
                broadcast.message,
                reply_markup=get_book_button_keyboard(),
            )
        except Exception:
            self.repository.update(broadcast.id, status=BroadcastStatus.FAILED)
            raise

        final_status = BroadcastStatus.FAILED if result.failed == len(chat_ids) else BroadcastStatus.SENT
        self.repository.update(
            broadcast.id,
            status=final_status,
            sent_count=result.sent,
            failed_count=result.failed,
            sent_at=utc_now(),
        )
        self._log_operation(
            "Broadcast sent",
            broadcast_id=broadcast.id,
            sent=result.sent,
            failed=result.failed,
        )
        return BroadcastSendResult(
            broadcast_id=broadcast.id,
            total=len(chat_ids),
            sent=result.sent,
            failed=result.failed,
            errors=[DeliveryError(**e) for e in result.errors],
        )

    async def send_broadcast(self, broadcast_id: int) -> BroadcastSendResult:
        """
        Send a DRAFT broadcast to its audience.

        Raises:
            NotFoundError: If the broadcast does not exist
            ValidationError: If it is not a DRAFT or has no linked recipients
            ServiceUnavailableError: If the Telegram bot is not configured
        """
        broadcast = self.repository.get_by_id(broadcast_id)
        if broadcast.status != BroadcastStatus.DRAFT:
            raise ValidationError(f"Cannot send broadcast with status {broadcast.status}")

        self._ensure_bot_configured()

        chat_ids = self.resolve_chat_ids(broadcast)
        self.repository.update(broadcast_id, recipients_count=len(chat_ids))

        if not chat_ids:
            self.repository.update(broadcast_id, status=BroadcastStatus.FAILED, sent_at=utc_now())
            raise ValidationError("No recipients found with linked Telegram accounts")

        return await self._deliver(broadcast, chat_ids)

    def _client_activity(self) -> dict[int, ClientActivity]:
        activity: dict[int, ClientActivity] = {}
        for record in self.sync_store.records:
            if record.deleted or record.attendance == -1 or record.client is None:
                continue
            entry = activity.setdefault(record.client.id, ClientActivity())
            entry.visits_count += 1
            if entry.last_visit_date is None or record.date > entry.last_visit_date:
                entry.last_visit_date = record.date
        return activity

    def segment_client_ids(self, segment: Segment, now: datetime | None = None) -> list[int]:
        """Linked clients that fall into a segment."""
        now = now or local_now()
        activity = self._client_activity()
        client_ids = []
        for client in self.sync_store.clients:
            if not self.links.is_linked(normalize_phone(client.phone)):
                continue
            if segment.matches(activity.get(client.id, ClientActivity()), now):
                client_ids.append(client.id)
        return client_ids

    async def create_from_segment(self, data: SegmentBroadcastCreate) -> SegmentBroadcastResponse:
        """
        Create a SEGMENT broadcast and optionally send it at once.

        Raises:
            ValidationError: On missing fields or an unknown segment
            ServiceUnavailableError: If the Telegram bot is not configured
        """
        self._validate_required(
            {"segment_id": data.segment_id, "title": data.title, "message": data.message},
            ["segment_id", "title", "message"],
            message="segment_id, title and message are required",
        )

        segment = SEGMENTS.get(data.segment_id)
        if segment is None:
            raise ValidationError(f"Unknown segment: {data.segment_id}")

        self._ensure_bot_configured()

        client_ids = self.segment_client_ids(segment)
        broadcast = self.repository.create(
            title=data.title,
            message=data.message,
            recipient_type=RecipientType.SEGMENT,
            segment_id=segment.id,
            client_ids=client_ids,
            recipients_count=len(client_ids),
        )

        if not client_ids:
            self.repository.update(broadcast.id, status=BroadcastStatus.FAILED, sent_at=utc_now())
            return SegmentBroadcastResponse(
                broadcast=broadcast,
                segment=segment.name,
                message="No recipients found in this segment with linked Telegram",
            )

        if not data.send_immediately:
            return SegmentBroadcastResponse(
                broadcast=broadcast,
                segment=segment.name,
                recipients=len(client_ids),
                message="Broadcast created. Use /send endpoint to send it.",
            )

        result = await self._deliver(broadcast, self._chat_ids_for_clients(client_ids))
        return SegmentBroadcastResponse(
            broadcast=self.repository.get_by_id(broadcast.id),
            segment=segment.name,
            recipients=len(client_ids),
            sent=result.sent,
            failed=result.failed,
            total=result.total,
        )

    def get_stats(self) -> BroadcastStats:
        broadcasts = self.repository.get_all()
        month_start = utc_now().replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        total_recipients = sum(b.recipients_count for b in broadcasts)
        total_sent = sum(b.sent_count for b in broadcasts)
        delivery_rate = round_half_up(total_sent / total_recipients * 100) if total_recipients else 0

        return BroadcastStats(
            total=len(broadcasts),
            this_month=self.repository.created_since(month_start),
            sent=sum(1 for b in broadcasts if b.status == BroadcastStatus.SENT),
            delivery_rate=delivery_rate,
            total_recipients=total_recipients,
            total_sent=total_sent,
            total_failed=sum(b.failed_count for b in broadcasts),
            linked_clients=self.links.count(),
        )
