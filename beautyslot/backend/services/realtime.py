"""
Realtime Sync Simulation.

Server-Sent Events stream that imitates YClients webhooks with random
client, appointment and payment events. The stream stops when the
client disconnects; Starlette cancels the generator and its sleeps.
"""

import asyncio
import json
import random
import time
import uuid
from collections import Counter
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from typing import Any

from beautyslot.backend.core.logging import get_logger
from beautyslot.backend.schemas.sync import RealtimeStats

logger = get_logger(__name__)

EVENT_TYPES = (
    "client_created",
    "client_updated",
    "appointment_created",
    "appointment_updated",
    "payment_received",
)

CLIENT_NAMES = (
    "Анна Иванова",
    "Мария Петрова",
    "Елена Сидорова",
    "Ольга Козлова",
    "Наталья Новикова",
    "Татьяна Морозова",
    "Светлана Волкова",
    "Ирина Лебедева",
)

SERVICE_NAMES = (
    "Маникюр",
    "Педикюр",
    "Стрижка",
    "Окрашивание",
    "Укладка",
    "Массаж лица",
    "Чистка лица",
    "Брови и ресницы",
)

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

HEARTBEAT_FRAME = ": heartbeat\n\n"


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_sse(event: dict[str, Any]) -> str:
    """Encode one event as an SSE ``data:`` frame."""
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


class RealtimeSimulator:
    """
    Random event source plus counters for the stats endpoint.

    Timing is configurable so tests can run the stream without waiting.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        first_delay: tuple[float, float] = (2.0, 5.0),
        interval: tuple[float, float] = (5.0, 15.0),
        heartbeat_seconds: float = 30.0,
    ) -> None:
        self._rng = rng or random.Random()
        self.first_delay = first_delay
        self.interval = interval
        self.heartbeat_seconds = heartbeat_seconds
        self.started_at = time.monotonic()
        self.active_connections = 0
        self.events_by_type: Counter[str] = Counter()
        self.last_event_at: str | None = None

    def generate_event(self) -> dict[str, Any]:
        """Build one random event with a payload matching its type."""
        rng = self._rng
        event_type = rng.choice(EVENT_TYPES)
        client_name = rng.choice(CLIENT_NAMES)

        if event_type in ("client_created", "client_updated"):
            data: dict[str, Any] = {
                "client_id": rng.randrange(10000),
                "client_name": client_name,
            }
        elif event_type in ("appointment_created", "appointment_updated"):
            data = {
                "appointment_id": rng.randrange(10000),
                "client_name": client_name,
                "service_name": rng.choice(SERVICE_NAMES),
            }
        else:
            data = {
                "client_name": client_name,
                "amount": rng.randrange(500, 5500),
            }

        return {
            "id": f"evt_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}",
            "type": event_type,
            "timestamp": _iso_now(),
            "data": data,
        }

    def connection_event(self) -> dict[str, Any]:
        return {
            "id": f"conn_{int(time.time() * 1000)}",
            "type": "connection_status",
            "status": "connected",
            "timestamp": _iso_now(),
            "data": {"message": "Подключено к YClients", "status": "connected"},
        }

    def _record(self, event: dict[str, Any]) -> None:
        self.events_by_type[event["type"]] += 1
        self.last_event_at = event["timestamp"]

    async def stream(self) -> AsyncIterator[str]:
        """
        Yield SSE frames until cancelled.

        Order: a ``connection_status`` event, then random events (first
        after ``first_delay``, then every ``interval``) interleaved with a
        heartbeat comment every ``heartbeat_seconds``.
        """
        loop = asyncio.get_running_loop()
        self.active_connections += 1
        logger.info("Realtime stream opened", extra={"active_connections": self.active_connections})
        try:
            yield format_sse(self.connection_event())

            next_event = loop.time() + self._rng.uniform(*self.first_delay)
            next_heartbeat = loop.time() + self.heartbeat_seconds
            while True:
                wait = min(next_event, next_heartbeat) - loop.time()
                if wait > 0:
                    await asyncio.sleep(wait)

                now = loop.time()
                if now >= next_event:
                    event = self.generate_event()
                    self._record(event)
                    yield format_sse(event)
                    next_event = now + self._rng.uniform(*self.interval)
                if now >= next_heartbeat:
                    yield HEARTBEAT_FRAME
                    next_heartbeat = now + self.heartbeat_seconds
        finally:
            self.active_connections -= 1
            logger.info("Realtime stream closed", extra={"active_connections": self.active_connections})

    def stats(self) -> RealtimeStats:
        events_today = sum(self.events_by_type.values())
        clients = self.events_by_type["client_created"] + self.events_by_type["client_updated"]
        appointments = (
            self.events_by_type["appointment_created"] + self.events_by_type["appointment_updated"]
        )
        return RealtimeStats(
            is_connected=self.active_connections > 0,
            active_connections=self.active_connections,
            uptime_seconds=int(time.monotonic() - self.started_at),
            events_today=events_today,
            clients_synced_today=clients,
            appointments_synced_today=appointments,
            last_event_at=self.last_event_at,
            events_by_type={t: self.events_by_type[t] for t in EVENT_TYPES},
        )


_simulator: RealtimeSimulator | None = None


def get_realtime_simulator() -> RealtimeSimulator:
    global _simulator
    if _simulator is None:
        _simulator = RealtimeSimulator()
    return _simulator


def reset_realtime_simulator() -> None:
    global _simulator
    _simulator = None
