"""
Unit Tests for the Realtime Sync Simulation.
"""

import json
import random

import pytest

from beautyslot.backend.services.realtime import (
    EVENT_TYPES,
    HEARTBEAT_FRAME,
    RealtimeSimulator,
    format_sse,
    get_realtime_simulator,
    reset_realtime_simulator,
)


def _payload(frame: str) -> dict:
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: "):])


@pytest.fixture
def simulator():
    return RealtimeSimulator(
        rng=random.Random(7),
        first_delay=(0, 0),
        interval=(0, 0),
        heartbeat_seconds=3600,
    )


class TestGenerateEvent:
    def test_payload_matches_type(self, simulator):
        for _ in range(50):
            event = simulator.generate_event()
            assert event["type"] in EVENT_TYPES
            assert event["id"].startswith("evt_")
            assert event["timestamp"].endswith("Z")
            data = event["data"]
            if event["type"].startswith("client_"):
                assert set(data) == {"client_id", "client_name"}
            elif event["type"].startswith("appointment_"):
                assert set(data) == {"appointment_id", "client_name", "service_name"}
            else:
                assert 500 <= data["amount"] < 5500

    def test_format_sse_keeps_cyrillic(self):
        frame = format_sse({"data": {"message": "Подключено"}})
        assert "Подключено" in frame


class TestStream:
    async def test_connection_event_first(self, simulator):
        stream = simulator.stream()
        try:
            first = _payload(await anext(stream))
        finally:
            await stream.aclose()

        assert first["type"] == "connection_status"
        assert first["status"] == "connected"

    async def test_events_update_stats(self, simulator):
        stream = simulator.stream()
        await anext(stream)
        events = [_payload(await anext(stream)) for _ in range(3)]

        stats = simulator.stats()
        assert stats.is_connected is True
        assert stats.active_connections == 1
        assert stats.events_today == 3
        assert stats.last_event_at == events[-1]["timestamp"]
        assert sum(stats.events_by_type.values()) == 3
        assert set(stats.events_by_type) == set(EVENT_TYPES)

        await stream.aclose()
        assert simulator.stats().active_connections == 0
        assert simulator.stats().is_connected is False

    async def test_heartbeat(self):
        simulator = RealtimeSimulator(first_delay=(3600, 3600), heartbeat_seconds=0.01)
        stream = simulator.stream()
        await anext(stream)

        assert await anext(stream) == HEARTBEAT_FRAME
        await stream.aclose()


class TestStats:
    def test_initial_stats(self, simulator):
        stats = simulator.stats()

        assert stats.events_today == 0
        assert stats.clients_synced_today == 0
        assert stats.last_event_at is None
        assert stats.uptime_seconds >= 0

    def test_grouped_counters(self, simulator):
        simulator.events_by_type.update(
            {"client_created": 2, "client_updated": 1, "appointment_created": 4, "payment_received": 1}
        )

        stats = simulator.stats()

        assert stats.clients_synced_today == 3
        assert stats.appointments_synced_today == 4
        assert stats.events_today == 8


class TestSingleton:
    def test_shared_until_reset(self):
        first = get_realtime_simulator()
        assert get_realtime_simulator() is first

        reset_realtime_simulator()

        assert get_realtime_simulator() is not first
