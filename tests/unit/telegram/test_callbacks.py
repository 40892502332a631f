"""
Unit tests for Telegram callback data factories.

Tests callback data serialization and deserialization.
"""

import pytest


class TestActionCallback:
    """Tests for ActionCallback."""

    def test_pack_and_unpack(self):
        """Test that callback data can be packed and unpacked."""
        from beautyslot.telegram.callbacks.common import ActionCallback

        original = ActionCallback(action="upcoming")
        packed = original.pack()

        assert packed == "action:upcoming"
        assert ActionCallback.unpack(packed).action == "upcoming"

    def test_wrong_prefix_rejected(self):
        """Test that data of another factory is not accepted."""
        from beautyslot.telegram.callbacks.common import ActionCallback

        with pytest.raises(ValueError):
            ActionCallback.unpack("service:12")


class TestServiceCallback:
    """Tests for ServiceCallback."""

    def test_pack_and_unpack(self):
        """Test that the service id survives packing as an int."""
        from beautyslot.telegram.callbacks.common import ServiceCallback

        packed = ServiceCallback(service_id=12).pack()

        assert packed == "service:12"
        assert ServiceCallback.unpack(packed).service_id == 12


class TestStaffCallback:
    """Tests for StaffCallback."""

    def test_carries_staff_and_service(self):
        """Test that both ids are packed in order."""
        from beautyslot.telegram.callbacks.common import StaffCallback

        packed = StaffCallback(staff_id=3, service_id=12).pack()

        assert packed == "staff:3:12"
        unpacked = StaffCallback.unpack(packed)
        assert (unpacked.staff_id, unpacked.service_id) == (3, 12)

    def test_within_telegram_limit(self):
        """Test that packed data fits Telegram's 64 byte limit."""
        from beautyslot.telegram.callbacks.common import StaffCallback

        packed = StaffCallback(staff_id=2_000_000_000, service_id=2_000_000_000).pack()

        assert len(packed.encode()) <= 64
