"""
Unit Tests for Base Service.

Tests the BaseService helpers shared by every service.
"""

from unittest.mock import MagicMock

import pytest

from beautyslot.backend.core.exceptions import ValidationError
from beautyslot.backend.repositories.sync import get_sync_store, reset_sync_store
from beautyslot.backend.services.base import BaseService


class TestSyncStoreAccess:
    """Tests for the sync_store property."""

    def test_returns_current_store(self):
        assert BaseService().sync_store is get_sync_store()

    def test_sees_store_reset(self):
        service = BaseService()
        before = service.sync_store

        reset_sync_store()

        assert service.sync_store is not before


class TestValidateRequired:
    """Tests for _validate_required method."""

    @pytest.fixture
    def service(self):
        return BaseService()

    def test_passes_when_all_present(self, service):
        service._validate_required({"name": "Анна", "phone": "+7916"}, ["name", "phone"])

    @pytest.mark.parametrize("value", [None, "", "   ", 0])
    def test_empty_values_are_missing(self, service, value):
        with pytest.raises(ValidationError) as exc_info:
            service._validate_required({"staff_id": value}, ["staff_id"])

        assert exc_info.value.details == {"missing_fields": ["staff_id"]}

    def test_false_is_not_missing(self, service):
        service._validate_required({"flag": False}, ["flag"])

    def test_custom_message(self, service):
        with pytest.raises(ValidationError, match="Missing required fields"):
            service._validate_required({}, ["a", "b"], "Missing required fields")


class TestParseIntId:
    def test_numeric(self):
        assert BaseService()._parse_int_id("42") == 42

    def test_non_numeric(self):
        with pytest.raises(ValidationError, match="Invalid client ID"):
            BaseService()._parse_int_id("abc", "Invalid client ID")


class TestLogging:
    def test_log_operation_adds_service_name(self):
        service = BaseService()
        service._logger = MagicMock()

        service._log_operation("Broadcast sent", broadcast_id="b1")

        service._logger.info.assert_called_once_with(
            "Broadcast sent",
            extra={"service": "BaseService", "broadcast_id": "b1"},
        )

    def test_log_debug(self):
        service = BaseService()
        service._logger = MagicMock()

        service._log_debug("Filtering", count=3)

        service._logger.debug.assert_called_once_with(
            "Filtering",
            extra={"service": "BaseService", "count": 3},
        )
