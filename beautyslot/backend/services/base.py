"""
Base Service.

Base class for all services providing common patterns for business logic.
Services read the in-memory stores, call integrations and implement
business rules. Stores are looked up on every call so that a store reset
is always visible.

Usage:
    from beautyslot.backend.services.base import BaseService

    class StaffService(BaseService):
        def toggle_active(self, staff_id: int, is_active: bool) -> dict:
            if self.sync_store.find_staff(staff_id) is None:
                raise NotFoundError("Сотрудник не найден")
            ...
"""

from typing import Any

from beautyslot.backend.core.exceptions import ValidationError
from beautyslot.backend.core.logging import get_logger
from beautyslot.backend.repositories.sync import SyncStore, get_sync_store


class BaseService:
    """
    Base class for all services.

    Provides:
    - Access to the sync store
    - Logging context
    - Common validation patterns
    """

    def __init__(self) -> None:
        self._logger = get_logger(self.__class__.__module__)

    @property
    def sync_store(self) -> SyncStore:
        """The current sync store."""
        return get_sync_store()

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
        message: str = "Required fields missing",
    ) -> None:
        """
        Validate that required fields are present and not empty.

        Args:
            fields: Dictionary of field names to values
            field_names: List of required field names
            message: Error message when anything is missing

        Raises:
            ValidationError: If any required field is missing or empty
        """
        missing = []
        for name in field_names:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()) or (
                type(value) is int and value == 0
            ):
                missing.append(name)

        if missing:
            raise ValidationError(message, details={"missing_fields": missing})

    def _parse_int_id(self, value: str, message: str = "Invalid ID") -> int:
        """
        Parse a path identifier that must be numeric.

        Raises:
            ValidationError: If the value is not an integer
        """
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(message) from None

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a service operation with context.

        Args:
            operation: Description of the operation
            **context: Additional context to include in log
        """
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """
        Log debug information.

        Args:
            message: Debug message
            **context: Additional context to include in log
        """
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
