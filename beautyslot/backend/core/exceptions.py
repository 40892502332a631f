"""
Custom Exceptions.

Every error the API reports on purpose derives from ApplicationError.
The exception handlers turn ``code``, ``message`` and ``details`` into the
error envelope; the HTTP status is chosen by exception type.
"""

from typing import Any


class ApplicationError(Exception):
    """Base exception for all application errors."""

    code = "SYS_INTERNAL_ERROR"
    default_message = "Internal error"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Client, record, order, broadcast or template does not exist."""

    code = "RES_NOT_FOUND"
    default_message = "Resource not found"


class ValidationError(ApplicationError):
    """Input rejected by a handler after schema validation passed."""

    code = "VAL_VALIDATION_ERROR"
    default_message = "Validation failed"


class ConflictError(ApplicationError):
    code = "RES_CONFLICT"
    default_message = "Resource conflict"


class MethodNotAllowedError(ApplicationError):
    """Write attempted on data that YClients owns."""

    code = "RES_METHOD_NOT_ALLOWED"
    default_message = "Method not allowed"


class ExternalServiceError(ApplicationError):
    """YClients or Telegram answered with an error."""

    code = "SYS_EXTERNAL_SERVICE_ERROR"
    default_message = "External service error"


class ServiceUnavailableError(ApplicationError):
    """A required integration is not configured."""

    code = "SYS_NOT_CONFIGURED"
    default_message = "Service not configured"


class RateLimitError(ApplicationError):
    code = "RATE_LIMITED"
    default_message = "Rate limit exceeded"
