"""
Exception Handlers.

Turn everything an endpoint can raise into the error envelope:

    {"success": false, "data": null,
     "error": {"code": ..., "message": ..., "details": ...},
     "metadata": {"request_id": ..., "timestamp": ...}}

ApplicationError subclasses keep their code and details; request
validation failures become 422 VAL_REQUEST_INVALID; anything else is a
500 without internal text.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from beautyslot.backend.core.config import get_app_config
from beautyslot.backend.core.exceptions import (
    ApplicationError,
    ConflictError,
    ExternalServiceError,
    MethodNotAllowedError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
    ValidationError,
)
from beautyslot.backend.core.logging import get_logger
from beautyslot.backend.schemas.base import ErrorDetail, ErrorResponse, ResponseMetadata

logger = get_logger(__name__)

EXCEPTION_STATUS_MAP: dict[type[ApplicationError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    MethodNotAllowedError: 405,
    ConflictError: 409,
    RateLimitError: 429,
    ExternalServiceError: 502,
    ServiceUnavailableError: 503,
}


def _get_request_id(request: Request) -> str | None:
    """Request ID set by the middleware, else the incoming header."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("x-request-id")


def _status_for(exc: ApplicationError) -> int:
    # Most specific mapped ancestor wins: YClientsError -> ExternalServiceError -> 502
    for exc_type in type(exc).__mro__:
        status_code = EXCEPTION_STATUS_MAP.get(exc_type)
        if status_code is not None:
            return status_code
    return 500


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    envelope = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details or None),
        metadata=ResponseMetadata(request_id=_get_request_id(request)),
    )
    return JSONResponse(status_code=status_code, content=envelope.model_dump(mode="json"))


def _request_fields(request: Request) -> dict[str, Any]:
    return {
        "path": request.url.path,
        "method": request.method,
        "request_id": _get_request_id(request),
    }


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    """
    Render an ApplicationError.

    4xx answers are logged as warnings, upstream and configuration
    failures (5xx) as errors.
    """
    status_code = _status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Request rejected",
        extra={
            **_request_fields(request),
            "code": exc.code,
            "message": exc.message,
            "status": status_code,
        },
    )
    return _error_response(request, status_code, exc.code, exc.message, exc.details)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render query/body validation failures with one entry per offending field."""
    errors = exc.errors()
    field_errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "Validation error"),
            "type": err.get("type", "unknown"),
        }
        for err in errors
    ]

    logger.warning(
        "Request validation failed",
        extra={
            **_request_fields(request),
            "fields": [e["field"] for e in field_errors],
        },
    )
    return _error_response(
        request,
        422,
        "VAL_REQUEST_INVALID",
        "Request validation failed",
        {"validation_errors": field_errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Render an unexpected exception as a generic 500.

    The exception text never leaves the server; its type is added to
    ``details`` only with ``features.api_detailed_errors``.
    """
    exception_type = type(exc).__name__
    logger.exception(
        "Unhandled exception",
        extra={**_request_fields(request), "exception_type": exception_type},
    )

    details = None
    if get_app_config().features.api_detailed_errors:
        details = {"exception_type": exception_type}
    return _error_response(
        request, 500, "SYS_INTERNAL_ERROR", "An unexpected error occurred", details
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
