"""
Request Context Middleware.

Tags every HTTP request with a request ID and the calling frontend, binds
both to the structlog context, and reports timing back in headers.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from beautyslot.backend.core.logging import get_logger

logger = get_logger(__name__)

# X-Frontend-ID values: admin panel, public microsite, Telegram Mini App,
# the bot itself and run.py
KNOWN_FRONTENDS = frozenset({"admin", "web", "miniapp", "telegram", "cli"})


def _frontend_of(request: Request) -> str:
    frontend = request.headers.get("X-Frontend-ID", "").lower()
    return frontend if frontend in KNOWN_FRONTENDS else "unknown"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Populate ``request.state.request_id`` and ``request.state.frontend``.

    The request ID is taken from ``X-Request-ID`` or generated, and echoed
    in the response together with ``X-Response-Time``. Log records emitted
    while the request is handled carry request_id, frontend, method and path.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        frontend = _frontend_of(request)
        started = time.perf_counter()

        request.state.request_id = request_id
        request.state.frontend = frontend

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            frontend=frontend,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed",
                extra={"duration_ms": _elapsed_ms(started), "error_type": type(exc).__name__},
            )
            raise
        else:
            duration_ms = _elapsed_ms(started)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"
            logger.debug(
                "Request completed",
                extra={"status_code": response.status_code, "duration_ms": duration_ms},
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()
