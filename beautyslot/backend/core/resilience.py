"""
Resilience Infrastructure.

Circuit breaker listener, retry callbacks and the retry policy used for
YClients calls.

The composed stack for YClients is applied in this order (outside-in):
    Retry (tenacity) → Circuit Breaker (aiobreaker) → Call

Usage:
    from beautyslot.backend.core.resilience import create_circuit_breaker, create_retrying

    breaker = create_circuit_breaker("yclients", fail_max=5, timeout_duration=30)

    async for attempt in create_retrying(max_attempts=3):
        with attempt:
            staff = await breaker.call_async(client.get_staff)
"""

from collections.abc import Callable, Iterable
from datetime import timedelta
from typing import Any

import aiobreaker
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from beautyslot.backend.core.logging import get_logger

logger = get_logger(__name__)


class ResilienceLogger(aiobreaker.CircuitBreakerListener):
    """Circuit breaker listener that emits structured resilience events.

    Every state transition is logged with a standardized set of fields
    so that resilience events can be filtered and aggregated:

        jq 'select(.resilience_event != null)' logs/system.jsonl
    """

    def __init__(self, dependency: str) -> None:
        self.dependency = dependency

    def state_change(self, cb: aiobreaker.CircuitBreaker, old_state: Any, new_state: Any) -> None:
        event_map = {
            "open": "circuit_breaker_opened",
            "half-open": "circuit_breaker_half_open",
            "closed": "circuit_breaker_closed",
        }
        new_str = str(new_state).lower()
        event = event_map.get(new_str, f"circuit_breaker_{new_str}")
        log_level = "error" if new_str == "open" else "info"

        getattr(logger, log_level)(
            f"Circuit breaker {self.dependency}: {old_state} -> {new_state}",
            extra={
                "resilience_event": event,
                "dependency": self.dependency,
                "failure_count": cb.fail_counter,
            },
        )

    def failure(self, cb: aiobreaker.CircuitBreaker, exception: Exception) -> None:
        logger.warning(
            f"Circuit breaker {self.dependency}: failure recorded",
            extra={
                "resilience_event": "circuit_breaker_failure",
                "dependency": self.dependency,
                "failure_count": cb.fail_counter,
                "error": str(exception),
            },
        )


def log_retry(retry_state: RetryCallState) -> None:
    """Tenacity before_sleep callback that emits structured retry events.

    Args:
        retry_state: tenacity.RetryCallState instance
    """
    duration_ms = None
    if retry_state.outcome_timestamp and retry_state.start_time:
        duration_ms = round(
            (retry_state.outcome_timestamp - retry_state.start_time) * 1000
        )

    error = None
    if retry_state.outcome and retry_state.outcome.failed:
        error = str(retry_state.outcome.exception())

    fn_name = getattr(retry_state.fn, "__name__", None) or "block"
    next_sleep = retry_state.next_action.sleep if retry_state.next_action else None

    logger.warning(
        f"Retrying {fn_name} (attempt {retry_state.attempt_number})",
        extra={
            "resilience_event": "retry_attempt",
            "dependency": fn_name,
            "attempt": retry_state.attempt_number,
            "duration_ms": duration_ms,
            "next_sleep_seconds": next_sleep,
            "error": error,
        },
    )


class wait_rate_limit_aware:
    """Tenacity wait strategy with a longer pause for HTTP 429 failures.

    Exceptions carrying ``status_code == 429`` wait ``rate_limit_delay``
    seconds, every other failure waits ``error_delay`` seconds.
    """

    def __init__(self, rate_limit_delay: float, error_delay: float) -> None:
        self.rate_limit_delay = rate_limit_delay
        self.error_delay = error_delay

    def __call__(self, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if getattr(exc, "status_code", None) == 429:
            return self.rate_limit_delay
        return self.error_delay


def create_retrying(
    max_attempts: int = 3,
    rate_limit_delay: float = 5.0,
    error_delay: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> AsyncRetrying:
    """Build the async retry controller used around external fetches.

    Args:
        max_attempts: Total number of attempts before giving up
        rate_limit_delay: Seconds to wait after a rate-limited response
        error_delay: Seconds to wait after any other failure
        retry_on: Exception types that trigger a retry

    Returns:
        AsyncRetrying that re-raises the last error
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_rate_limit_aware(rate_limit_delay, error_delay),
        retry=retry_if_exception_type(retry_on),
        before_sleep=log_retry,
        reraise=True,
    )


def create_circuit_breaker(
    dependency: str,
    fail_max: int = 5,
    timeout_duration: int = 30,
    exclude: Iterable[type[BaseException] | Callable[[BaseException], bool]] = (),
) -> aiobreaker.CircuitBreaker:
    """Create a circuit breaker with structured logging.

    Args:
        dependency: Name of the external dependency (for logging)
        fail_max: Number of failures before opening
        timeout_duration: Seconds to wait before half-open test
        exclude: Exception types or predicates that do not count as failures

    Returns:
        Configured CircuitBreaker instance
    """
    return aiobreaker.CircuitBreaker(
        fail_max=fail_max,
        timeout_duration=timedelta(seconds=timeout_duration),
        exclude=list(exclude),
        listeners=[ResilienceLogger(dependency)],
    )
