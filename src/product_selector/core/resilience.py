"""
Retry and circuit-breaking policy for the resolver service.

Each HTTPBackend owns one RetryPolicy, which decides which failures are
worth repeating and how long to wait, and one CircuitBreaker, which stops
calling a resolver that keeps failing until it had time to recover.
"""

import logging
import random
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

logger = logging.getLogger(__name__)


class RetryPolicy:
    """
    When and how long to wait before repeating a resolver call.

    Transport errors and the statuses in RETRY_STATUSES are retried up to
    `max_retries` times. Waits grow exponentially from `base_delay` with
    ±25% jitter, or follow the server's Retry-After header, and never
    exceed `max_delay`.
    """

    RETRY_STATUSES = frozenset({429, 502, 503, 504})

    def __init__(self, max_retries: int = 3, base_delay: float = 0.5, max_delay: float = 10.0):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.max_retries

    def retryable_status(self, status_code: int) -> bool:
        return status_code in self.RETRY_STATUSES

    def delay(self, attempt: int, retry_after: str | None = None) -> float:
        """Seconds to wait before retry number `attempt` (0-based)."""
        requested = parse_retry_after(retry_after)
        if requested is not None:
            return min(requested, self.max_delay)

        delay = min(self.base_delay * (2**attempt), self.max_delay)
        jitter = delay * 0.25 * (random.random() * 2 - 1)
        return max(0.0, delay + jitter)


def parse_retry_after(value: str | None) -> float | None:
    """
    Parse a Retry-After header: delay seconds or an HTTP date.

    Returns None when the header is missing or unparseable.
    """
    if not value:
        return None

    try:
        return max(0.0, float(value))
    except ValueError:
        pass

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring malformed Retry-After header: {value!r}")
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


class CircuitBreaker:
    """
    Circuit breaker for a single resolver service.

    closed: calls go through. After `failure_threshold` consecutive
    failures the circuit opens and calls are refused. Once
    `reset_timeout` seconds pass it is half-open: one call is let
    through, success closes the circuit, failure opens it again.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half-open"

    def __init__(self, name: str = "resolver", failure_threshold: int = 5, reset_timeout: float = 60.0):
        self.name = name
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.failures = 0
        self.opened_at: float | None = None

    @property
    def state(self) -> str:
        if self.opened_at is None:
            return self.CLOSED
        if time.monotonic() - self.opened_at >= self.reset_timeout:
            return self.HALF_OPEN
        return self.OPEN

    def allow(self) -> bool:
        """Whether a call may be made now."""
        return self.state != self.OPEN

    def record_failure(self) -> None:
        self.failures += 1
        if self.state == self.HALF_OPEN or self.failures >= self.failure_threshold:
            if self.state != self.OPEN:
                logger.warning(f"Resolver {self.name} unavailable, refusing calls for {self.reset_timeout:.0f}s")
            self.opened_at = time.monotonic()

    def record_success(self) -> None:
        if self.opened_at is not None:
            logger.info(f"Resolver {self.name} is back")
        self.failures = 0
        self.opened_at = None
