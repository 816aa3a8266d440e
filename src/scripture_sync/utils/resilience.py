"""Resilience patterns for outbound fetches.

Provides linear-backoff retry (via tenacity) and a fixed-interval rate limiter
shared by every caller in a run.
"""

import threading
import time
from collections.abc import Callable

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from scripture_sync.utils.logging import get_logger

logger = get_logger(__name__)


class FixedIntervalRateLimiter:
    """Enforce a minimum spacing between outbound fetches.

    One instance is shared by every worker in a run. The spacing is measured
    from the previous throttle call and the sleep happens under the lock, so
    the aggregate request rate stays bounded regardless of how many threads
    call ``throttle()``.
    """

    def __init__(
        self,
        interval: float = 0.3,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        """Initialize rate limiter.

        Args:
            interval: Minimum seconds between two fetches
            clock: Monotonic time provider (for testing)
            sleep: Sleep function (for testing)
        """
        if interval < 0:
            msg = f"Rate limit interval cannot be negative: {interval}"
            raise ValueError(msg)
        self.interval = interval
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self._lock = threading.Lock()
        self._last_call: float | None = None
        self.calls = 0

    def throttle(self) -> float:
        """Block until the next fetch may be issued.

        Returns:
            Seconds slept
        """
        with self._lock:
            waited = 0.0
            now = self._clock()
            if self._last_call is not None:
                remaining = self.interval - (now - self._last_call)
                if remaining > 0:
                    self._sleep(remaining)
                    waited = remaining
                    now = self._clock()
            self._last_call = now
            self.calls += 1
            return waited


def _log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log retry attempts for observability."""
    logger.warning(
        "fetch_retry",
        attempt=retry_state.attempt_number,
        wait_seconds=round(
            retry_state.next_action.sleep if retry_state.next_action else 0, 2
        ),
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


def create_linear_retrying(
    max_attempts: int,
    base_delay: float,
    retry_exceptions: tuple[type[Exception], ...],
    sleep: Callable[[float], None] | None = None,
) -> Retrying:
    """Create a tenacity retrying controller with linear backoff.

    The wait before retry ``k`` (after the k-th failed attempt) is
    ``base_delay * k``. At most ``max_attempts`` calls are made; the last
    exception is re-raised once they are exhausted.

    Args:
        max_attempts: Total number of attempts including the first
        base_delay: Delay unit in seconds
        retry_exceptions: Exceptions that trigger a retry
        sleep: Sleep function (for testing)
    """
    kwargs = {}
    if sleep is not None:
        kwargs["sleep"] = sleep
    return Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_incrementing(start=base_delay, increment=base_delay),
        retry=retry_if_exception_type(retry_exceptions),
        before_sleep=_log_retry_attempt,
        reraise=True,
        **kwargs,
    )


__all__ = ["FixedIntervalRateLimiter", "create_linear_retrying"]
