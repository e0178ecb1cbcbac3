"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- The window restarts at the time of the first request that finds the old
  window expired, not at a clock-aligned boundary. Two bursts straddling a
  reset can therefore admit up to ``2 * max_requests`` in one window length.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from ratekeeper.adapters.rate_limit.base import (
    NANOS_PER_MILLI,
    AbstractRateLimiter,
    Clock,
    elapsed_millis,
    require_positive,
    require_positive_duration,
)
from ratekeeper.core.errors import InvalidLimiterConfigError

logger = logging.getLogger(__name__)


class FixedWindowLimiter(AbstractRateLimiter):
    """Admit at most ``max_requests`` per window of ``window_size``.

    Args:
        window_size: Window length in seconds or as a timedelta.
        max_requests: Maximum admitted requests per window.
        clock: Time source returning integer nanoseconds.

    Raises:
        InvalidLimiterConfigError: If max_requests is not positive or
            window_size is shorter than one millisecond.
    """

    algorithm = "fixed_window"

    def __init__(
        self,
        window_size: float | timedelta,
        max_requests: int,
        *,
        clock: Clock | None = None,
    ) -> None:
        window_nanos = require_positive_duration("window_size", window_size)
        # Elapsed time is compared in whole milliseconds
        if window_nanos < NANOS_PER_MILLI:
            raise InvalidLimiterConfigError(
                code="invalid_limiter_config",
                message=f"window_size must be at least 1ms, got {window_size!r}",
                details={"parameter": "window_size", "actual_value": repr(window_size)},
            )
        require_positive("max_requests", max_requests, integral=True)
        super().__init__(clock=clock)

        self._window_millis = window_nanos // NANOS_PER_MILLI
        self._window_nanos = window_nanos
        self._max_requests = max_requests
        self._request_count = 0
        self._window_start = self._clock()

    @property
    def window_size(self) -> timedelta:
        return timedelta(microseconds=self._window_nanos // 1_000)

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def request_count(self) -> int:
        with self._lock:
            return self._request_count

    def allow(self) -> bool:
        with self._lock:
            now = self._clock()
            if elapsed_millis(now, self._window_start) >= self._window_millis:
                if self._request_count:
                    logger.debug(
                        "rate_limit.window_reset",
                        extra={"algorithm": self.algorithm, "previous_count": self._request_count},
                    )
                self._request_count = 0
                self._window_start = now

            if self._request_count >= self._max_requests:
                logger.debug(
                    "rate_limit.denied",
                    extra={"algorithm": self.algorithm, "limit": self._max_requests},
                )
                return False

            self._request_count += 1
            return True

    def allow_request(self) -> bool:
        """Alias of :meth:`allow` kept for window-style call sites."""
        return self.allow()

    def describe(self) -> dict[str, object]:
        return {
            "algorithm": self.algorithm,
            "window_seconds": self._window_nanos / 1_000_000_000,
            "max_requests": self._max_requests,
        }
