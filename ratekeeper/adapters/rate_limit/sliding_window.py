"""In-memory sliding-window (request log) rate limiter."""

from __future__ import annotations

import logging
from collections import deque
from datetime import timedelta

from ratekeeper.adapters.rate_limit.base import (
    AbstractRateLimiter,
    Clock,
    require_positive,
    require_positive_duration,
)

logger = logging.getLogger(__name__)


class SlidingWindowLimiter(AbstractRateLimiter):
    """Admit at most ``max_requests`` within any rolling ``window_size``.

    Keeps the timestamps of admitted requests, oldest first. Each decision
    evicts the expired prefix and compares what is left against the limit,
    so the count is recomputed continuously instead of reset at intervals.

    A timestamp expires once it is strictly more than ``window_size`` old.

    Args:
        window_size: Window length in seconds or as a timedelta.
        max_requests: Maximum admitted requests inside any window.
        clock: Time source returning integer nanoseconds.

    Raises:
        InvalidLimiterConfigError: If window_size or max_requests is not positive.
    """

    algorithm = "sliding_window"

    def __init__(
        self,
        window_size: float | timedelta,
        max_requests: int,
        *,
        clock: Clock | None = None,
    ) -> None:
        window_nanos = require_positive_duration("window_size", window_size)
        require_positive("max_requests", max_requests, integral=True)
        super().__init__(clock=clock)

        self._window_nanos = window_nanos
        self._max_requests = max_requests
        self._request_timestamps: deque[int] = deque(maxlen=max_requests)

    @property
    def window_size(self) -> timedelta:
        return timedelta(microseconds=self._window_nanos // 1_000)

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def request_timestamps(self) -> tuple[int, ...]:
        """Snapshot of admitted request times (nanoseconds), oldest first."""
        with self._lock:
            return tuple(self._request_timestamps)

    def allow(self) -> bool:
        with self._lock:
            now = self._clock()
            log = self._request_timestamps
            if log and now < log[-1]:
                # Clock went backwards; keep the log ordered
                now = log[-1]

            while log and now - log[0] > self._window_nanos:
                log.popleft()

            if len(log) >= self._max_requests:
                logger.debug(
                    "rate_limit.denied",
                    extra={"algorithm": self.algorithm, "limit": self._max_requests},
                )
                return False

            log.append(now)
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
