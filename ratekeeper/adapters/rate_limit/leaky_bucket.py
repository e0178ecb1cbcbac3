"""In-memory leaky bucket rate limiter.

Admitted requests fill the bucket by one unit each; the bucket drains at a
constant ``rate`` units per second. Once full, requests are rejected no
matter how fast they arrive.

Draining is applied lazily on each decision. Whole drained units are
computed from elapsed whole milliseconds; when at least one unit drains the
drain timestamp moves to "now" and any fractional unit is discarded, so
frequent callers observe a slightly slower drain than ``rate``.
"""

from __future__ import annotations

import logging

from ratekeeper.adapters.rate_limit.base import (
    MILLIS_PER_SECOND,
    AbstractRateLimiter,
    Clock,
    elapsed_millis,
    require_positive,
)

logger = logging.getLogger(__name__)


class LeakyBucketLimiter(AbstractRateLimiter):
    """Leaky bucket limiter that starts empty.

    Args:
        rate: Units drained per second.
        capacity: Maximum bucket level.
        clock: Time source returning integer nanoseconds.

    Raises:
        InvalidLimiterConfigError: If rate or capacity is not positive.
    """

    algorithm = "leaky_bucket"

    def __init__(self, rate: int, capacity: int, *, clock: Clock | None = None) -> None:
        require_positive("rate", rate, integral=True)
        require_positive("capacity", capacity, integral=True)
        super().__init__(clock=clock)

        self._rate = rate
        self._capacity = capacity
        self._current_level = 0
        self._last_drain = self._clock()

    @property
    def rate(self) -> int:
        return self._rate

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def current_level(self) -> int:
        with self._lock:
            return self._current_level

    def _drain(self, now: int) -> None:
        drained = elapsed_millis(now, self._last_drain) * self._rate // MILLIS_PER_SECOND
        if drained > 0:
            self._current_level -= drained
            self._last_drain = now
        if self._current_level < 0:
            self._current_level = 0

    def allow(self) -> bool:
        with self._lock:
            self._drain(self._clock())

            if self._current_level < self._capacity:
                self._current_level += 1
                return True

            logger.debug(
                "rate_limit.denied",
                extra={"algorithm": self.algorithm, "limit": self._capacity},
            )
            return False

    def describe(self) -> dict[str, object]:
        return {"algorithm": self.algorithm, "rate": self._rate, "capacity": self._capacity}
