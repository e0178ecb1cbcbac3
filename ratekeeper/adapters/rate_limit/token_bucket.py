"""In-memory token bucket rate limiter.

Tokens accrue at ``rate`` per second up to ``capacity``; each admitted
request spends one. The bucket starts with no tokens, so the first request
after construction is rejected until at least one token has been generated.

Refill is applied lazily on each decision from elapsed whole milliseconds.
When at least one token is generated the refill timestamp moves to "now"
and the fractional token is discarded.

Unlike the leaky bucket, admission is gated on available credit rather than
free headroom, and the capacity clamp happens before the admission check:
a bucket that refills past capacity is cut back to ``capacity`` and then
spends one token, leaving ``capacity - 1``.
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


class TokenBucketLimiter(AbstractRateLimiter):
    """Token bucket limiter that starts with zero tokens.

    Args:
        rate: Tokens generated per second.
        capacity: Maximum tokens the bucket can hold.
        clock: Time source returning integer nanoseconds.

    Raises:
        InvalidLimiterConfigError: If rate or capacity is not positive.
    """

    algorithm = "token_bucket"

    def __init__(self, rate: int, capacity: int, *, clock: Clock | None = None) -> None:
        require_positive("rate", rate, integral=True)
        require_positive("capacity", capacity, integral=True)
        super().__init__(clock=clock)

        self._rate = rate
        self._capacity = capacity
        self._token_count = 0
        self._last_refill = self._clock()

    @property
    def rate(self) -> int:
        return self._rate

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def token_count(self) -> int:
        with self._lock:
            return self._token_count

    def _refill(self, now: int) -> None:
        generated = elapsed_millis(now, self._last_refill) * self._rate // MILLIS_PER_SECOND
        if generated > 0:
            self._token_count += generated
            self._last_refill = now
            logger.debug(
                "rate_limit.refilled",
                extra={"algorithm": self.algorithm, "generated": generated},
            )
        if self._token_count > self._capacity:
            self._token_count = self._capacity

    def allow(self) -> bool:
        with self._lock:
            self._refill(self._clock())

            if self._token_count > 0:
                self._token_count -= 1
                return True

            logger.debug(
                "rate_limit.denied",
                extra={"algorithm": self.algorithm, "limit": self._capacity},
            )
            return False

    def describe(self) -> dict[str, object]:
        return {"algorithm": self.algorithm, "rate": self._rate, "capacity": self._capacity}
