"""Rate limiter interfaces and shared time arithmetic.

Every limiter answers one question, "may this caller proceed right now?",
from in-memory state guarded by a single lock. Time comes from an injectable
clock returning integer nanoseconds so the arithmetic never accumulates
floating point error and tests can drive time deterministically.
"""

from __future__ import annotations

import math
import threading
import time
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Callable

from ratekeeper.core.errors import InvalidLimiterConfigError

Clock = Callable[[], int]
"""Time source returning wall-clock time in integer nanoseconds."""

NANOS_PER_MILLI = 1_000_000
NANOS_PER_SECOND = 1_000_000_000
MILLIS_PER_SECOND = 1_000


def to_nanos(value: float | timedelta) -> int:
    """Convert a duration in seconds (or a timedelta) to integer nanoseconds."""
    if isinstance(value, timedelta):
        # timedelta is exact to the microsecond; avoid total_seconds() rounding
        micros = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
        return micros * 1_000
    return round(value * NANOS_PER_SECOND)


def elapsed_nanos(now: int, then: int) -> int:
    """Nanoseconds from ``then`` to ``now``; a clock that moved backwards counts as zero."""
    return max(0, now - then)


def elapsed_millis(now: int, then: int) -> int:
    """Whole milliseconds from ``then`` to ``now``, truncated, never negative."""
    return elapsed_nanos(now, then) // NANOS_PER_MILLI


def require_positive(name: str, value: object, *, integral: bool = False) -> int | float:
    """Validate a construction parameter.

    Args:
        name: Parameter name used in the error.
        value: Value supplied by the caller.
        integral: Require an ``int`` (booleans are never accepted).

    Returns:
        The validated value.

    Raises:
        InvalidLimiterConfigError: If the value is not a positive number.
    """
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or (integral and isinstance(value, float))
    ):
        kind = "an integer" if integral else "a number"
        raise InvalidLimiterConfigError(
            code="invalid_limiter_config",
            message=f"{name} must be {kind}, got {value!r}",
            details={"parameter": name, "actual_value": repr(value)},
        )
    if (isinstance(value, float) and not math.isfinite(value)) or value <= 0:
        raise InvalidLimiterConfigError(
            code="invalid_limiter_config",
            message=f"{name} must be > 0, got {value!r}",
            details={"parameter": name, "actual_value": repr(value)},
        )
    return value


def require_positive_duration(name: str, value: object) -> int:
    """Validate a window size and return it in nanoseconds."""
    if isinstance(value, timedelta):
        nanos = to_nanos(value)
        if nanos <= 0:
            raise InvalidLimiterConfigError(
                code="invalid_limiter_config",
                message=f"{name} must be > 0, got {value!r}",
                details={"parameter": name, "actual_value": str(value)},
            )
        return nanos
    nanos = to_nanos(require_positive(name, value))
    if nanos <= 0:
        raise InvalidLimiterConfigError(
            code="invalid_limiter_config",
            message=f"{name} is shorter than one nanosecond: {value!r}",
            details={"parameter": name, "actual_value": value},
        )
    return nanos


class AbstractRateLimiter(ABC):
    """Interface for single-node rate limiters.

    Subclasses hold all mutable state behind ``self._lock`` and perform the
    whole read-modify-write of a decision while holding it.
    """

    algorithm: str = "abstract"

    def __init__(self, *, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or time.time_ns
        self._lock = threading.RLock()

    @abstractmethod
    def allow(self) -> bool:
        """Decide whether one request may proceed now.

        Returns:
            True to admit the request, False to reject it. Rejection is a
            normal outcome, never an exception.
        """
        raise NotImplementedError

    def describe(self) -> dict[str, object]:
        """Return the immutable parameters of this limiter."""
        return {"algorithm": self.algorithm}
