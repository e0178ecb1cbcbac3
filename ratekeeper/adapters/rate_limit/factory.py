"""Factory functions for creating rate limiter instances by algorithm name."""

from __future__ import annotations

from datetime import timedelta

from ratekeeper.adapters.rate_limit.base import AbstractRateLimiter, Clock
from ratekeeper.adapters.rate_limit.fixed_window import FixedWindowLimiter
from ratekeeper.adapters.rate_limit.leaky_bucket import LeakyBucketLimiter
from ratekeeper.adapters.rate_limit.sliding_window import SlidingWindowLimiter
from ratekeeper.adapters.rate_limit.token_bucket import TokenBucketLimiter
from ratekeeper.core.config import RateLimitSettings
from ratekeeper.core.errors import InvalidLimiterConfigError

SUPPORTED_ALGORITHMS = (
    FixedWindowLimiter.algorithm,
    SlidingWindowLimiter.algorithm,
    LeakyBucketLimiter.algorithm,
    TokenBucketLimiter.algorithm,
)


def build_rate_limiter(
    algorithm: str,
    *,
    rate: int | None = None,
    capacity: int | None = None,
    window_seconds: float | timedelta | None = None,
    max_requests: int | None = None,
    clock: Clock | None = None,
) -> AbstractRateLimiter:
    """Instantiate a limiter for the given algorithm.

    Window algorithms use ``window_seconds`` and ``max_requests``; bucket
    algorithms use ``rate`` and ``capacity``. Missing parameters are passed
    through as ``None`` and rejected by the limiter's own validation.

    Args:
        algorithm: One of ``SUPPORTED_ALGORITHMS`` (case-insensitive).
        rate: Units per second for bucket algorithms.
        capacity: Bucket capacity for bucket algorithms.
        window_seconds: Window length for window algorithms.
        max_requests: Per-window maximum for window algorithms.
        clock: Optional nanosecond time source.

    Returns:
        AbstractRateLimiter: A freshly constructed limiter.

    Raises:
        InvalidLimiterConfigError: For unknown algorithms or invalid parameters.
    """
    name = algorithm.strip().lower()

    if name == FixedWindowLimiter.algorithm:
        return FixedWindowLimiter(window_seconds, max_requests, clock=clock)  # type: ignore[arg-type]
    if name == SlidingWindowLimiter.algorithm:
        return SlidingWindowLimiter(window_seconds, max_requests, clock=clock)  # type: ignore[arg-type]
    if name == LeakyBucketLimiter.algorithm:
        return LeakyBucketLimiter(rate, capacity, clock=clock)  # type: ignore[arg-type]
    if name == TokenBucketLimiter.algorithm:
        return TokenBucketLimiter(rate, capacity, clock=clock)  # type: ignore[arg-type]

    raise InvalidLimiterConfigError(
        code="unknown_rate_limit_algorithm",
        message=(
            f"Unknown rate limit algorithm: '{algorithm}'. "
            f"Supported algorithms: {', '.join(SUPPORTED_ALGORITHMS)}"
        ),
        details={"parameter": "algorithm", "actual_value": algorithm},
    )


def build_rate_limiter_from_settings(
    rate_limit_settings: RateLimitSettings,
    *,
    clock: Clock | None = None,
) -> AbstractRateLimiter:
    """Instantiate the limiter described by ``RateLimitSettings``."""
    return build_rate_limiter(
        rate_limit_settings.algorithm,
        rate=rate_limit_settings.rate,
        capacity=rate_limit_settings.capacity,
        window_seconds=rate_limit_settings.window_seconds,
        max_requests=rate_limit_settings.max_requests,
        clock=clock,
    )
