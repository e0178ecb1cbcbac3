"""Rate limiting adapters.

Four single-node admission-control algorithms behind one interface
(``AbstractRateLimiter.allow() -> bool``), plus a factory that builds them
by name and a registry that keeps one limiter per caller key.
"""

from ratekeeper.adapters.rate_limit.base import AbstractRateLimiter, Clock
from ratekeeper.adapters.rate_limit.factory import (
    SUPPORTED_ALGORITHMS,
    build_rate_limiter,
    build_rate_limiter_from_settings,
)
from ratekeeper.adapters.rate_limit.fixed_window import FixedWindowLimiter
from ratekeeper.adapters.rate_limit.leaky_bucket import LeakyBucketLimiter
from ratekeeper.adapters.rate_limit.registry import KeyedRateLimiter
from ratekeeper.adapters.rate_limit.sliding_window import SlidingWindowLimiter
from ratekeeper.adapters.rate_limit.token_bucket import TokenBucketLimiter

__all__ = [
    "SUPPORTED_ALGORITHMS",
    "AbstractRateLimiter",
    "Clock",
    "FixedWindowLimiter",
    "KeyedRateLimiter",
    "LeakyBucketLimiter",
    "SlidingWindowLimiter",
    "TokenBucketLimiter",
    "build_rate_limiter",
    "build_rate_limiter_from_settings",
]
