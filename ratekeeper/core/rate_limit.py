"""Rate limiting dependency for FastAPI routes.

This module wires the limiter adapters into the HTTP layer.

Strategy:
- One limiter per caller, keyed by client IP.
- The X-Client-Key header is used as the key only when
  ``trust_client_key_header`` is enabled, i.e. an upstream gateway has
  authenticated it. An unauthenticated header would let callers pick a
  fresh key per request and skip the limit.
- At most ``max_tracked_keys`` callers are tracked individually.
- The algorithm and its parameters come from ``settings.rate_limit``.
"""

from __future__ import annotations

import hashlib
import logging
import math
from typing import Annotated

from fastapi import Header, Request

from ratekeeper.adapters.rate_limit.factory import build_rate_limiter_from_settings
from ratekeeper.adapters.rate_limit.registry import KeyedRateLimiter
from ratekeeper.core.config import settings
from ratekeeper.core.errors import RateLimitExceededError

logger = logging.getLogger(__name__)


_registry: KeyedRateLimiter | None = None
_registry_config: tuple | None = None


def _current_config() -> tuple:
    cfg = settings.rate_limit
    return (
        cfg.algorithm,
        cfg.rate,
        cfg.capacity,
        cfg.window_seconds,
        cfg.max_requests,
        cfg.max_tracked_keys,
    )


def get_rate_limiter() -> KeyedRateLimiter:
    """Return the process-wide keyed limiter.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the registry is rebuilt
    and every caller starts from a fresh limiter.

    Returns:
        KeyedRateLimiter: Registry building limiters from current settings.
    """

    global _registry, _registry_config

    config = _current_config()
    if _registry is None or _registry_config != config:
        limiter_settings = settings.rate_limit.model_copy()
        # Fail at startup rather than on the first request
        build_rate_limiter_from_settings(limiter_settings)
        _registry = KeyedRateLimiter(
            lambda: build_rate_limiter_from_settings(limiter_settings),
            max_keys=limiter_settings.max_tracked_keys,
        )
        _registry_config = config
        logger.info(
            "rate_limit.configured",
            extra={
                "algorithm": limiter_settings.algorithm,
                "max_tracked_keys": limiter_settings.max_tracked_keys,
            },
        )

    return _registry


def _build_rate_limit_key(request: Request, x_client_key: str | None) -> str:
    """Build the namespaced limiter key for the current request.

    The client key header is ignored unless it is trusted.
    """

    if x_client_key and settings.rate_limit.trust_client_key_header:
        return f"client:{x_client_key}"

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing it."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def _retry_after_seconds() -> int:
    """Upper bound on the wait before a denied caller can be admitted again.

    A full window for window algorithms, one unit interval for buckets.
    """
    cfg = settings.rate_limit
    if cfg.algorithm in ("fixed_window", "sliding_window"):
        return max(1, math.ceil(cfg.window_seconds))
    return max(1, math.ceil(1 / cfg.rate))


def _limit_headers(retry_after: int) -> dict[str, str]:
    cfg = settings.rate_limit
    if cfg.algorithm in ("fixed_window", "sliding_window"):
        limit = cfg.max_requests
    else:
        limit = cfg.capacity
    return {
        "Retry-After": str(retry_after),
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Algorithm": cfg.algorithm,
    }


async def enforce_rate_limit(
    request: Request,
    x_client_key: Annotated[str | None, Header(alias="X-Client-Key")] = None,
) -> None:
    """FastAPI dependency enforcing admission control.

    When enabled, asks the caller's limiter for one admission. A denial
    is raised as ``RateLimitExceededError`` and rendered as HTTP 429.

    Args:
        request: FastAPI request.
        x_client_key: Caller identifier from the X-Client-Key header
            (used only when trusted).

    Raises:
        RateLimitExceededError: When the caller's limiter rejects the request.
    """

    if not settings.rate_limit.enabled:
        return

    registry = get_rate_limiter()
    key = _build_rate_limit_key(request, x_client_key)
    log_extra = {
        "key_type": key.partition(":")[0],
        "key_hash": _hash_limiter_key(key),
        "algorithm": settings.rate_limit.algorithm,
    }

    if registry.allow(key):
        logger.info("rate_limit.allowed", extra=log_extra)
        return

    retry_after = _retry_after_seconds()
    logger.warning("rate_limit.exceeded", extra={**log_extra, "retry_after_s": retry_after})

    raise RateLimitExceededError(
        code="rate_limit_exceeded",
        message="Rate limit exceeded. Try again later.",
        details={"algorithm": settings.rate_limit.algorithm, "retry_after": retry_after},
        headers=_limit_headers(retry_after) if settings.rate_limit.include_headers else {},
    )
