"""Per-key limiter registry.

Wraps a limiter factory so each caller key (client IP, trusted client id,
...) gets its own independent limiter instance, created on first use.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Tracked keys are capped by ``max_keys``. Once full, unseen keys share a
  single overflow limiter; tracked keys are never evicted, so a flood of new
  keys can neither reset an existing caller's state nor bypass the limit.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from ratekeeper.adapters.rate_limit.base import AbstractRateLimiter
from ratekeeper.core.errors import InvalidLimiterConfigError, ValidationAppError

logger = logging.getLogger(__name__)


class KeyedRateLimiter:
    """Thread-safe mapping of caller keys to limiter instances.

    The registry lock only guards the mapping. Each decision runs under
    the per-key limiter's own lock, so different keys never contend.

    Args:
        factory: Builds a fresh limiter for a newly seen key.
        max_keys: Maximum number of individually tracked keys (None for unlimited).
    """

    def __init__(
        self,
        factory: Callable[[], AbstractRateLimiter],
        *,
        max_keys: int | None = None,
    ) -> None:
        if max_keys is not None and (isinstance(max_keys, bool) or max_keys < 1):
            raise InvalidLimiterConfigError(
                code="invalid_limiter_config",
                message=f"max_keys must be >= 1, got {max_keys!r}",
                details={"parameter": "max_keys", "actual_value": repr(max_keys)},
            )
        self._factory = factory
        self._max_keys = max_keys
        self._lock = threading.RLock()
        self._limiters: dict[str, AbstractRateLimiter] = {}
        self._overflow: AbstractRateLimiter | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._limiters)

    @property
    def is_full(self) -> bool:
        with self._lock:
            return self._max_keys is not None and len(self._limiters) >= self._max_keys

    def get(self, key: str) -> AbstractRateLimiter:
        """Return the limiter for ``key``, creating it when first seen.

        When the registry is full, keys it does not already track all
        receive the shared overflow limiter.

        Raises:
            ValidationAppError: If key is empty.
        """
        if not key:
            raise ValidationAppError(
                code="invalid_rate_limit_key",
                message="key must be a non-empty string",
            )

        with self._lock:
            limiter = self._limiters.get(key)
            if limiter is not None:
                return limiter

            if self.is_full:
                if self._overflow is None:
                    self._overflow = self._factory()
                    logger.warning(
                        "rate_limit.registry_full",
                        extra={"max_keys": self._max_keys, "algorithm": self._overflow.algorithm},
                    )
                return self._overflow

            limiter = self._factory()
            self._limiters[key] = limiter
            logger.debug(
                "rate_limit.limiter_created",
                extra={"algorithm": limiter.algorithm, "tracked_keys": len(self._limiters)},
            )
            return limiter

    def allow(self, key: str) -> bool:
        """Decide whether one request for ``key`` may proceed now."""
        return self.get(key).allow()

    def reset(self) -> None:
        """Forget every tracked key and the overflow limiter."""
        with self._lock:
            self._limiters.clear()
            self._overflow = None
