"""Application-level exception types.

This module defines domain errors used across limiters and the HTTP layer,
enabling consistent error handling, logging, and API responses.

A denied request is not an error for the limiters themselves: ``allow()``
returns ``False``. Only the HTTP admission layer turns a denial into
``RateLimitExceededError`` so it can be rendered as a 429 response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    parameter: str
    actual_value: Any
    algorithm: str
    limit: int
    retry_after: float
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class InvalidLimiterConfigError(ValidationAppError, ValueError):
    """Raised when a limiter is constructed with an out-of-range parameter.

    Also a ``ValueError`` so library callers can catch it without importing
    the application error hierarchy.
    """


@dataclass
class RateLimitExceededError(AppError):
    """Raised by the HTTP admission layer when a caller is denied.

    Attributes:
        headers: Response headers to attach to the 429 response.
    """

    headers: dict[str, str] = field(default_factory=dict)
