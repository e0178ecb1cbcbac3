"""Unit tests for the sliding-window limiter."""

from datetime import timedelta

import pytest

from ratekeeper.adapters.rate_limit.sliding_window import SlidingWindowLimiter
from ratekeeper.core.errors import InvalidLimiterConfigError


def test_rolling_window_admission_sequence(clock) -> None:
    limiter = SlidingWindowLimiter(timedelta(milliseconds=500), 2, clock=clock)

    assert limiter.allow_request() is True
    clock.advance_ms(10)
    assert limiter.allow_request() is True
    clock.advance_ms(20)
    assert limiter.allow_request() is False

    # 520ms after the first request both earlier entries have expired
    clock.advance_ms(490)
    assert limiter.allow_request() is True
    assert len(limiter.request_timestamps) == 1


def test_entry_exactly_window_old_still_counts(clock) -> None:
    limiter = SlidingWindowLimiter(0.5, 1, clock=clock)

    assert limiter.allow() is True
    clock.advance_ms(500)
    assert limiter.allow() is False
    clock.advance_ms(1)
    assert limiter.allow() is True


def test_only_expired_prefix_is_evicted(clock) -> None:
    limiter = SlidingWindowLimiter(1.0, 3, clock=clock)
    start = clock()

    assert limiter.allow() is True
    clock.advance_ms(600)
    assert limiter.allow() is True
    clock.advance_ms(300)
    assert limiter.allow() is True

    clock.advance_ms(200)  # t=1100: only the t=0 entry is older than 1s
    assert limiter.allow() is True
    assert limiter.request_timestamps == (
        start + 600_000_000,
        start + 900_000_000,
        start + 1_100_000_000,
    )


def test_denied_request_is_not_recorded(clock) -> None:
    limiter = SlidingWindowLimiter(1.0, 2, clock=clock)

    limiter.allow()
    limiter.allow()
    for _ in range(10):
        assert limiter.allow() is False

    assert len(limiter.request_timestamps) == 2


def test_no_boundary_burst(clock) -> None:
    limiter = SlidingWindowLimiter(1.0, 3, clock=clock)

    clock.advance_ms(990)
    assert all(limiter.allow() for _ in range(3))
    clock.advance_ms(20)
    assert limiter.allow() is False


def test_clock_regression_keeps_log_ordered(clock) -> None:
    limiter = SlidingWindowLimiter(1.0, 3, clock=clock)

    assert limiter.allow() is True
    clock.rewind_ms(200)
    assert limiter.allow() is True

    timestamps = limiter.request_timestamps
    assert list(timestamps) == sorted(timestamps)
    assert timestamps[0] == timestamps[1]


def test_describe_reports_parameters(clock) -> None:
    limiter = SlidingWindowLimiter(0.5, 2, clock=clock)

    assert limiter.max_requests == 2
    assert limiter.window_size == timedelta(milliseconds=500)
    assert limiter.describe()["algorithm"] == "sliding_window"


@pytest.mark.parametrize(
    "window_size, max_requests",
    [
        (0, 2),
        (-0.5, 2),
        (timedelta(0), 2),
        (0.5, 0),
        (0.5, -1),
        (0.5, 1.5),
        ("0.5", 2),
    ],
)
def test_invalid_constructor_args(window_size, max_requests) -> None:
    with pytest.raises(InvalidLimiterConfigError):
        SlidingWindowLimiter(window_size, max_requests)
