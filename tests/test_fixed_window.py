"""Unit tests for the fixed-window limiter."""

from datetime import timedelta

import pytest

from ratekeeper.adapters.rate_limit.fixed_window import FixedWindowLimiter
from ratekeeper.core.errors import InvalidLimiterConfigError


def test_admits_up_to_max_then_denies(clock) -> None:
    limiter = FixedWindowLimiter(1.0, 3, clock=clock)

    assert [limiter.allow_request() for _ in range(4)] == [True, True, True, False]
    assert limiter.request_count == 3


def test_new_window_admits_regardless_of_denials(clock) -> None:
    limiter = FixedWindowLimiter(timedelta(seconds=1), 3, clock=clock)

    for _ in range(3):
        assert limiter.allow() is True
    for _ in range(5):
        assert limiter.allow() is False

    clock.advance_ms(1000)
    assert limiter.allow() is True
    assert limiter.request_count == 1


def test_denied_request_does_not_increment(clock) -> None:
    limiter = FixedWindowLimiter(1.0, 1, clock=clock)

    assert limiter.allow() is True
    assert limiter.allow() is False
    assert limiter.allow() is False
    assert limiter.request_count == 1


def test_window_does_not_reset_before_it_elapses(clock) -> None:
    limiter = FixedWindowLimiter(1.0, 1, clock=clock)

    assert limiter.allow() is True
    clock.advance_ms(999)
    assert limiter.allow() is False


def test_window_is_anchored_to_triggering_request(clock) -> None:
    limiter = FixedWindowLimiter(1.0, 3, clock=clock)
    assert limiter.allow() is True

    # Window restarts at t=1500ms, not at a clock-aligned t=1000ms
    clock.advance_ms(1500)
    for _ in range(3):
        assert limiter.allow() is True

    clock.advance_ms(500)
    assert limiter.allow() is False

    clock.advance_ms(500)
    assert limiter.allow() is True


def test_boundary_burst_admits_twice_the_limit(clock) -> None:
    limiter = FixedWindowLimiter(1.0, 3, clock=clock)

    clock.advance_ms(990)
    first_burst = [limiter.allow() for _ in range(3)]
    clock.advance_ms(1000)
    second_burst = [limiter.allow() for _ in range(3)]

    assert all(first_burst) and all(second_burst)


def test_one_millisecond_window_still_limits(clock) -> None:
    limiter = FixedWindowLimiter(0.001, 1, clock=clock)

    assert [limiter.allow() for _ in range(3)] == [True, False, False]

    clock.advance_ms(1)
    assert limiter.allow() is True


def test_clock_regression_counts_as_zero_elapsed(clock) -> None:
    limiter = FixedWindowLimiter(1.0, 2, clock=clock)
    assert limiter.allow() is True
    assert limiter.allow() is True

    clock.rewind_ms(5000)
    assert limiter.allow() is False
    assert limiter.request_count == 2


def test_describe_reports_parameters(clock) -> None:
    limiter = FixedWindowLimiter(0.5, 2, clock=clock)

    assert limiter.window_size == timedelta(milliseconds=500)
    assert limiter.max_requests == 2
    assert limiter.describe() == {
        "algorithm": "fixed_window",
        "window_seconds": 0.5,
        "max_requests": 2,
    }


def test_default_clock_is_wall_clock() -> None:
    limiter = FixedWindowLimiter(60, 2)

    assert limiter.allow() is True
    assert limiter.allow() is True
    assert limiter.allow() is False


@pytest.mark.parametrize(
    "window_size, max_requests",
    [
        (0, 3),
        (-1.0, 3),
        (timedelta(0), 3),
        (timedelta(seconds=-1), 3),
        (1.0, 0),
        (1.0, -5),
        (1.0, 2.5),
        (1.0, True),
        (None, 3),
        (float("inf"), 3),
        (float("nan"), 3),
        (0.0005, 3),
        (timedelta(microseconds=999), 3),
    ],
)
def test_invalid_constructor_args(window_size, max_requests) -> None:
    with pytest.raises(InvalidLimiterConfigError):
        FixedWindowLimiter(window_size, max_requests)
