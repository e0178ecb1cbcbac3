"""Concurrent callers must never double-spend capacity."""

import threading

import pytest

from ratekeeper.adapters.rate_limit.base import AbstractRateLimiter
from ratekeeper.adapters.rate_limit.fixed_window import FixedWindowLimiter
from ratekeeper.adapters.rate_limit.leaky_bucket import LeakyBucketLimiter
from ratekeeper.adapters.rate_limit.sliding_window import SlidingWindowLimiter
from ratekeeper.adapters.rate_limit.token_bucket import TokenBucketLimiter


def _hammer(limiter: AbstractRateLimiter, threads: int) -> list[bool]:
    barrier = threading.Barrier(threads)
    results: list[bool] = []
    results_lock = threading.Lock()

    def _caller() -> None:
        barrier.wait()
        outcome = limiter.allow()
        with results_lock:
            results.append(outcome)

    workers = [threading.Thread(target=_caller) for _ in range(threads)]
    for t in workers:
        t.start()
    for t in workers:
        t.join()
    return results


@pytest.mark.parametrize("tokens, threads", [(1, 16), (10, 50), (25, 25)])
def test_token_bucket_admits_exactly_available_tokens(clock, tokens: int, threads: int) -> None:
    limiter = TokenBucketLimiter(rate=tokens, capacity=100, clock=clock)
    clock.advance_ms(1_000)

    results = _hammer(limiter, threads)

    assert results.count(True) == tokens
    assert results.count(False) == threads - tokens
    assert limiter.token_count == 0


@pytest.mark.parametrize(
    "build, admitted",
    [
        (lambda clock: FixedWindowLimiter(1.0, 7, clock=clock), 7),
        (lambda clock: SlidingWindowLimiter(1.0, 7, clock=clock), 7),
        (lambda clock: LeakyBucketLimiter(rate=1, capacity=7, clock=clock), 7),
    ],
)
def test_other_limiters_never_exceed_their_limit(clock, build, admitted: int) -> None:
    limiter = build(clock)

    results = _hammer(limiter, 40)

    assert results.count(True) == admitted


def test_independent_instances_do_not_share_state(clock) -> None:
    first = TokenBucketLimiter(rate=5, capacity=5, clock=clock)
    second = TokenBucketLimiter(rate=5, capacity=5, clock=clock)
    clock.advance_ms(1_000)

    assert _hammer(first, 20).count(True) == 5
    assert _hammer(second, 20).count(True) == 5
