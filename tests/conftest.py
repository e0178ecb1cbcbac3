"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before anything imports the settings module
so tests never pick up a developer's .env file.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"
os.environ.setdefault("RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest


class FakeClock:
    """Deterministic nanosecond clock for driving limiters."""

    def __init__(self, start_ns: int = 1_700_000_000_000_000_000) -> None:
        self.now_ns = start_ns

    def __call__(self) -> int:
        return self.now_ns

    def advance_ms(self, millis: int) -> None:
        self.now_ns += millis * 1_000_000

    def rewind_ms(self, millis: int) -> None:
        self.now_ns -= millis * 1_000_000


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def clock_factory() -> type[FakeClock]:
    return FakeClock
