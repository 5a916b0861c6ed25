"""Shared test fixtures for the word_barrage test suite.

WHY: Nearly every component reads a clock and many draw random numbers.
Tests need both under control so thresholds can be hit exactly and
particle placement is reproducible.

HOW: FakeClock is a callable returning a settable time; advance() moves
it forward. Fixtures hand out a fresh clock, a seeded Random, and a
BarrageSession wired to both.

RULES:
- Every test gets its own clock and session (no shared mutable state)
- The clock starts at 1000.0 so "now - 0" bugs show up as huge durations
"""

import random

import pytest

from word_barrage.core.session import BarrageSession


class FakeClock:
    """Deterministic stand-in for time.monotonic."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def session(clock, rng):
    return BarrageSession(clock=clock, rng=rng)
