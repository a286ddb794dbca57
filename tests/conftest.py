from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from kegscale.persistence import InMemoryStore
from kegscale.state.scale import ScaleState


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 18, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now += timedelta(**delta)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def state(clock: FakeClock, store: InMemoryStore) -> ScaleState:
    # Venue transitions are driven by explicit reevaluate() calls in tests.
    return ScaleState(capacity=3, store=store, clock=clock, start_reviewer=False)
