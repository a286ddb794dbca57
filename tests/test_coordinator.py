from __future__ import annotations

import pytest

from kegscale.exceptions import ParseError
from kegscale.ingestion.coordinator import IngestionCoordinator
from kegscale.persistence import InMemoryStore
from kegscale.state.scale import ScaleState


def test_five_pushes_into_capacity_three(state: ScaleState, store: InMemoryStore) -> None:
    coordinator = IngestionCoordinator(state)
    weights = [10000.0, 11000.0, 12000.0, 13000.0, 14000.0]

    for message_id, weight in enumerate(weights, start=1):
        result = coordinator.handle_message(f"push|{message_id}|-70.0|{weight}".encode())
        assert result.append is not None
        assert result.append.accepted

    assert [state.read_relative(i).weight for i in range(3)] == [14000.0, 13000.0, 12000.0]
    assert not state.has_last_n(4)
    assert state.read_relative(3).is_empty
    assert len(store.load_recent_measurements()) == 5


def test_ping_updates_liveness_without_ledger_write(state: ScaleState) -> None:
    coordinator = IngestionCoordinator(state)

    result = coordinator.handle_message("ping|7|-81.5|")

    assert result.append is None
    assert result.warnings == []
    assert state.is_ok()
    assert state.is_open
    assert state.valid_count == 0
    assert state.snapshot().signal == -81.5


@pytest.mark.parametrize("weight", [100.0, 90000.0])
def test_implausible_push_still_counts_as_contact(state: ScaleState, weight: float) -> None:
    coordinator = IngestionCoordinator(state)
    assert not state.is_ok()

    result = coordinator.handle_message(f"push|9|-70.0|{weight}")

    assert result.append is not None
    assert result.append.rejected
    assert result.warnings == []
    assert state.valid_count == 0
    assert state.is_ok()
    assert state.is_open


def test_malformed_message_mutates_nothing(state: ScaleState) -> None:
    coordinator = IngestionCoordinator(state)

    with pytest.raises(ParseError):
        coordinator.handle_message("push|x|-70.0|20000")

    assert not state.is_ok()
    assert not state.is_open
    assert state.valid_count == 0


def test_contact_after_close_reopens(state: ScaleState, clock) -> None:
    coordinator = IngestionCoordinator(state)
    coordinator.handle_message("ping|1|-70|")
    clock.advance(minutes=10)
    assert state.reevaluate()

    coordinator.handle_message("push|2|-70|20000")

    status = state.snapshot()
    assert status.venue.is_open
    assert status.venue.opened_at == clock.now
    assert status.venue.opened_at > status.venue.closed_at
