from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from kegscale.exceptions import ImplausibleReading
from kegscale.models.measurement import EMPTY_MEASUREMENT
from kegscale.state.ledger import MeasurementLedger, PlausibilityFilter


def _dt(seconds: int = 0) -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC) + timedelta(seconds=seconds)


def _fill(ledger: MeasurementLedger, weights: list[float]) -> None:
    for i, weight in enumerate(weights):
        ledger.append(weight, _dt(i))


def test_empty_ledger_reads_sentinel() -> None:
    ledger = MeasurementLedger(4)

    assert ledger.valid_count == 0
    assert ledger.write_cursor == -1
    assert ledger.read_relative(0) == EMPTY_MEASUREMENT
    assert ledger.read_relative(0).slot_index == -1
    assert ledger.recent() == []


def test_read_relative_zero_is_always_newest_and_valid_count_saturates() -> None:
    capacity = 4
    ledger = MeasurementLedger(capacity)

    for i in range(capacity + 3):
        appended = ledger.append(7000.0 + i, _dt(i))
        assert ledger.read_relative(0) == appended
        assert ledger.valid_count == min(i + 1, capacity)


def test_cursor_advances_circularly() -> None:
    ledger = MeasurementLedger(3)
    slots = [ledger.append(7000.0 + i, _dt(i)).slot_index for i in range(7)]

    assert slots == [0, 1, 2, 0, 1, 2, 0]


def test_sequence_numbers_keep_increasing_across_wraps() -> None:
    ledger = MeasurementLedger(2)
    sequences = [ledger.append(7000.0, _dt(i)).sequence for i in range(5)]

    assert sequences == [1, 2, 3, 4, 5]
    assert ledger.last_sequence == 5


def test_oldest_slot_survives_exactly_one_full_fill() -> None:
    capacity = 5
    ledger = MeasurementLedger(capacity)
    first = ledger.append(7000.0, _dt(0))
    _fill(ledger, [7001.0, 7002.0, 7003.0, 7004.0])

    assert ledger.read_relative(capacity - 1) == first

    ledger.append(7005.0, _dt(10))
    assert ledger.read_relative(capacity - 1) != first
    assert ledger.read_relative(capacity - 1).weight == 7001.0


def test_read_relative_rejects_offsets_outside_valid_window() -> None:
    ledger = MeasurementLedger(4)
    _fill(ledger, [7000.0, 7100.0])

    assert ledger.read_relative(1).weight == 7000.0
    assert ledger.read_relative(2).is_empty
    assert ledger.read_relative(4).is_empty
    assert ledger.read_relative(-1).is_empty


@pytest.mark.parametrize("valid", [0, 1, 3, 5])
def test_has_last_n_matches_valid_count(valid: int) -> None:
    capacity = 5
    ledger = MeasurementLedger(capacity)
    _fill(ledger, [7000.0 + i for i in range(valid)])

    for n in range(capacity + 1):
        assert ledger.has_last_n(n) == (n <= valid)


def test_has_last_n_wider_than_capacity_is_false() -> None:
    ledger = MeasurementLedger(3)
    _fill(ledger, [7000.0 + i for i in range(5)])

    assert ledger.has_last_n(3)
    assert not ledger.has_last_n(4)
    assert not ledger.has_last_n(10)
    assert ledger.has_last_n(0)
    assert ledger.has_last_n(-1)


def test_average_equals_sum_over_n_once_filled() -> None:
    capacity = 4
    ledger = MeasurementLedger(capacity)
    _fill(ledger, [8000.0, 9000.0, 10000.0, 11000.0, 12000.0])

    for n in range(1, capacity + 1):
        assert ledger.has_last_n(n)
        assert ledger.average_last_n(n) == pytest.approx(ledger.sum_last_n(n) / n)

    assert ledger.sum_last_n(2) == 23000.0
    assert ledger.average_last_n(0) == 0


def test_sum_last_n_clamps_to_capacity() -> None:
    ledger = MeasurementLedger(3)
    _fill(ledger, [7000.0, 8000.0, 9000.0])

    assert ledger.sum_last_n(10) == 24000.0
    assert ledger.average_last_n(10) == 8000.0


def test_recent_lists_newest_first() -> None:
    ledger = MeasurementLedger(3)
    _fill(ledger, [7000.0, 8000.0, 9000.0, 10000.0])

    assert [m.weight for m in ledger.recent()] == [10000.0, 9000.0, 8000.0]
    assert [m.weight for m in ledger.recent(2)] == [10000.0, 9000.0]


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        MeasurementLedger(0)


def test_plausibility_filter_bounds() -> None:
    bounds = PlausibilityFilter(6000.0, 65000.0)

    bounds.check(6000.0)
    bounds.check(65000.0)
    with pytest.raises(ImplausibleReading) as exc_info:
        bounds.check(100.0)
    assert exc_info.value.weight == 100.0
    with pytest.raises(ImplausibleReading):
        bounds.check(90000.0)
