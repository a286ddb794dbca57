"""Fixed-capacity measurement ledger.

The ledger itself is not synchronised. It is owned by
:class:`kegscale.state.scale.ScaleState`, which serialises every call
under its single lock.
"""

from __future__ import annotations

from datetime import datetime

from kegscale.exceptions import ImplausibleReading
from kegscale.models.measurement import EMPTY_MEASUREMENT, Measurement


class PlausibilityFilter:
    """Static bounds check against sensor glitches.

    This is a sanity filter, not calibration: readings outside
    ``[minimum, maximum]`` are physically impossible for the keg on
    the scale.
    """

    def __init__(self, minimum: float, maximum: float) -> None:
        if minimum >= maximum:
            raise ValueError(f"minimum ({minimum}) must be lower than maximum ({maximum})")
        self.minimum = minimum
        self.maximum = maximum

    def check(self, weight: float) -> None:
        """Raise :class:`ImplausibleReading` for out-of-bounds weights."""
        if weight < self.minimum or weight > self.maximum:
            raise ImplausibleReading(weight, minimum=self.minimum, maximum=self.maximum)


class MeasurementLedger:
    """Circular buffer of the most recent ``capacity`` measurements.

    Reads are addressed by relative offset: ``0`` is the newest sample,
    ``k`` the k-th previous one.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._slots: list[Measurement] = [EMPTY_MEASUREMENT] * capacity
        self._cursor = -1
        self._valid = 0
        self._sequence = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def valid_count(self) -> int:
        return self._valid

    @property
    def write_cursor(self) -> int:
        """Slot of the newest measurement, ``-1`` while empty."""
        return self._cursor

    @property
    def last_sequence(self) -> int:
        return self._sequence

    def append(self, weight: float, recorded_at: datetime) -> Measurement:
        """Write a sample into the next slot and return it.

        No bounds checking happens here; callers run the
        :class:`PlausibilityFilter` first.
        """
        self._cursor = (self._cursor + 1) % self._capacity
        self._sequence += 1
        measurement = Measurement(
            slot_index=self._cursor,
            weight=weight,
            recorded_at=recorded_at,
            sequence=self._sequence,
        )
        self._slots[self._cursor] = measurement
        if self._valid < self._capacity:
            self._valid += 1
        return measurement

    def _physical_index(self, offset: int) -> int:
        return (self._cursor - offset + self._capacity) % self._capacity

    def read_relative(self, offset: int) -> Measurement:
        """Return the sample ``offset`` steps back from the newest.

        Offsets outside the valid window return :data:`EMPTY_MEASUREMENT`
        (``slot_index == -1``) instead of stale or never-written slots.
        """
        if offset < 0 or offset >= self._valid or offset >= self._capacity:
            return EMPTY_MEASUREMENT
        return self._slots[self._physical_index(offset)]

    def _clamp(self, n: int) -> int:
        return max(0, min(n, self._capacity))

    def has_last_n(self, n: int) -> bool:
        """Whether the ``n`` newest slots all hold real measurements.

        A window wider than the ledger can never be satisfied, so ``n``
        above the capacity is always false.
        """
        if n > self._capacity:
            return False
        return self._valid >= max(0, n)

    def sum_last_n(self, n: int) -> float:
        """Sum the weights of the ``n`` newest slots.

        ``n`` is clamped to the capacity. Validity is not checked: during
        the first fill, unwritten slots contribute the sentinel weight.
        Call :meth:`has_last_n` first when all samples must be real.
        """
        total = 0.0
        for offset in range(self._clamp(n)):
            total += self._slots[self._physical_index(offset)].weight
        return total

    def average_last_n(self, n: int) -> float:
        """Average over the ``n`` newest slots, ``0`` for ``n == 0``.

        Same validity contract as :meth:`sum_last_n`.
        """
        effective = self._clamp(n)
        if effective == 0:
            return 0.0
        return self.sum_last_n(effective) / effective

    def recent(self, n: int | None = None) -> list[Measurement]:
        """Valid measurements, newest first, at most ``n`` of them."""
        count = self._valid if n is None else max(0, min(n, self._valid))
        return [self._slots[self._physical_index(offset)] for offset in range(count)]
