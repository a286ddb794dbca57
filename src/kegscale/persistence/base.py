"""Persistence adapter interface.

The scale state only needs best-effort durability: each accepted
measurement is saved once, the history is loaded once at startup.
Adapters raise :class:`kegscale.exceptions.PersistenceFailure` for any
backend problem; the caller decides how loud to be about it.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from kegscale.models.measurement import Measurement

#: Number of measurements kept in durable storage.
DEFAULT_RETENTION = 1000


@runtime_checkable
class MeasurementStore(Protocol):
    """Structural interface for durable measurement storage."""

    def save_measurement(self, measurement: Measurement) -> None:
        ...

    def load_recent_measurements(self) -> list[Measurement]:
        """Return stored measurements, oldest first."""
        ...

    def save_active_keg(self, keg: int) -> None:
        ...

    def load_active_keg(self) -> int | None:
        """Return the persisted active keg, ``None`` if never set."""
        ...
