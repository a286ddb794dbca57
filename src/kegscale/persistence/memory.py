"""In-process store variants for tests and Redis-less deployments."""

from __future__ import annotations

import threading
from collections import deque

from kegscale.models.measurement import Measurement
from kegscale.persistence.base import DEFAULT_RETENTION


class InMemoryStore:
    """Keeps the last ``retention`` measurements for the process lifetime."""

    def __init__(self, retention: int = DEFAULT_RETENTION) -> None:
        if retention < 1:
            raise ValueError("retention must be at least 1")
        self._lock = threading.Lock()
        self._measurements: deque[Measurement] = deque(maxlen=retention)
        self._active_keg: int | None = None

    def save_measurement(self, measurement: Measurement) -> None:
        with self._lock:
            self._measurements.append(measurement)

    def load_recent_measurements(self) -> list[Measurement]:
        with self._lock:
            return list(self._measurements)

    def save_active_keg(self, keg: int) -> None:
        with self._lock:
            self._active_keg = keg

    def load_active_keg(self) -> int | None:
        with self._lock:
            return self._active_keg


class NullStore:
    """Accepts everything and remembers nothing."""

    def save_measurement(self, measurement: Measurement) -> None:
        return None

    def load_recent_measurements(self) -> list[Measurement]:
        return []

    def save_active_keg(self, keg: int) -> None:
        return None

    def load_active_keg(self) -> int | None:
        return None
