"""Scale state holder.

This is the only component allowed to touch the measurement ledger,
the liveness tracker and the venue state machine. All three live behind
one lock: venue transitions read the liveness timestamp written by the
same ingestion path that advances the ledger cursor, and a single lock
keeps those reads consistent without a lock ordering protocol.

Persistence calls happen outside the lock, on the frozen copy of the
measurement that was just written, so a slow store never stalls readers.
The clock is read while the lock is held, so timestamps are committed in
the same order as the writes they belong to; a clock must therefore
never call back into the state.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from kegscale.config import ScaleConfig
from kegscale.exceptions import EmptyLedgerAccess, ImplausibleReading, PersistenceFailure
from kegscale.models.measurement import Measurement
from kegscale.models.status import AppendResult, ScaleStatus
from kegscale.persistence.base import MeasurementStore
from kegscale.persistence.memory import NullStore
from kegscale.state.ledger import MeasurementLedger, PlausibilityFilter
from kegscale.state.liveness import STALENESS_THRESHOLD, LivenessTracker
from kegscale.state.reviewer import DEFAULT_REVIEW_INTERVAL, VenueReviewer
from kegscale.state.venue import VenueStateMachine

_logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100
DEFAULT_MIN_WEIGHT = 6000.0
DEFAULT_MAX_WEIGHT = 65000.0


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ScaleState:
    """Thread-safe owner of ledger, liveness and venue state.

    Usage::

        with ScaleState(store=RedisStore.from_url(url)) as state:
            state.record_contact(signal=-71.0)
            state.append(23410.0)
            status = state.snapshot()

    The background venue reviewer starts at construction unless
    ``start_reviewer=False``; :meth:`close` stops it.
    """

    def __init__(
        self,
        *,
        capacity: int = DEFAULT_CAPACITY,
        store: MeasurementStore | None = None,
        plausibility: PlausibilityFilter | None = None,
        staleness_threshold: timedelta = STALENESS_THRESHOLD,
        review_interval: float = DEFAULT_REVIEW_INTERVAL,
        clock: Callable[[], datetime] = _utcnow,
        start_reviewer: bool = True,
    ) -> None:
        self._lock = threading.Lock()
        self._clock = clock
        self._store: MeasurementStore = store if store is not None else NullStore()
        self._plausibility = plausibility or PlausibilityFilter(DEFAULT_MIN_WEIGHT, DEFAULT_MAX_WEIGHT)
        self._ledger = MeasurementLedger(capacity)
        self._liveness = LivenessTracker(staleness_threshold)
        self._venue = VenueStateMachine(staleness_threshold)
        self._active_keg = 0
        self._reviewer = VenueReviewer(self.reevaluate, interval=review_interval)

        self._load_from_store()

        if start_reviewer:
            self._reviewer.start()

    @classmethod
    def from_config(
        cls,
        config: ScaleConfig,
        *,
        store: MeasurementStore | None = None,
        clock: Callable[[], datetime] = _utcnow,
        start_reviewer: bool = True,
    ) -> ScaleState:
        return cls(
            capacity=config.buffer_size,
            store=store,
            plausibility=PlausibilityFilter(config.min_weight, config.max_weight),
            staleness_threshold=timedelta(seconds=config.staleness_threshold),
            review_interval=config.review_interval,
            clock=clock,
            start_reviewer=start_reviewer,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> ScaleState:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def start(self) -> None:
        """Start the background reviewer if it is not running."""
        self._reviewer.start()

    def close(self) -> None:
        """Stop the background reviewer."""
        self._reviewer.stop()

    @property
    def reviewer_running(self) -> bool:
        return self._reviewer.is_running

    def _load_from_store(self) -> None:
        try:
            stored = self._store.load_recent_measurements()
        except PersistenceFailure as exc:
            _logger.warning("Could not load measurements, starting empty: %s", exc)
            stored = []

        # Only the newest `capacity` samples fit; replay them oldest first.
        seed = stored[-self._ledger.capacity :] if stored else []
        with self._lock:
            for measurement in seed:
                self._ledger.append(measurement.weight, measurement.recorded_at)
        if seed:
            _logger.info("Seeded ledger with %d stored measurements", len(seed))

        try:
            active_keg = self._store.load_active_keg()
        except PersistenceFailure as exc:
            _logger.warning("Could not load active keg: %s", exc)
            active_keg = None
        if active_keg is not None:
            with self._lock:
                self._active_keg = active_keg

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return self._ledger.capacity

    @property
    def valid_count(self) -> int:
        with self._lock:
            return self._ledger.valid_count

    def append(self, weight: float) -> AppendResult:
        """Record a weight sample and forward it to the store.

        Implausible weights are dropped with a log notice. A store
        failure is reported through ``AppendResult.warning`` and does not
        undo the in-memory write.
        """
        try:
            self._plausibility.check(weight)
        except ImplausibleReading as exc:
            _logger.info("Ignoring reading: %s", exc)
            return AppendResult(rejected=True)

        with self._lock:
            measurement = self._ledger.append(weight, self._clock())

        try:
            self._store.save_measurement(measurement)
        except PersistenceFailure as exc:
            _logger.warning("Measurement #%d kept in memory only: %s", measurement.sequence, exc)
            return AppendResult(measurement=measurement, persisted=False, warning=str(exc))
        return AppendResult(measurement=measurement, persisted=True)

    def read_relative(self, offset: int) -> Measurement:
        with self._lock:
            return self._ledger.read_relative(offset)

    def last_measurement(self) -> Measurement:
        return self.read_relative(0)

    def has_last_n(self, n: int) -> bool:
        with self._lock:
            return self._ledger.has_last_n(n)

    def sum_last_n(self, n: int) -> float:
        with self._lock:
            return self._ledger.sum_last_n(n)

    def average_last_n(self, n: int) -> float:
        with self._lock:
            return self._ledger.average_last_n(n)

    def recent(self, n: int | None = None) -> list[Measurement]:
        """Valid measurements, newest first."""
        with self._lock:
            return self._ledger.recent(n)

    def require_last(self, n: int) -> list[Measurement]:
        """Return the ``n`` newest measurements or raise :class:`EmptyLedgerAccess`."""
        with self._lock:
            if not self._ledger.has_last_n(n):
                raise EmptyLedgerAccess(n, self._ledger.valid_count)
            return self._ledger.recent(n)

    # ------------------------------------------------------------------
    # Liveness / venue
    # ------------------------------------------------------------------

    def record_contact(self, signal: float | None = None) -> bool:
        """Register that the scale talked to us.

        Any contact counts as activity, so a closed venue opens right
        away. Returns whether the venue transitioned to open.
        """
        with self._lock:
            now = self._clock()
            self._liveness.record_contact(now, signal)
            return self._venue.on_contact(now)

    def is_ok(self) -> bool:
        with self._lock:
            return self._liveness.is_ok(self._clock())

    def reevaluate(self) -> bool:
        """Close the venue if the scale went silent. Returns whether it transitioned."""
        with self._lock:
            now = self._clock()
            return self._venue.reevaluate(now, self._liveness.is_ok(now))

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._venue.is_open

    # ------------------------------------------------------------------
    # Active keg
    # ------------------------------------------------------------------

    @property
    def active_keg(self) -> int:
        with self._lock:
            return self._active_keg

    def set_active_keg(self, keg: int) -> str | None:
        """Switch the active keg size (litres). Returns a warning if not persisted."""
        if keg < 0:
            raise ValueError(f"keg must be non-negative, got {keg}")
        with self._lock:
            self._active_keg = keg
        try:
            self._store.save_active_keg(keg)
        except PersistenceFailure as exc:
            _logger.warning("Active keg %d kept in memory only: %s", keg, exc)
            return str(exc)
        return None

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> ScaleStatus:
        """Re-evaluate the venue and return a consistent status snapshot."""
        with self._lock:
            now = self._clock()
            self._venue.reevaluate(now, self._liveness.is_ok(now))
            last = self._ledger.read_relative(0)
            last_measurement = None if last.is_empty else last
            return ScaleStatus(
                taken_at=now,
                ok=self._liveness.is_ok(now),
                last_contact_at=self._liveness.last_contact_at,
                last_contact_age=self._liveness.contact_age(now).total_seconds(),
                signal=self._liveness.last_signal,
                last_measurement=last_measurement,
                last_measurement_age=(
                    (now - last.recorded_at).total_seconds() if last_measurement is not None else None
                ),
                venue=self._venue.status(now),
                active_keg=self._active_keg,
                valid_count=self._ledger.valid_count,
                capacity=self._ledger.capacity,
            )
