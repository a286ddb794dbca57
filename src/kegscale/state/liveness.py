"""Scale reachability tracking."""

from __future__ import annotations

from datetime import datetime, timedelta

from kegscale.models._base import FAR_PAST

#: Contact older than this marks the scale as unreachable.
STALENESS_THRESHOLD = timedelta(minutes=5)


class LivenessTracker:
    """Last contact time and signal quality of the scale.

    Unsynchronised; owned and locked by
    :class:`kegscale.state.scale.ScaleState`.
    """

    def __init__(self, threshold: timedelta = STALENESS_THRESHOLD) -> None:
        if threshold <= timedelta(0):
            raise ValueError("threshold must be positive")
        self.threshold = threshold
        self.last_contact_at: datetime = FAR_PAST
        self.last_signal: float = 0.0

    def record_contact(self, now: datetime, signal: float | None = None) -> None:
        self.last_contact_at = now
        if signal is not None:
            self.last_signal = signal

    def is_ok(self, now: datetime) -> bool:
        return now - self.last_contact_at < self.threshold

    def contact_age(self, now: datetime) -> timedelta:
        return now - self.last_contact_at
