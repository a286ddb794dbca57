"""Read-only status snapshots and operation results."""

from __future__ import annotations

from pydantic import Field

from kegscale.models._base import KegBaseModel, UtcDatetime
from kegscale.models.measurement import Measurement


class VenueStatus(KegBaseModel):
    """Inferred open/closed state of the venue.

    ``duration`` is the number of seconds spent in the current state,
    measured from ``opened_at`` or ``closed_at`` respectively.
    """

    is_open: bool
    opened_at: UtcDatetime
    closed_at: UtcDatetime
    duration: float = Field(default=0.0, ge=0.0)


class ScaleStatus(KegBaseModel):
    """Point-in-time snapshot of everything the scale state exposes."""

    taken_at: UtcDatetime
    ok: bool
    last_contact_at: UtcDatetime
    last_contact_age: float
    signal: float
    last_measurement: Measurement | None = None
    last_measurement_age: float | None = None
    venue: VenueStatus
    active_keg: int = 0
    valid_count: int = 0
    capacity: int = 0


class AppendResult(KegBaseModel):
    """Outcome of a ledger append.

    ``measurement`` is ``None`` when the weight was rejected by the
    plausibility filter. ``warning`` carries the persistence failure
    message when the durable copy could not be written; the in-memory
    ledger keeps the sample regardless.
    """

    measurement: Measurement | None = None
    rejected: bool = False
    persisted: bool = False
    warning: str | None = None

    @property
    def accepted(self) -> bool:
        return self.measurement is not None


class IngestResult(KegBaseModel):
    """Outcome of handling one telemetry message."""

    message_type: str
    message_id: int
    append: AppendResult | None = None

    @property
    def warnings(self) -> list[str]:
        if self.append is None or self.append.warning is None:
            return []
        return [self.append.warning]
