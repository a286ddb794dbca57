"""Weight measurement model."""

from __future__ import annotations

from pydantic import Field

from kegscale.models._base import FAR_PAST, KegBaseModel, UtcDatetime


class Measurement(KegBaseModel):
    """A single weight sample recorded in the ledger.

    Parameters
    ----------
    slot_index : int
        Ring buffer slot the sample was written to. Only meaningful for the
        ledger generation that produced it; slots are reused after a wrap.
        ``-1`` marks the empty sentinel.
    weight : float
        Weight in grams.
    recorded_at : datetime
        Capture time (UTC).
    sequence : int
        Logical sequence number, strictly increasing per accepted append
        and never reused. ``0`` for the empty sentinel.
    """

    slot_index: int = Field(..., ge=-1)
    weight: float
    recorded_at: UtcDatetime
    sequence: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        """Whether this is the sentinel returned for out-of-range reads."""
        return self.slot_index < 0


EMPTY_MEASUREMENT = Measurement(slot_index=-1, weight=0.0, recorded_at=FAR_PAST)
"""Sentinel returned when a read falls outside the valid window."""
