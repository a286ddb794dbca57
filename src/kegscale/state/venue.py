"""Venue open/closed state machine.

The venue is considered open while the scale keeps talking to us:

- ``CLOSED -> OPEN`` happens synchronously on any contact.
- ``OPEN -> CLOSED`` happens only on re-evaluation, once the scale has
  been silent for the staleness threshold. ``closed_at`` is backdated
  to when the silence began so the open duration does not include the
  detection delay.

Re-evaluation never changes a state that is consistent with liveness,
so it is safe to run it from the background reviewer and before every
status query.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from enum import StrEnum

from kegscale.models._base import FAR_PAST
from kegscale.models.status import VenueStatus

_logger = logging.getLogger(__name__)


class VenueState(StrEnum):
    OPEN = "open"
    CLOSED = "closed"


class VenueStateMachine:
    """Mutable venue status. Unsynchronised; guarded by ``ScaleState``."""

    def __init__(self, staleness_threshold: timedelta) -> None:
        self._threshold = staleness_threshold
        self.state = VenueState.CLOSED
        self.opened_at: datetime = FAR_PAST
        self.closed_at: datetime = FAR_PAST

    @property
    def is_open(self) -> bool:
        return self.state == VenueState.OPEN

    def on_contact(self, now: datetime) -> bool:
        """Open the venue if it is closed. Returns whether it transitioned."""
        if self.state == VenueState.OPEN:
            return False
        self.state = VenueState.OPEN
        self.opened_at = now
        _logger.info("Venue opened at %s", now.isoformat())
        return True

    def reevaluate(self, now: datetime, liveness_ok: bool) -> bool:
        """Close the venue if liveness was lost. Returns whether it transitioned."""
        if liveness_ok or self.state == VenueState.CLOSED:
            return False
        self.state = VenueState.CLOSED
        self.closed_at = now - self._threshold
        _logger.info(
            "Venue closed, no contact since %s (detected at %s)",
            self.closed_at.isoformat(),
            now.isoformat(),
        )
        return True

    def status(self, now: datetime) -> VenueStatus:
        since = self.opened_at if self.is_open else self.closed_at
        return VenueStatus(
            is_open=self.is_open,
            opened_at=self.opened_at,
            closed_at=self.closed_at,
            duration=max(0.0, (now - since).total_seconds()),
        )
