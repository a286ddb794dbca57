"""State layer.

This package is the single source of truth for the scale: the
measurement ledger, reachability and the inferred venue status. Only
:class:`ScaleState` is meant to be used from outside; the other classes
are unsynchronised building blocks it guards with one lock.
"""

from kegscale.state.ledger import MeasurementLedger, PlausibilityFilter
from kegscale.state.liveness import STALENESS_THRESHOLD, LivenessTracker
from kegscale.state.reviewer import VenueReviewer
from kegscale.state.scale import ScaleState
from kegscale.state.venue import VenueState, VenueStateMachine

__all__ = [
    "STALENESS_THRESHOLD",
    "LivenessTracker",
    "MeasurementLedger",
    "PlausibilityFilter",
    "ScaleState",
    "VenueReviewer",
    "VenueState",
    "VenueStateMachine",
]
