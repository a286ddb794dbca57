"""kegscale data models."""

from kegscale.models._base import FAR_PAST, KegBaseModel
from kegscale.models.measurement import EMPTY_MEASUREMENT, Measurement
from kegscale.models.message import MessageType, ScaleMessage
from kegscale.models.status import AppendResult, IngestResult, ScaleStatus, VenueStatus

__all__ = [
    "EMPTY_MEASUREMENT",
    "FAR_PAST",
    "AppendResult",
    "IngestResult",
    "KegBaseModel",
    "Measurement",
    "MessageType",
    "ScaleMessage",
    "ScaleStatus",
    "VenueStatus",
]
