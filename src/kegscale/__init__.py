"""kegscale - Keg scale telemetry ingestion and venue status service."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("kegscale")
except PackageNotFoundError:
    __version__ = "0+local"
from kegscale.config import ScaleConfig
from kegscale.exceptions import (
    ConfigError,
    EmptyLedgerAccess,
    ImplausibleReading,
    KegScaleError,
    ParseError,
    PersistenceFailure,
)
from kegscale.ingestion import IngestionCoordinator
from kegscale.models import (
    EMPTY_MEASUREMENT,
    AppendResult,
    IngestResult,
    Measurement,
    MessageType,
    ScaleMessage,
    ScaleStatus,
    VenueStatus,
)
from kegscale.parser import parse_scale_message
from kegscale.persistence import InMemoryStore, MeasurementStore, NullStore, RedisStore
from kegscale.state import ScaleState

__all__ = [
    "__version__",
    "EMPTY_MEASUREMENT",
    "AppendResult",
    "ConfigError",
    "EmptyLedgerAccess",
    "ImplausibleReading",
    "IngestResult",
    "IngestionCoordinator",
    "InMemoryStore",
    "KegScaleError",
    "Measurement",
    "MeasurementStore",
    "MessageType",
    "NullStore",
    "ParseError",
    "PersistenceFailure",
    "RedisStore",
    "ScaleConfig",
    "ScaleMessage",
    "ScaleState",
    "ScaleStatus",
    "VenueStatus",
    "parse_scale_message",
]
