"""Ingestion layer.

Transport adapters (HTTP, MQTT) hand raw telemetry payloads to the
:class:`IngestionCoordinator`, which is the only path that writes to the
scale state.
"""

from kegscale.ingestion.coordinator import IngestionCoordinator

__all__ = ["IngestionCoordinator"]
