"""Telemetry ingestion coordinator."""

from __future__ import annotations

import logging

from kegscale.models.message import ScaleMessage
from kegscale.models.status import IngestResult
from kegscale.parser import parse_scale_message
from kegscale.state.scale import ScaleState

_logger = logging.getLogger(__name__)


class IngestionCoordinator:
    """Runs one telemetry message through the scale state.

    Authentication is the transport's job; payloads arriving here are
    trusted to come from the scale.
    """

    def __init__(self, state: ScaleState) -> None:
        self._state = state

    @property
    def state(self) -> ScaleState:
        return self._state

    def handle_message(self, raw: bytes | str) -> IngestResult:
        """Parse and apply a raw telemetry payload.

        Every well-formed message counts as contact and updates the
        signal reading. Only ``push`` messages write to the ledger.

        Raises
        ------
        ParseError
            Malformed payload. Nothing is mutated.
        """
        message = parse_scale_message(raw)
        return self.apply(message)

    def apply(self, message: ScaleMessage) -> IngestResult:
        """Apply an already parsed message."""
        self._state.record_contact(signal=message.rssi)

        if not message.is_push:
            _logger.debug("Scale %s message_id=%d rssi=%.1f", message.message_type, message.message_id, message.rssi)
            return IngestResult(message_type=message.message_type, message_id=message.message_id)

        append = self._state.append(message.value)
        if append.accepted:
            _logger.info("Scale new value: %0.2f (message_id=%d)", message.value, message.message_id)
        return IngestResult(
            message_type=message.message_type,
            message_id=message.message_id,
            append=append,
        )
