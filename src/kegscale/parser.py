"""Telemetry message grammar.

The scale sends one message per request (or MQTT publish) as pipe
delimited text::

    type|message_id|rssi|value

``value`` may be empty or missing and then parses as ``0``. Firmware
builds differ in whether they terminate the message with a pipe, so
empty trailing fields are ignored.
"""

from __future__ import annotations

import math

from kegscale.exceptions import ParseError
from kegscale.models.message import ScaleMessage

_SEPARATOR = "|"
_FIELDS = ("type", "message_id", "rssi", "value")
_MIN_FIELDS = 3


def _strip_trailing_empty(chunks: list[str]) -> list[str]:
    while chunks and not chunks[-1].strip():
        chunks.pop()
    return chunks


def _parse_int(raw: str, field: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ParseError(f"Invalid {field}: {raw!r} is not an integer", field=field) from exc


def _parse_float(raw: str, field: str) -> float:
    try:
        result = float(raw.strip())
    except ValueError as exc:
        raise ParseError(f"Invalid {field}: {raw!r} is not a number", field=field) from exc
    if not math.isfinite(result):
        raise ParseError(f"Invalid {field}: {raw!r} is not a finite number", field=field)
    return result


def decode_payload(raw: bytes | str) -> str:
    """Decode a transport payload into message text."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError("Message is not valid UTF-8") from exc
    return raw.strip()


def parse_scale_message(raw: bytes | str) -> ScaleMessage:
    """Parse a telemetry message.

    Parameters
    ----------
    raw
        Message text or raw transport payload (UTF-8).

    Returns
    -------
    ScaleMessage
        Typed message. ``value`` is ``0`` when absent.

    Raises
    ------
    ParseError
        Fewer than three fields, unexpected extra data, or a non-numeric
        ``message_id``/``rssi``/``value``. ``ParseError.field`` names the
        offending field.
    """
    text = decode_payload(raw)
    chunks = _strip_trailing_empty(text.split(_SEPARATOR))

    if len(chunks) < _MIN_FIELDS:
        raise ParseError(
            f"Expected at least {_MIN_FIELDS} fields ({'|'.join(_FIELDS[:_MIN_FIELDS])}), got {len(chunks)}",
        )
    if len(chunks) > len(_FIELDS):
        raise ParseError(f"Unexpected data after value field: {chunks[len(_FIELDS):]!r}")

    message_type = chunks[0].strip()
    if not message_type:
        raise ParseError("Message type is empty", field="type")

    message_id = _parse_int(chunks[1], "message_id")
    rssi = _parse_float(chunks[2], "rssi")

    value = 0.0
    if len(chunks) > 3 and chunks[3].strip():
        value = _parse_float(chunks[3], "value")

    return ScaleMessage(
        message_type=message_type,
        message_id=message_id,
        rssi=rssi,
        value=value,
    )
