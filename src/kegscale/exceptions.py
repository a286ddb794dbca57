"""Custom exception hierarchy for kegscale."""

from __future__ import annotations


class KegScaleError(Exception):
    """Base exception for all kegscale errors."""


class ConfigError(KegScaleError):
    """Invalid or missing configuration."""


class ParseError(KegScaleError):
    """Inbound telemetry message could not be parsed.

    ``field`` names the part of the message that was malformed
    (``"type"``, ``"message_id"``, ``"rssi"``, ``"value"``) or
    ``"message"`` when the message has too few fields.
    """

    def __init__(self, message: str, *, field: str = "message") -> None:
        self.field = field
        super().__init__(message)


class ImplausibleReading(KegScaleError):
    """Weight outside the configured plausibility bounds.

    Never reported back to the sender; the ledger treats it as a no-op.
    """

    def __init__(self, weight: float, *, minimum: float, maximum: float) -> None:
        self.weight = weight
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(f"Implausible weight {weight:.2f} (allowed {minimum:.2f}..{maximum:.2f})")


class PersistenceFailure(KegScaleError):
    """Durable store unavailable or returned unreadable data."""

    def __init__(self, message: str, *, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)


class EmptyLedgerAccess(KegScaleError):
    """More historical samples were requested than the ledger holds."""

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(f"Requested {requested} measurements but only {available} available")
