"""Telemetry message models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from kegscale.models._base import KegBaseModel


class MessageType(StrEnum):
    PUSH = "push"
    PING = "ping"


class ScaleMessage(KegBaseModel):
    """A parsed ``type|message_id|rssi|value`` telemetry message.

    ``message_type`` is kept as the raw token so unknown types still
    count as contact; compare against :class:`MessageType` members.
    """

    message_type: str = Field(..., min_length=1)
    message_id: int
    rssi: float
    value: float = 0.0

    @property
    def is_push(self) -> bool:
        return self.message_type == MessageType.PUSH
