"""Base model and timestamp helpers shared by kegscale models.

Every kegscale model inherits from :class:`KegBaseModel`, which is
frozen so snapshots handed out of the state lock cannot be mutated
behind the lock's back.

Timestamps are always timezone-aware UTC datetimes. Naive datetimes
(e.g. from an old store entry) are assumed to already be UTC.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict

#: Far-past sentinel used before the first contact or venue transition.
#: Ages computed against it are huge but finite.
FAR_PAST = datetime(1970, 1, 1, tzinfo=UTC)


def ensure_utc(value: Any) -> Any:
    """Attach UTC to naive datetimes; leave everything else to pydantic."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


UtcDatetime = Annotated[datetime, BeforeValidator(ensure_utc)]
"""Annotated type that coerces naive datetimes to UTC."""


class KegBaseModel(BaseModel):
    """Base for kegscale models: immutable, no unknown fields."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
    )
