"""Redis-backed measurement store."""

from __future__ import annotations

import logging
from typing import Any

import redis
from pydantic import ValidationError

from kegscale.exceptions import PersistenceFailure
from kegscale.models.measurement import Measurement
from kegscale.persistence.base import DEFAULT_RETENTION

_logger = logging.getLogger(__name__)

ACTIVE_KEG_KEY = "active_keg"
MEASUREMENT_LIST_KEY = "measurements"


class RedisStore:
    """Durable store on a Redis list plus a single string key.

    Measurements are JSON documents appended with ``RPUSH`` and trimmed to
    the newest ``retention`` entries by ``LTRIM`` in the same MULTI/EXEC
    pipeline, so older history is dropped rather than archived.

    ``client`` may be any object with the redis-py list/string API, which
    keeps the store testable without a server.
    """

    def __init__(self, client: Any, *, retention: int = DEFAULT_RETENTION) -> None:
        if retention < 1:
            raise ValueError("retention must be at least 1")
        self._client = client
        self._retention = retention

    @classmethod
    def from_url(cls, url: str, *, retention: int = DEFAULT_RETENTION) -> RedisStore:
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=5.0,
            socket_connect_timeout=5.0,
        )
        _logger.info("Redis store configured: %s", url.split("@")[-1])
        return cls(client, retention=retention)

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            close()

    def save_measurement(self, measurement: Measurement) -> None:
        payload = measurement.model_dump_json()
        try:
            with self._client.pipeline(transaction=True) as pipe:
                pipe.rpush(MEASUREMENT_LIST_KEY, payload)
                pipe.ltrim(MEASUREMENT_LIST_KEY, -self._retention, -1)
                pipe.execute()
        except redis.RedisError as exc:
            raise PersistenceFailure(
                f"could not store measurement: {exc}",
                operation="save_measurement",
            ) from exc

    def load_recent_measurements(self) -> list[Measurement]:
        try:
            values = self._client.lrange(MEASUREMENT_LIST_KEY, 0, -1)
        except redis.RedisError as exc:
            raise PersistenceFailure(
                f"could not load measurements: {exc}",
                operation="load_recent_measurements",
            ) from exc

        measurements: list[Measurement] = []
        for value in values:
            try:
                measurements.append(Measurement.model_validate_json(value))
            except ValidationError as exc:
                raise PersistenceFailure(
                    f"stored measurement is unreadable: {exc}",
                    operation="load_recent_measurements",
                ) from exc
        return measurements

    def save_active_keg(self, keg: int) -> None:
        try:
            self._client.set(ACTIVE_KEG_KEY, keg)
        except redis.RedisError as exc:
            raise PersistenceFailure(
                f"could not store active keg: {exc}",
                operation="save_active_keg",
            ) from exc

    def load_active_keg(self) -> int | None:
        try:
            value = self._client.get(ACTIVE_KEG_KEY)
        except redis.RedisError as exc:
            raise PersistenceFailure(
                f"could not load active keg: {exc}",
                operation="load_active_keg",
            ) from exc
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise PersistenceFailure(
                f"stored active keg is not an integer: {value!r}",
                operation="load_active_keg",
            ) from exc
