"""Service configuration for kegscale."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from kegscale.exceptions import ConfigError


def _env_number(env: Mapping[str, str], key: str, cast: type) -> Any:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{key} must be a {cast.__name__}, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class ScaleConfig:
    """Service configuration.

    Parameters
    ----------
    buffer_size : int
        Capacity of the in-memory measurement ledger.
    min_weight : float
        Lowest plausible reading in grams. Anything below is discarded
        as a sensor glitch (an empty keg still weighs several kilos).
    max_weight : float
        Highest plausible reading in grams.
    staleness_threshold : float
        Seconds without contact after which the scale counts as
        unreachable and the venue may be closed.
    review_interval : float
        Seconds between background venue re-evaluations.
    auth_token : str
        Value the ``Authorization`` header of telemetry requests must
        carry. Empty rejects every telemetry request.
    redis_url : str or None
        Redis connection URL. ``None`` keeps history in memory only.
    redis_retention : int
        Number of measurements kept in durable storage.
    http_host : str
        Listen address of the HTTP adapter.
    http_port : int
        Listen port of the HTTP adapter.
    mqtt_host : str or None
        MQTT broker host. ``None`` disables the MQTT receiver.
    mqtt_port : int
        MQTT broker port.
    mqtt_topic : str
        Topic the scale publishes telemetry to.
    mqtt_username : str or None
        Optional broker username.
    mqtt_password : str or None
        Optional broker password.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    log_level : str
        Root logging level used by the CLI.
    """

    buffer_size: int = 100
    min_weight: float = 6000.0
    max_weight: float = 65000.0
    staleness_threshold: float = 5 * 60
    review_interval: float = 15.0
    auth_token: str = ""
    redis_url: str | None = None
    redis_retention: int = 1000
    http_host: str = "0.0.0.0"
    http_port: int = 8080
    mqtt_host: str | None = None
    mqtt_port: int = 1883
    mqtt_topic: str = "kegscale/telemetry"
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    mqtt_keepalive: int = 120
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.buffer_size < 1:
            raise ConfigError(f"buffer_size must be at least 1, got {self.buffer_size}")
        if self.min_weight >= self.max_weight:
            raise ConfigError(
                f"min_weight ({self.min_weight}) must be lower than max_weight ({self.max_weight})"
            )
        if self.staleness_threshold <= 0:
            raise ConfigError("staleness_threshold must be positive")
        if self.review_interval <= 0:
            raise ConfigError("review_interval must be positive")
        if self.redis_retention < 1:
            raise ConfigError("redis_retention must be at least 1")

    @classmethod
    def from_env(cls, **overrides: Any) -> ScaleConfig:
        """Create configuration from environment variables.

        Reads optional ``KEGSCALE_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ScaleConfig
            Populated configuration.

        Raises
        ------
        ConfigError
            A numeric variable holds a non-numeric value, or the
            resulting configuration is inconsistent.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "KEGSCALE_AUTH_TOKEN": "auth_token",
            "KEGSCALE_REDIS_URL": "redis_url",
            "KEGSCALE_HTTP_HOST": "http_host",
            "KEGSCALE_MQTT_HOST": "mqtt_host",
            "KEGSCALE_MQTT_TOPIC": "mqtt_topic",
            "KEGSCALE_MQTT_USERNAME": "mqtt_username",
            "KEGSCALE_MQTT_PASSWORD": "mqtt_password",
            "KEGSCALE_LOG_LEVEL": "log_level",
        }
        _ENV_NUMBER_MAP: dict[str, tuple[str, type]] = {
            "KEGSCALE_BUFFER_SIZE": ("buffer_size", int),
            "KEGSCALE_MIN_WEIGHT": ("min_weight", float),
            "KEGSCALE_MAX_WEIGHT": ("max_weight", float),
            "KEGSCALE_STALENESS_THRESHOLD": ("staleness_threshold", float),
            "KEGSCALE_REVIEW_INTERVAL": ("review_interval", float),
            "KEGSCALE_REDIS_RETENTION": ("redis_retention", int),
            "KEGSCALE_HTTP_PORT": ("http_port", int),
            "KEGSCALE_MQTT_PORT": ("mqtt_port", int),
            "KEGSCALE_MQTT_KEEPALIVE": ("mqtt_keepalive", int),
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            # Empty optional endpoints mean "disabled", same as unset.
            if val is not None and (val or field_name == "auth_token"):
                config_kwargs[field_name] = val

        for env_key, (field_name, cast) in _ENV_NUMBER_MAP.items():
            if field_name in overrides:
                continue
            val = _env_number(env, env_key, cast)
            if val is not None:
                config_kwargs[field_name] = val

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
