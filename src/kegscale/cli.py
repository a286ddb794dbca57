"""Command line entry point: ``kegscale serve`` and ``kegscale parse``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence

from aiohttp import web

from kegscale.config import ScaleConfig
from kegscale.exceptions import ConfigError, ParseError
from kegscale.ingestion.coordinator import IngestionCoordinator
from kegscale.metrics import ScaleMetrics
from kegscale.mqtt import MqttTelemetryReceiver
from kegscale.parser import parse_scale_message
from kegscale.persistence import InMemoryStore, MeasurementStore, RedisStore
from kegscale.server import create_app
from kegscale.state.scale import ScaleState

_logger = logging.getLogger("kegscale")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kegscale", description="Keg scale telemetry service")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP (and optional MQTT) telemetry service")
    serve.add_argument("--host", help="Listen address (default: KEGSCALE_HTTP_HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, help="Listen port (default: KEGSCALE_HTTP_PORT or 8080)")
    serve.add_argument("--log-level", help="Logging level (default: KEGSCALE_LOG_LEVEL or INFO)")

    parse = sub.add_parser("parse", help="Parse a telemetry message and print it as JSON")
    parse.add_argument("raw", help='Raw message, e.g. "push|2887417|-74.7|1923.23"')
    return parser


def _build_store(config: ScaleConfig) -> MeasurementStore:
    if config.redis_url:
        return RedisStore.from_url(config.redis_url, retention=config.redis_retention)
    _logger.warning("KEGSCALE_REDIS_URL not set; measurement history is kept in memory only")
    return InMemoryStore(retention=config.redis_retention)


def _serve(config: ScaleConfig) -> int:
    store = _build_store(config)
    state = ScaleState.from_config(config, store=store)
    coordinator = IngestionCoordinator(state)

    receiver: MqttTelemetryReceiver | None = None
    if config.mqtt_host:
        receiver = MqttTelemetryReceiver.from_config(coordinator, config)
        receiver.start()

    app = create_app(coordinator, auth_token=config.auth_token, metrics=ScaleMetrics())

    async def _shutdown(_app: web.Application) -> None:
        if receiver is not None:
            receiver.stop()
        state.close()
        if isinstance(store, RedisStore):
            store.close()

    app.on_cleanup.append(_shutdown)
    _logger.info("Serving on %s:%d", config.http_host, config.http_port)
    web.run_app(app, host=config.http_host, port=config.http_port, print=None)
    return 0


def _parse(raw: str) -> int:
    try:
        message = parse_scale_message(raw)
    except ParseError as exc:
        print(f"error ({exc.field}): {exc}", file=sys.stderr)
        return 1
    print(json.dumps(message.model_dump(), indent=2))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.command == "parse":
        return _parse(args.raw)

    overrides: dict[str, object] = {}
    if args.host:
        overrides["http_host"] = args.host
    if args.port is not None:
        overrides["http_port"] = args.port
    if args.log_level:
        overrides["log_level"] = args.log_level
    try:
        config = ScaleConfig.from_env(**overrides)
    except ConfigError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return _serve(config)


if __name__ == "__main__":
    raise SystemExit(main())
