"""aiohttp HTTP adapter for the scale.

Routes::

    POST /api/scale/message      telemetry from the scale (authenticated)
    PUT  /api/scale/active-keg   switch the active keg size (authenticated)
    GET  /api/scale/status       full status snapshot as JSON
    GET  /api/scale/dashboard    compact, human oriented summary
    GET  /api/scale/print        recent weights as ``"%.2f;"`` text
    GET  /metrics                Prometheus exposition
    GET  /health                 liveness probe of the service itself

Every call into the scale state runs in a worker thread
(``asyncio.to_thread``) so its lock is never taken on the event loop.
"""

from __future__ import annotations

import asyncio
import hmac
import logging

from aiohttp import web

from kegscale.exceptions import ParseError
from kegscale.ingestion.coordinator import IngestionCoordinator
from kegscale.metrics import CONTENT_TYPE_LATEST, ScaleMetrics
from kegscale.state.scale import ScaleState

_logger = logging.getLogger(__name__)

COORDINATOR_KEY = web.AppKey("coordinator", IngestionCoordinator)
METRICS_KEY = web.AppKey("metrics", ScaleMetrics)
AUTH_TOKEN_KEY = web.AppKey("auth_token", str)

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_DURATION_UNITS = (
    ("d", 86400),
    ("h", 3600),
    ("m", 60),
    ("s", 1),
)


def format_duration(seconds: float, *, limit: int = 2) -> str:
    """Render a duration with its ``limit`` most significant units (``"2h 5m"``)."""
    remaining = max(0, round(seconds))
    if remaining == 0:
        return "0s"
    parts: list[str] = []
    for suffix, size in _DURATION_UNITS:
        amount, remaining = divmod(remaining, size)
        if amount:
            parts.append(f"{amount}{suffix}")
        if len(parts) == limit:
            break
    return " ".join(parts)


def _state(request: web.Request) -> ScaleState:
    return request.app[COORDINATOR_KEY].state


def _authorized(request: web.Request) -> bool:
    expected = request.app[AUTH_TOKEN_KEY]
    if not expected:
        return False
    provided = request.headers.get("Authorization", "")
    return hmac.compare_digest(provided.encode(), expected.encode())


async def _handle_message(request: web.Request) -> web.Response:
    if not _authorized(request):
        raise web.HTTPUnauthorized(text="Unauthorized")

    body = await request.read()
    coordinator = request.app[COORDINATOR_KEY]
    try:
        result = await asyncio.to_thread(coordinator.handle_message, body)
    except ParseError as exc:
        _logger.warning("Could not parse scale message: %r because %s", body, exc)
        raise web.HTTPBadRequest(text=str(exc)) from exc

    for warning in result.warnings:
        _logger.warning("Scale message %d: %s", result.message_id, warning)
    return web.Response(text="OK")


async def _handle_active_keg(request: web.Request) -> web.Response:
    if not _authorized(request):
        raise web.HTTPUnauthorized(text="Unauthorized")

    body = (await request.text()).strip()
    try:
        keg = int(body)
    except ValueError as exc:
        raise web.HTTPBadRequest(text=f"Active keg must be an integer, got {body!r}") from exc
    if keg < 0:
        raise web.HTTPBadRequest(text="Active keg must be non-negative")

    warning = await asyncio.to_thread(_state(request).set_active_keg, keg)
    if warning is not None:
        _logger.warning("Active keg not persisted: %s", warning)
    return web.json_response({"active_keg": keg, "persisted": warning is None})


async def _handle_status(request: web.Request) -> web.Response:
    status = await asyncio.to_thread(_state(request).snapshot)
    return web.Response(text=status.model_dump_json(), content_type="application/json")


async def _handle_dashboard(request: web.Request) -> web.Response:
    status = await asyncio.to_thread(_state(request).snapshot)
    last = status.last_measurement
    if last is None:
        return web.Response(status=425, text="No measurements yet")

    return web.json_response(
        {
            "is_ok": status.ok,
            "is_open": status.venue.is_open,
            "last_weight": last.weight,
            # Key spelling is what deployed dashboards read.
            "last_weight_formated": f"{last.weight / 1000:.2f}",
            "last_at": last.recorded_at.strftime(_TIMESTAMP_FORMAT),
            "last_at_duration": format_duration(status.last_measurement_age or 0.0),
            "rssi": status.signal,
            "last_update": status.last_contact_at.strftime(_TIMESTAMP_FORMAT),
            "last_update_duration": format_duration(status.last_contact_age),
        }
    )


async def _handle_print(request: web.Request) -> web.Response:
    recent = await asyncio.to_thread(_state(request).recent)
    return web.Response(text="".join(f"{m.weight:.2f};" for m in recent))


async def _handle_metrics(request: web.Request) -> web.Response:
    metrics = request.app[METRICS_KEY]
    status = await asyncio.to_thread(_state(request).snapshot)
    metrics.observe(status)
    response = web.Response(body=metrics.render())
    response.headers["Content-Type"] = CONTENT_TYPE_LATEST
    return response


async def _handle_health(_: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


def create_app(
    coordinator: IngestionCoordinator,
    *,
    auth_token: str,
    metrics: ScaleMetrics | None = None,
) -> web.Application:
    """Build the aiohttp application around an ingestion coordinator."""
    if not auth_token:
        _logger.warning("No auth token configured; telemetry requests will be rejected")

    app = web.Application()
    app[COORDINATOR_KEY] = coordinator
    app[METRICS_KEY] = metrics or ScaleMetrics()
    app[AUTH_TOKEN_KEY] = auth_token

    app.router.add_post("/api/scale/message", _handle_message)
    app.router.add_put("/api/scale/active-keg", _handle_active_keg)
    app.router.add_get("/api/scale/status", _handle_status)
    app.router.add_get("/api/scale/dashboard", _handle_dashboard)
    app.router.add_get("/api/scale/print", _handle_print)
    app.router.add_get("/metrics", _handle_metrics)
    app.router.add_get("/health", _handle_health)
    return app
