"""Prometheus gauges for the scale."""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, generate_latest

from kegscale.models.status import ScaleStatus

__all__ = ["CONTENT_TYPE_LATEST", "ScaleMetrics"]


class ScaleMetrics:
    """Gauges refreshed from :class:`ScaleStatus` snapshots.

    Each instance owns its registry, so several states (or tests) can
    coexist in one process without duplicate registration errors.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.keg_weight = Gauge(
            "scale_keg_weight",
            "Current weight of the keg in grams",
            registry=self.registry,
        )
        self.active_keg = Gauge(
            "scale_active_keg",
            "Size of current keg in liters",
            registry=self.registry,
        )
        self.wifi_rssi = Gauge(
            "scale_wifi_rssi",
            "Current WiFi RSSI",
            registry=self.registry,
        )
        self.last_update = Gauge(
            "scale_last_update",
            "Last contact with the scale (unix time)",
            registry=self.registry,
        )
        self.pub_open = Gauge(
            "scale_pub_open",
            "Is the pub open/closed",
            registry=self.registry,
        )

    def observe(self, status: ScaleStatus) -> None:
        if status.last_measurement is not None:
            self.keg_weight.set(status.last_measurement.weight)
        self.active_keg.set(status.active_keg)
        self.wifi_rssi.set(status.signal)
        self.last_update.set(status.last_contact_at.timestamp())
        self.pub_open.set(1 if status.venue.is_open else 0)

    def render(self) -> bytes:
        return generate_latest(self.registry)
