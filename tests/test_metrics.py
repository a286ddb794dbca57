from __future__ import annotations

from kegscale.metrics import ScaleMetrics
from kegscale.state.scale import ScaleState


def test_metrics_follow_snapshot(state: ScaleState, clock) -> None:
    metrics = ScaleMetrics()
    state.record_contact(signal=-72.0)
    state.append(25000.0)
    state.set_active_keg(30)

    metrics.observe(state.snapshot())
    registry = metrics.registry

    assert registry.get_sample_value("scale_keg_weight") == 25000.0
    assert registry.get_sample_value("scale_wifi_rssi") == -72.0
    assert registry.get_sample_value("scale_active_keg") == 30.0
    assert registry.get_sample_value("scale_pub_open") == 1.0
    assert registry.get_sample_value("scale_last_update") == clock.now.timestamp()

    clock.advance(minutes=6)
    metrics.observe(state.snapshot())
    assert registry.get_sample_value("scale_pub_open") == 0.0


def test_separate_instances_do_not_collide() -> None:
    first = ScaleMetrics()
    second = ScaleMetrics()

    assert b"scale_keg_weight" in first.render()
    assert b"scale_keg_weight" in second.render()
