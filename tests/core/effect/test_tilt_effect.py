"""Tests for the TiltShineEffect component wiring."""

from __future__ import annotations

import asyncio

import numpy as np
import pytest

from core.effect.effect_state import LinePolicy
from core.effect.tilt_effect import TiltShineEffect
from core.orientation.capability import SensorCapability
from core.orientation.orientation_source import SourceMode
from core.orientation.permission_gate import PermissionStatus
from core.orientation.platforms import ORIENTATION_EVENT, EventPlatform, ReplayPlatform
from utils.config_sections import EffectConfig, FlickerConfig


class RecordingTelemetry:
    def __init__(self) -> None:
        self.capability = None
        self.modes = []
        self.permissions = []
        self.samples = []
        self.states = 0
        self.ticks = []
        self.errors = []

    def log_capability(self, capability):
        self.capability = capability

    def log_source_mode(self, mode):
        self.modes.append(mode)

    def log_permission(self, status, previous, reason=None):
        self.permissions.append(status)

    def log_sample(self, origin):
        self.samples.append(origin)

    def log_state_emitted(self):
        self.states += 1

    def log_flicker_tick(self, resampled):
        self.ticks.append(resampled)

    def log_error(self, error_type, message, **kwargs):
        self.errors.append(error_type)


@pytest.fixture()
def rendered():
    return []


def make_effect(platform, rendered, policy="pattern", tick_ms=50, telemetry=None):
    config = EffectConfig(line_policy=policy, flicker=FlickerConfig(tick_ms=tick_ms))
    return TiltShineEffect(
        platform,
        renderer=rendered.append,
        config=config,
        rng=np.random.default_rng(11),
        telemetry=telemetry,
    )


def test_start_presents_neutral_state(rendered):
    effect = make_effect(EventPlatform(), rendered)
    effect.start()

    assert len(rendered) == 1
    assert rendered[0].color.as_tuple() == (200, 200, 220)
    assert len(rendered[0].lines) == 40


def test_pointer_center_matches_neutral_color(rendered):
    platform = EventPlatform(640, 480)
    effect = make_effect(platform, rendered)
    effect.start()

    platform.emit_pointer(320, 240)

    assert effect.capability is SensorCapability.UNSUPPORTED
    assert rendered[-1].color == rendered[0].color


def test_sensor_sample_updates_state(rendered):
    platform = ReplayPlatform()
    telemetry = RecordingTelemetry()
    effect = make_effect(platform, rendered, telemetry=telemetry)
    effect.start()

    platform.emit_orientation(alpha=180.0, beta=0.0, gamma=90.0)

    assert rendered[-1].color.as_tuple() == (250, 200, 237)
    assert effect.source.mode is SourceMode.SENSOR
    assert telemetry.capability == "always_on"
    assert telemetry.samples == ["sensor"]
    assert telemetry.modes == ["pointer", "sensor"]


def test_no_updates_after_stop(rendered):
    platform = ReplayPlatform()
    effect = make_effect(platform, rendered)
    effect.start()
    effect.stop()
    count = len(rendered)

    platform.emit_orientation(alpha=10.0, beta=10.0, gamma=10.0)
    platform.emit_pointer(1.0, 1.0)

    assert len(rendered) == count
    assert platform.listener_count() == 0


def test_stop_before_start_and_twice(rendered):
    effect = make_effect(EventPlatform(), rendered, policy="flicker")
    effect.stop()
    effect.start()
    effect.stop()
    effect.stop()

    assert not effect.active
    assert not effect.flicker.running


def test_consent_flow_enables_sensor(rendered):
    platform = ReplayPlatform(requires_permission=True)
    telemetry = RecordingTelemetry()
    effect = make_effect(platform, rendered, telemetry=telemetry)
    effect.start()
    assert platform.listener_count(ORIENTATION_EVENT) == 0
    assert effect.permission_status is PermissionStatus.UNKNOWN

    status = asyncio.run(effect.request_permission())

    assert status is PermissionStatus.GRANTED
    assert telemetry.permissions == ["pending", "granted"]
    platform.emit_orientation(alpha=0.0, beta=-180.0, gamma=-90.0)
    assert rendered[-1].color.as_tuple() == (150, 150, 220)


def test_permission_is_never_requested_on_start(rendered):
    platform = ReplayPlatform(requires_permission=True)
    effect = make_effect(platform, rendered)
    effect.start()

    assert platform.permission_requests == 0


def test_flicker_policy_ticks_and_stops(rendered):
    platform = EventPlatform()
    telemetry = RecordingTelemetry()
    effect = make_effect(platform, rendered, policy="flicker", tick_ms=5, telemetry=telemetry)

    async def scenario():
        effect.start()
        await asyncio.sleep(0.08)
        effect.stop()
        count = len(rendered)
        await asyncio.sleep(0.03)
        return count

    count_at_stop = asyncio.run(scenario())

    assert count_at_stop > 1
    assert len(rendered) == count_at_stop
    assert len(telemetry.ticks) == count_at_stop - 1
    assert all(len(state.lines) == 40 for state in rendered)


def test_flicker_without_loop_degrades(rendered):
    telemetry = RecordingTelemetry()
    effect = make_effect(EventPlatform(), rendered, policy="flicker", telemetry=telemetry)

    effect.start()

    assert effect.active
    assert telemetry.errors == ["flicker_timer"]
    assert len(rendered) == 1


def test_renderer_failure_is_contained():
    def broken(state):
        raise RuntimeError("paint failed")

    platform = EventPlatform()
    effect = TiltShineEffect(platform, renderer=broken, config=EffectConfig())
    effect.start()
    platform.emit_pointer(10, 10)

    assert effect.updates == 2


def test_none_policy_renders_without_lines(rendered):
    effect = make_effect(EventPlatform(), rendered, policy="none")
    effect.start()

    assert effect.policy is LinePolicy.NONE
    assert rendered[0].lines == ()
