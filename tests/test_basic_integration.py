"""Basic integration test - effect, telemetry and session loggers together"""

from __future__ import annotations

import asyncio
import logging

import numpy as np

from core.effect.tilt_effect import TiltShineEffect
from core.orientation.platforms import ReplayPlatform
from core.telemetry.effect_telemetry import EffectTelemetryLogger
from core.telemetry.loggers.effect_logger import get_effect_logger, reset_effect_logger
from presentation.style_renderer import StyleRenderer
from utils.config_sections import EffectConfig, FlickerConfig


def test_logging_setup(tmp_path):
    """Session loggers write into the telemetry session folder"""
    telemetry = EffectTelemetryLogger(output_dir=tmp_path)
    try:
        effect_logger = get_effect_logger(session_dir=telemetry.get_session_dir())
        assert effect_logger.log_dir == telemetry.get_session_dir()

        logging.getLogger("effect.permission").info("Test permission log")
        assert (telemetry.get_session_dir() / "permission.log").exists()
        assert (telemetry.get_session_dir() / "sensor.log").exists()
    finally:
        reset_effect_logger()


def test_session_channels_route_to_own_files(tmp_path):
    """Each channel writes only its own file; close() hands records back to root"""
    effect_logger = get_effect_logger(session_dir=tmp_path)
    try:
        paths = effect_logger.paths()
        assert set(paths) == {"sensor", "permission", "flicker", "renderer"}

        logging.getLogger("effect.flicker").debug("Timer attached")
        assert "Timer attached" in paths["flicker"].read_text()
        assert "Timer attached" not in paths["sensor"].read_text()
        assert logging.getLogger("effect").propagate is False
    finally:
        reset_effect_logger()

    namespace = logging.getLogger("effect")
    assert namespace.handlers == []
    assert namespace.propagate is True
    assert logging.getLogger("effect.flicker").handlers == []


def test_replay_session_end_to_end(tmp_path):
    """Consent platform replay: pointer first, grant, then sensor samples"""
    telemetry = EffectTelemetryLogger(output_dir=tmp_path)
    platform = ReplayPlatform(
        [{"alpha": 90.0, "beta": 45.0, "gamma": -45.0}] * 5,
        width=400,
        height=400,
        requires_permission=True,
    )
    styles = []
    renderer = StyleRenderer()
    effect = TiltShineEffect(
        platform,
        renderer=lambda state: styles.append(renderer.render(state)),
        config=EffectConfig(line_policy="flicker", flicker=FlickerConfig(tick_ms=5)),
        rng=np.random.default_rng(99),
        telemetry=telemetry,
    )

    async def scenario():
        effect.start()
        platform.emit_pointer(200, 200)
        effect.on_user_action()
        await asyncio.sleep(0.01)
        await platform.replay(rate_hz=500)
        await asyncio.sleep(0.02)
        effect.stop()

    asyncio.run(scenario())
    summary = telemetry.finalize_session()

    assert summary["samples_by_origin"] == {"pointer": 1, "sensor": 5}
    assert summary["final_permission"] == "granted"
    assert summary["flicker_ticks"] > 0
    assert styles[0]["container"]["color"] == "rgb(200, 200, 220)"
    assert styles[-1]["container"]["color"] == "rgb(175, 212, 228)"
    assert len(styles[-1]["lines"]) == 40
