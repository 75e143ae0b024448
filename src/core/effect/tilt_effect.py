"""
Tilt Shine effect component.

One TiltShineEffect is one effect instance hosted inside a UI. It owns every
resource it uses and hands a fresh EffectState to the renderer callback
whenever its inputs change.

Architecture:
    PermissionGate (consent platforms only)
          ↓ GRANTED
    OrientationSource ──sample──→ compute_effect_state ──→ renderer(state)
                                         ↑
    FlickerScheduler ──tick (FLICKER policy)┘

Lifecycle:
- __init__: capability probed once, components created, neutral state computed
- start(): neutral state delivered, source and flicker timer started
- request_permission(): user-action entry point for consent platforms
- stop(): listeners removed and timer cleared synchronously (idempotent)

Usage:
    effect = TiltShineEffect(platform, renderer=dashboard.render)
    effect.start()          # inside a running asyncio loop for flicker
    button.on_click = effect.on_user_action
    ...
    effect.stop()
"""

import logging
from typing import Callable, Optional

import numpy as np

from core.effect.effect_state import EffectState, LinePolicy
from core.effect.effect_state_computer import compute_effect_state
from core.effect.flicker_scheduler import FlickerScheduler
from core.orientation.capability import SensorCapability, probe_capability
from core.orientation.orientation_sample import OrientationSample
from core.orientation.orientation_source import OrientationSource
from core.orientation.permission_gate import PermissionGate, PermissionStatus
from utils.config_sections import EffectConfig, load_effect_config

log = logging.getLogger("effect.renderer")

Renderer = Callable[[EffectState], None]


class TiltShineEffect:
    """Orientation-driven tilt, glare, color and line grid for one host element."""

    def __init__(
        self,
        platform,
        renderer: Optional[Renderer] = None,
        config: Optional[EffectConfig] = None,
        rng: Optional[np.random.Generator] = None,
        telemetry=None,
    ) -> None:
        """
        Args:
            platform: Host platform (see core.orientation.platforms)
            renderer: Called with every new EffectState
            config: Effect configuration (default: loaded from Config)
            rng: Random source for the flicker scheduler
            telemetry: Optional EffectTelemetryLogger
        """
        self.platform = platform
        self.renderer = renderer
        self.config = config or load_effect_config()
        self.policy = LinePolicy(self.config.line_policy)
        self.telemetry = telemetry

        self.capability = probe_capability(platform)
        if telemetry is not None:
            telemetry.log_capability(self.capability.value)

        self.gate: Optional[PermissionGate] = None
        if self.capability is SensorCapability.CONSENT_REQUIRED:
            self.gate = PermissionGate(platform.request_permission, telemetry=telemetry)

        self.source = OrientationSource(platform, self.capability, gate=self.gate)
        self.flicker: Optional[FlickerScheduler] = None
        if self.policy is LinePolicy.FLICKER:
            self.flicker = FlickerScheduler(self.config.line_count, self.config.flicker, rng=rng)

        self.sample = OrientationSample.neutral()
        self.state = self._compute()
        self.updates = 0
        self._active = False
        self._last_mode = self.source.mode

    @property
    def active(self) -> bool:
        return self._active

    @property
    def permission_status(self) -> PermissionStatus:
        """Consent state. Stays UNKNOWN on platforms without a consent step."""
        return self.gate.status if self.gate is not None else PermissionStatus.UNKNOWN

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        self.sample = OrientationSample.neutral()
        self._publish()

        self.source.start(self._on_sample)
        self._track_mode()
        if self.flicker is not None and not self.flicker.start(self._on_flicker_tick):
            if self.telemetry is not None:
                self.telemetry.log_error("flicker_timer", "no running event loop")

    def stop(self) -> None:
        """Unsubscribe everything and clear the flicker timer. Safe to repeat."""
        self._active = False
        self.source.stop()
        if self.flicker is not None:
            self.flicker.stop()

    async def request_permission(self) -> PermissionStatus:
        """Run the consent flow. Call only from a user action."""
        if self.gate is None:
            return self.permission_status
        status = await self.gate.request()
        self._track_mode()
        return status

    def on_user_action(self) -> None:
        """Synchronous user-action hook (click/tap/key handler)."""
        if self.gate is not None:
            self.gate.on_user_action()

    # ------------------------------------------------------------------
    # updates
    # ------------------------------------------------------------------

    def _on_sample(self, sample: OrientationSample) -> None:
        if not self._active:
            return
        self.sample = sample
        if self.telemetry is not None:
            self.telemetry.log_sample(sample.origin)
        self._track_mode()
        self._publish()

    def _on_flicker_tick(self, _entries) -> None:
        if not self._active:
            return
        if self.telemetry is not None:
            self.telemetry.log_flicker_tick(self.flicker.last_resampled)
        self._publish()

    def _compute(self) -> EffectState:
        entries = self.flicker.entries if self.flicker is not None else ()
        return compute_effect_state(
            self.sample,
            entries,
            policy=self.policy,
            line_count=self.config.line_count,
            pattern=self.config.pattern,
        )

    def _publish(self) -> None:
        self.state = self._compute()
        self.updates += 1
        if self.telemetry is not None:
            self.telemetry.log_state_emitted()
        if self.renderer is None:
            return
        try:
            self.renderer(self.state)
        except Exception as e:
            log.error(f"[Effect] Renderer failed: {e}")
            if self.telemetry is not None:
                self.telemetry.log_error("renderer", str(e))

    def _track_mode(self) -> None:
        mode = self.source.mode
        if mode is not self._last_mode:
            log.info(f"[Effect] Source mode: {self._last_mode.value} -> {mode.value}")
            self._last_mode = mode
            if self.telemetry is not None:
                self.telemetry.log_source_mode(mode.value)
