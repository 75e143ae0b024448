"""
Orientation acquisition with pointer/touch fallback.

This module turns host platform events into OrientationSample values. It
handles the three capability levels resolved by the capability probe:

- always_on: subscribe to the sensor as soon as `start()` is called
- consent_required: subscribe to the sensor only once the PermissionGate
  reports GRANTED
- unsupported: pointer-only mode, sensor subscription is never attempted

Pointer/touch listening stays active until the first sensor sample with at
least one reading arrives (an event with every axis null is dropped).
From then on the sensor owns the instance and pointer events are ignored.

Every registered listener is an owned Subscription object so `stop()` can
remove exactly what this instance attached, and nothing else.

Usage:
    source = OrientationSource(platform, SensorCapability.ALWAYS_ON)
    source.start(on_sample=lambda sample: print(sample))
    ...
    source.stop()  # idempotent
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from core.orientation.capability import SensorCapability
from core.orientation.orientation_sample import OrientationSample
from core.orientation.permission_gate import PermissionGate, PermissionStatus
from core.orientation.platforms import ORIENTATION_EVENT, POINTER_EVENT, TOUCH_EVENT

log = logging.getLogger("effect.sensor")

SampleCallback = Callable[[OrientationSample], None]


class SourceMode(Enum):
    IDLE = "idle"
    POINTER = "pointer"  # Pointer samples accepted, sensor not flowing (yet)
    SENSOR = "sensor"  # Sensor samples flowing, pointer ignored


class Subscription:
    """A single listener attached to a platform event, removable once."""

    def __init__(self, platform, event: str, handler: Callable[[Dict[str, Any]], None]) -> None:
        self.platform = platform
        self.event = event
        self.handler = handler
        self.active = False

    def attach(self) -> bool:
        try:
            self.platform.add_listener(self.event, self.handler)
        except Exception as e:
            log.error(f"[Source] Could not attach '{self.event}' listener: {e}")
            return False
        self.active = True
        return True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        try:
            self.platform.remove_listener(self.event, self.handler)
        except Exception as e:
            log.warning(f"[Source] Error removing '{self.event}' listener: {e}")


class OrientationSource:
    """Emits orientation samples from the sensor or the pointer fallback."""

    def __init__(
        self,
        platform,
        capability: SensorCapability,
        gate: Optional[PermissionGate] = None,
    ) -> None:
        self.platform = platform
        self.capability = capability
        self.gate = gate

        self.mode = SourceMode.IDLE
        self.pointer_only = capability is SensorCapability.UNSUPPORTED
        self.sensor_samples = 0
        self.pointer_samples = 0
        self.empty_events = 0

        self._on_sample: Optional[SampleCallback] = None
        self._running = False
        self._sensor_subscription: Optional[Subscription] = None
        self._pointer_subscriptions: List[Subscription] = []

        if gate is not None:
            gate.add_listener(self._on_permission_change)

    @property
    def running(self) -> bool:
        return self._running

    def active_subscriptions(self) -> List[Subscription]:
        subscriptions = [s for s in self._pointer_subscriptions if s.active]
        if self._sensor_subscription is not None and self._sensor_subscription.active:
            subscriptions.append(self._sensor_subscription)
        return subscriptions

    def start(self, on_sample: SampleCallback) -> None:
        """
        Begin emitting samples to `on_sample`.

        Args:
            on_sample: Called with every accepted OrientationSample
        """
        if self._running:
            return
        self._on_sample = on_sample
        self._running = True
        self.mode = SourceMode.POINTER

        self._attach_pointer()

        if self.capability is SensorCapability.ALWAYS_ON:
            self._attach_sensor()
        elif self.capability is SensorCapability.CONSENT_REQUIRED:
            if self.gate is not None and self.gate.status is PermissionStatus.GRANTED:
                self._attach_sensor()
            else:
                log.info("[Source] Waiting for orientation permission, pointer fallback active")
        else:
            log.info("[Source] Orientation sensor unsupported, pointer-only mode")

    def stop(self) -> None:
        """Remove every listener this instance attached. Safe to call repeatedly."""
        self._running = False
        self._on_sample = None
        if self._sensor_subscription is not None:
            self._sensor_subscription.cancel()
            self._sensor_subscription = None
        for subscription in self._pointer_subscriptions:
            subscription.cancel()
        self._pointer_subscriptions = []
        self.mode = SourceMode.IDLE

    # ------------------------------------------------------------------
    # subscriptions
    # ------------------------------------------------------------------

    def _attach_sensor(self) -> None:
        if self.pointer_only or self._sensor_subscription is not None:
            return
        subscription = Subscription(self.platform, ORIENTATION_EVENT, self._handle_orientation)
        if subscription.attach():
            self._sensor_subscription = subscription
            log.info("[Source] Subscribed to orientation sensor")
        else:
            log.warning("[Source] Continuing in pointer fallback mode")

    def _attach_pointer(self) -> None:
        for event in (POINTER_EVENT, TOUCH_EVENT):
            subscription = Subscription(self.platform, event, self._handle_pointer)
            if subscription.attach():
                self._pointer_subscriptions.append(subscription)

    def _release_pointer(self) -> None:
        for subscription in self._pointer_subscriptions:
            subscription.cancel()
        self._pointer_subscriptions = []

    def _on_permission_change(self, status: PermissionStatus) -> None:
        if not self._running:
            return
        if status is PermissionStatus.GRANTED:
            self._attach_sensor()
        elif status is PermissionStatus.DENIED:
            log.info("[Source] Permission denied, staying in pointer fallback mode")

    # ------------------------------------------------------------------
    # event handlers
    # ------------------------------------------------------------------

    def _handle_orientation(self, payload: Dict[str, Any]) -> None:
        if not self._running or self._on_sample is None:
            return
        axes = (payload.get("alpha"), payload.get("beta"), payload.get("gamma"))
        # Sensorless hosts fire the event once with every axis null
        if all(axis is None for axis in axes):
            self.empty_events += 1
            if self.empty_events == 1:
                log.info("[Source] Orientation event without readings, pointer fallback kept")
            return
        sample = OrientationSample.from_event(*axes)
        if self.mode is not SourceMode.SENSOR:
            self.mode = SourceMode.SENSOR
            self._release_pointer()
            log.info("[Source] Sensor samples flowing, pointer fallback released")
        self.sensor_samples += 1
        self._on_sample(sample)

    def _handle_pointer(self, payload: Dict[str, Any]) -> None:
        if not self._running or self._on_sample is None or self.mode is not SourceMode.POINTER:
            return
        width, height = self.platform.viewport_size()
        if width <= 0 or height <= 0:
            return
        sample = OrientationSample.from_pointer(payload["x"], payload["y"], width, height)
        self.pointer_samples += 1
        self._on_sample(sample)
