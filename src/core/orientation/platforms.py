"""
Host platform adapters for orientation acquisition.

The effect never talks to a global event source directly. It receives a
platform object and registers listeners on it; this module defines the
event names, payload shapes and two in-process implementations.

Platform contract (duck-typed):
- has_orientation_sensor: bool
- requires_permission: bool
- add_listener(event, callback) / remove_listener(event, callback)
- viewport_size() -> (width, height)
- async request_permission() -> "granted" | "denied"  (consent platforms only)

Payloads:
- "deviceorientation": {"alpha": float|None, "beta": float|None, "gamma": float|None}
- "pointermove" / "touchmove": {"x": float, "y": float}

Implementations:
- EventPlatform: listener registry with emit helpers (pointer only)
- ReplayPlatform: always-on or consent-gated sensor replaying a JSONL recording

Usage:
    platform = ReplayPlatform.from_jsonl("session.jsonl", width=512, height=512)
    effect = TiltShineEffect(platform, renderer=dashboard.render)
    effect.start()
    await platform.replay(rate_hz=60.0)
"""

import asyncio
import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

log = logging.getLogger("effect.sensor")

ORIENTATION_EVENT = "deviceorientation"
POINTER_EVENT = "pointermove"
TOUCH_EVENT = "touchmove"

Listener = Callable[[Dict[str, Any]], None]


class EventPlatform:
    """In-process host platform without an orientation sensor."""

    has_orientation_sensor = False
    requires_permission = False

    def __init__(self, width: int = 512, height: int = 512) -> None:
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        self._viewport = (width, height)

    def add_listener(self, event: str, callback: Listener) -> None:
        self._listeners[event].append(callback)

    def remove_listener(self, event: str, callback: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def listener_count(self, event: Optional[str] = None) -> int:
        """Number of registered listeners (for one event or all)."""
        if event is not None:
            return len(self._listeners.get(event, []))
        return sum(len(listeners) for listeners in self._listeners.values())

    def viewport_size(self) -> Tuple[int, int]:
        return self._viewport

    def set_viewport(self, width: int, height: int) -> None:
        self._viewport = (width, height)

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        """Deliver a payload to every listener registered for `event`."""
        for callback in list(self._listeners.get(event, [])):
            callback(payload)

    def emit_orientation(self, alpha=None, beta=None, gamma=None) -> None:
        self.emit(ORIENTATION_EVENT, {"alpha": alpha, "beta": beta, "gamma": gamma})

    def emit_pointer(self, x: float, y: float) -> None:
        self.emit(POINTER_EVENT, {"x": x, "y": y})

    def emit_touch(self, x: float, y: float) -> None:
        self.emit(TOUCH_EVENT, {"x": x, "y": y})


class ReplayPlatform(EventPlatform):
    """
    Platform with an orientation sensor fed from recorded samples.

    With `requires_permission=True` the platform behaves like a consent-gated
    device: `request_permission()` answers with `permission_answer` after
    `permission_delay` seconds.
    """

    has_orientation_sensor = True

    def __init__(
        self,
        samples: Iterable[Dict[str, Optional[float]]] = (),
        width: int = 512,
        height: int = 512,
        requires_permission: bool = False,
        permission_answer: str = "granted",
        permission_delay: float = 0.0,
    ) -> None:
        super().__init__(width, height)
        self.samples = list(samples)
        self.requires_permission = requires_permission
        self.permission_answer = permission_answer
        self.permission_delay = permission_delay
        self.permission_requests = 0

    @classmethod
    def from_jsonl(cls, path, **kwargs) -> "ReplayPlatform":
        """
        Load a recording with one {"alpha", "beta", "gamma"} object per line.

        Blank lines are skipped; malformed lines raise ValueError with the
        offending line number.
        """
        samples = []
        with Path(path).open("r", encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError as err:
                    raise ValueError(f"{path}:{line_number}: invalid JSON ({err.msg})") from err
                samples.append({
                    "alpha": record.get("alpha"),
                    "beta": record.get("beta"),
                    "gamma": record.get("gamma"),
                })
        log.info(f"[Replay] Loaded {len(samples)} samples from {path}")
        return cls(samples, **kwargs)

    async def request_permission(self) -> str:
        self.permission_requests += 1
        if self.permission_delay:
            await asyncio.sleep(self.permission_delay)
        return self.permission_answer

    async def replay(self, rate_hz: float = 60.0, loop_forever: bool = False) -> int:
        """
        Emit the recorded samples as orientation events.

        Args:
            rate_hz: Events per second
            loop_forever: Restart from the first sample when exhausted

        Returns:
            Number of events emitted
        """
        interval = 1.0 / rate_hz if rate_hz > 0 else 0.0
        emitted = 0
        while self.samples:
            for sample in self.samples:
                self.emit(ORIENTATION_EVENT, dict(sample))
                emitted += 1
                await asyncio.sleep(interval)
            if not loop_forever:
                break
        return emitted
