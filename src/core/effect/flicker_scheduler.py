"""
Periodic flicker perturbation for the decorative line grid.

The scheduler keeps 2×N flicker entries (N horizontal lines first, then N
vertical lines). Each entry starts at uniform random values and, on every
tick, is independently resampled with a fixed probability. Entries that are
not selected keep their previous value: there is no decay or interpolation.

Features:
- Injected numpy Generator (seedable, reproducible under test)
- Single asyncio timer handle per scheduler, rescheduled after each tick
- Synchronous tick() usable without an event loop
- Tick/resample counters for telemetry

Usage:
    scheduler = FlickerScheduler(line_count=20, rng=np.random.default_rng(7))
    scheduler.start(on_tick=lambda entries: print(entries[0]))  # inside a running loop
    ...
    scheduler.stop()  # idempotent
"""

import asyncio
import logging
from typing import Callable, Optional, Tuple

import numpy as np

from core.effect.effect_state import FlickerEntry
from utils.config_sections import FlickerConfig

log = logging.getLogger("effect.flicker")

TickCallback = Callable[[Tuple[FlickerEntry, ...]], None]


class FlickerScheduler:
    """Owns the flicker entries and the timer that perturbs them."""

    def __init__(
        self,
        line_count: int = 20,
        config: Optional[FlickerConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.config = config or FlickerConfig()
        self.line_count = line_count
        self.size = 2 * line_count
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

        self._opacity = self.rng.uniform(self.config.opacity_min, self.config.opacity_max, self.size)
        self._intensity = self.rng.uniform(0.0, 1.0, self.size)

        self.tick_count = 0
        self.resample_count = 0
        self.last_resampled = 0

        self._on_tick: Optional[TickCallback] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def period(self) -> float:
        return self.config.tick_ms / 1000.0

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def entries(self) -> Tuple[FlickerEntry, ...]:
        """Snapshot of the current entries."""
        return tuple(
            FlickerEntry(float(opacity), float(intensity))
            for opacity, intensity in zip(self._opacity, self._intensity)
        )

    def tick(self) -> int:
        """
        Resample a random subset of entries.

        Returns:
            Number of entries resampled on this tick
        """
        selected = self.rng.random(self.size) < self.config.resample_probability
        count = int(np.count_nonzero(selected))
        if count:
            self._opacity[selected] = self.rng.uniform(
                self.config.opacity_min, self.config.opacity_max, count
            )
            self._intensity[selected] = self.rng.uniform(0.0, 1.0, count)

        self.tick_count += 1
        self.resample_count += count
        self.last_resampled = count
        return count

    def start(self, on_tick: Optional[TickCallback] = None) -> bool:
        """
        Start ticking on the running event loop.

        Args:
            on_tick: Called with the entry snapshot after every tick

        Returns:
            True if the timer is attached. Without a running loop the
            failure is logged and the entries stay static.
        """
        if self._handle is not None:
            return True
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            log.error("[Flicker] No running event loop, flicker timer not attached")
            return False

        self._on_tick = on_tick
        self._handle = self._loop.call_later(self.period, self._run)
        log.debug(f"[Flicker] Timer attached ({self.config.tick_ms} ms, p={self.config.resample_probability})")
        return True

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            log.debug(f"[Flicker] Timer cleared after {self.tick_count} ticks")
        self._handle = None
        self._on_tick = None
        self._loop = None

    def _run(self) -> None:
        if self._handle is None:
            return
        self.tick()
        # Reschedule before notifying so a callback calling stop() wins
        self._handle = self._loop.call_later(self.period, self._run)
        if self._on_tick is not None:
            try:
                self._on_tick(self.entries)
            except Exception as e:
                log.error(f"[Flicker] Tick callback failed: {e}")
