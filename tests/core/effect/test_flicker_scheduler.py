"""Tests for FlickerScheduler resampling and timer lifecycle."""

from __future__ import annotations

import asyncio

import numpy as np
import pytest

from core.effect.flicker_scheduler import FlickerScheduler
from utils.config_sections import FlickerConfig


def test_entries_initialized_in_range():
    scheduler = FlickerScheduler(line_count=20, rng=np.random.default_rng(1))
    entries = scheduler.entries

    assert len(entries) == 40
    assert all(0.3 <= e.opacity <= 0.8 for e in entries)
    assert all(0.0 <= e.intensity <= 1.0 for e in entries)


def test_seeded_schedulers_are_reproducible():
    first = FlickerScheduler(rng=np.random.default_rng(42))
    second = FlickerScheduler(rng=np.random.default_rng(42))
    for _ in range(10):
        first.tick()
        second.tick()

    assert first.entries == second.entries


def test_zero_probability_keeps_every_entry():
    scheduler = FlickerScheduler(config=FlickerConfig(resample_probability=0.0), rng=np.random.default_rng(3))
    before = scheduler.entries

    assert scheduler.tick() == 0
    assert scheduler.entries == before


def test_full_probability_resamples_every_entry():
    scheduler = FlickerScheduler(config=FlickerConfig(resample_probability=1.0), rng=np.random.default_rng(3))
    before = scheduler.entries

    assert scheduler.tick() == 40
    after = scheduler.entries
    assert all(a != b for a, b in zip(before, after))
    assert all(0.3 <= e.opacity <= 0.8 for e in after)


def test_entry_count_is_fixed():
    scheduler = FlickerScheduler(line_count=7, rng=np.random.default_rng(5))
    for _ in range(25):
        scheduler.tick()
    assert len(scheduler.entries) == 14


def test_resample_probability_converges():
    scheduler = FlickerScheduler(line_count=20, rng=np.random.default_rng(2024))
    ticks = 5000
    changes = np.zeros(40)

    previous = scheduler.entries
    for _ in range(ticks):
        scheduler.tick()
        current = scheduler.entries
        changes += [a != b for a, b in zip(previous, current)]
        previous = current

    assert scheduler.resample_count / (ticks * 40) == pytest.approx(0.2, abs=0.01)
    assert np.all(np.abs(changes / ticks - 0.2) < 0.05)


def test_stop_before_start_and_twice():
    scheduler = FlickerScheduler(rng=np.random.default_rng(0))
    scheduler.stop()
    scheduler.stop()
    assert not scheduler.running


def test_start_without_loop_is_reported():
    scheduler = FlickerScheduler(rng=np.random.default_rng(0))
    assert scheduler.start() is False
    assert not scheduler.running


def test_timer_ticks_until_stopped():
    config = FlickerConfig(tick_ms=5)
    scheduler = FlickerScheduler(config=config, rng=np.random.default_rng(0))
    snapshots = []

    async def scenario():
        assert scheduler.start(on_tick=snapshots.append)
        assert scheduler.start() is True  # already running, single timer
        await asyncio.sleep(0.08)
        scheduler.stop()
        ticks_at_stop = scheduler.tick_count
        await asyncio.sleep(0.03)
        return ticks_at_stop

    ticks_at_stop = asyncio.run(scenario())

    assert ticks_at_stop > 0
    assert scheduler.tick_count == ticks_at_stop
    assert len(snapshots) == ticks_at_stop
    assert not scheduler.running


def test_callback_stopping_scheduler_clears_timer():
    scheduler = FlickerScheduler(config=FlickerConfig(tick_ms=1), rng=np.random.default_rng(0))

    async def scenario():
        scheduler.start(on_tick=lambda entries: scheduler.stop())
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert scheduler.tick_count == 1
    assert not scheduler.running
