"""Tests for the in-process host platforms."""

from __future__ import annotations

import asyncio

import pytest

from core.orientation.platforms import (
    ORIENTATION_EVENT,
    POINTER_EVENT,
    EventPlatform,
    ReplayPlatform,
)


def test_emit_reaches_registered_listeners_only():
    platform = EventPlatform()
    received = []

    def listener(payload):
        received.append(payload)

    platform.add_listener(POINTER_EVENT, listener)
    platform.emit_pointer(1.0, 2.0)
    platform.emit_orientation(alpha=10.0)
    platform.remove_listener(POINTER_EVENT, listener)
    platform.emit_pointer(3.0, 4.0)

    assert received == [{"x": 1.0, "y": 2.0}]
    assert platform.listener_count() == 0


def test_remove_unknown_listener_is_ignored():
    platform = EventPlatform()
    platform.remove_listener(ORIENTATION_EVENT, lambda payload: None)
    assert platform.listener_count(ORIENTATION_EVENT) == 0


def test_from_jsonl_loads_samples(tmp_path):
    recording = tmp_path / "session.jsonl"
    recording.write_text(
        '{"alpha": 10, "beta": 20, "gamma": 30}\n'
        "\n"
        '{"beta": -5}\n',
        encoding="utf-8",
    )

    platform = ReplayPlatform.from_jsonl(recording, width=100, height=50)

    assert platform.samples == [
        {"alpha": 10, "beta": 20, "gamma": 30},
        {"alpha": None, "beta": -5, "gamma": None},
    ]
    assert platform.viewport_size() == (100, 50)


def test_from_jsonl_reports_bad_line(tmp_path):
    recording = tmp_path / "broken.jsonl"
    recording.write_text('{"alpha": 1}\nnot json\n', encoding="utf-8")

    with pytest.raises(ValueError, match=":2:"):
        ReplayPlatform.from_jsonl(recording)


def test_replay_emits_every_sample():
    platform = ReplayPlatform([{"alpha": 1, "beta": 2, "gamma": 3}] * 3)
    received = []
    platform.add_listener(ORIENTATION_EVENT, received.append)

    emitted = asyncio.run(platform.replay(rate_hz=0))

    assert emitted == 3
    assert len(received) == 3


def test_request_permission_answers_configured_value():
    platform = ReplayPlatform(requires_permission=True, permission_answer="denied")

    answer = asyncio.run(platform.request_permission())

    assert answer == "denied"
    assert platform.permission_requests == 1
