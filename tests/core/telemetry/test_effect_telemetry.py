"""Tests for EffectTelemetryLogger session files and summary."""

from __future__ import annotations

import json

from core.telemetry.effect_telemetry import EffectTelemetryLogger


def read_jsonl(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_session_directory_created(tmp_path):
    telemetry = EffectTelemetryLogger(output_dir=tmp_path)

    assert telemetry.get_session_dir().parent == tmp_path
    events = read_jsonl(telemetry.system_log)
    assert events[0]["event_type"] == "session_start"


def test_permission_transitions_are_written(tmp_path):
    telemetry = EffectTelemetryLogger(output_dir=tmp_path)

    telemetry.log_permission("pending", "unknown")
    telemetry.log_permission("denied", "pending", reason="error: boom")

    records = read_jsonl(telemetry.permission_log)
    assert [r["status"] for r in records] == ["pending", "denied"]
    assert records[1]["reason"] == "error: boom"


def test_finalize_session_summarizes_counters(tmp_path):
    telemetry = EffectTelemetryLogger(output_dir=tmp_path)
    telemetry.log_capability("always_on")
    telemetry.log_sample("pointer")
    telemetry.log_sample("sensor")
    telemetry.log_sample("sensor")
    telemetry.log_state_emitted()
    telemetry.log_flicker_tick(8)
    telemetry.log_flicker_tick(4)
    telemetry.log_permission("granted", "pending")
    telemetry.log_error("renderer", "paint failed")

    summary = telemetry.finalize_session()

    assert summary["samples_by_origin"] == {"pointer": 1, "sensor": 2}
    assert summary["total_samples"] == 3
    assert summary["flicker_ticks"] == 2
    assert summary["flicker_resample_rate"] == 6.0
    assert summary["final_permission"] == "granted"
    assert summary["errors"] == 1
    saved = json.loads((telemetry.get_session_dir() / "summary.json").read_text())
    assert saved["states_emitted"] == 1
    assert read_jsonl(telemetry.system_log)[-1]["event_type"] == "session_end"
