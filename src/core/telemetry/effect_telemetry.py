"""
Session telemetry for Tilt Shine effect instances.

This module records what an effect instance went through during a session:
which capability was detected, how the permission flow ended, where the
samples came from and how busy the flicker timer was.

Features:
- JSONL format for easy streaming analytics
- Session-based organization with unique timestamps
- In-memory counters summarised by finalize_session()
- No locks: all producers run on the same event loop

Log Files (inside logs/session_YYYY-MM-DD_HH-MM-SS/):
- system.jsonl: session start/end, capability, source mode changes, errors
- permission.jsonl: every PermissionGate transition
- summary.json: written by finalize_session()

Usage:
    from core.telemetry.effect_telemetry import EffectTelemetryLogger

    telemetry = EffectTelemetryLogger(output_dir=Path("logs"))
    effect = TiltShineEffect(platform, renderer=render, telemetry=telemetry)
    ...
    summary = telemetry.finalize_session()
"""

import json
import time
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class PermissionMetric:
    """Permission state transition."""
    timestamp: float
    status: str  # "pending", "granted", "denied"
    previous: str
    reason: Optional[str] = None  # Error or platform answer on denial


class EffectTelemetryLogger:
    """Collects effect session metrics and writes them as JSON lines."""

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Initialize new telemetry session.

        Args:
            output_dir: Base directory for logs (default: logs/)
        """
        if output_dir is None:
            from utils.config import Config
            output_dir = Path(getattr(Config, "TELEMETRY_DIR", "logs"))

        base_dir = Path(output_dir)
        base_dir.mkdir(parents=True, exist_ok=True)

        self.session_timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.session_start = time.time()
        self.session_dir = base_dir / f"session_{self.session_timestamp}"
        self.session_dir.mkdir(parents=True, exist_ok=True)

        self.system_log = self.session_dir / "system.jsonl"
        self.permission_log = self.session_dir / "permission.jsonl"

        self.permission_buffer: List[PermissionMetric] = []
        self.samples_by_origin: Dict[str, int] = {}
        self.states_emitted = 0
        self.flicker_ticks = 0
        self.flicker_resamples = 0
        self.errors = 0

        self._log_system_event("session_start", {
            "session": self.session_timestamp,
            "timestamp": self.session_start
        })

    def get_session_dir(self) -> Path:
        """Return the session directory path for use by other loggers."""
        return self.session_dir

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def log_capability(self, capability: str) -> None:
        self._log_system_event("capability", {"capability": capability})

    def log_source_mode(self, mode: str) -> None:
        self._log_system_event("source_mode", {"mode": mode})

    def log_permission(self, status: str, previous: str, reason: Optional[str] = None) -> None:
        metric = PermissionMetric(
            timestamp=time.time(),
            status=status,
            previous=previous,
            reason=reason,
        )
        self.permission_buffer.append(metric)
        self._write_jsonl(self.permission_log, asdict(metric))

    def log_sample(self, origin: str) -> None:
        self.samples_by_origin[origin] = self.samples_by_origin.get(origin, 0) + 1

    def log_state_emitted(self) -> None:
        self.states_emitted += 1

    def log_flicker_tick(self, resampled: int) -> None:
        self.flicker_ticks += 1
        self.flicker_resamples += resampled

    def log_error(self, error_type: str, message: str, **kwargs: Any) -> None:
        self.errors += 1
        self._log_system_event("error", {
            "error_type": error_type,
            "message": message,
            **kwargs
        })

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def finalize_session(self) -> Dict[str, Any]:
        """
        Finalize session and generate summary.

        Returns:
            Dict with session statistics
        """
        final_permission = self.permission_buffer[-1].status if self.permission_buffer else None
        summary = {
            "session": self.session_timestamp,
            "duration_seconds": time.time() - self.session_start,
            "samples_by_origin": dict(self.samples_by_origin),
            "total_samples": sum(self.samples_by_origin.values()),
            "states_emitted": self.states_emitted,
            "flicker_ticks": self.flicker_ticks,
            "flicker_resamples": self.flicker_resamples,
            "flicker_resample_rate": (
                self.flicker_resamples / self.flicker_ticks if self.flicker_ticks else 0.0
            ),
            "permission_transitions": len(self.permission_buffer),
            "final_permission": final_permission,
            "errors": self.errors,
        }

        self._log_system_event("session_end", summary)

        summary_path = self.session_dir / "summary.json"
        with open(summary_path, 'w') as f:
            json.dump(summary, f, indent=2)

        return summary

    def _log_system_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Record system events."""
        payload = {
            "timestamp": time.time(),
            "session": self.session_timestamp,
            "event_type": event_type,
            **data
        }
        self._write_jsonl(self.system_log, payload)

    def _write_jsonl(self, path: Path, data: Dict[str, Any]) -> None:
        try:
            line = json.dumps(data, ensure_ascii=True)
        except TypeError:
            line = json.dumps({"error": "serialization_failed", "repr": repr(data)})

        with open(path, 'a', encoding='utf-8') as f:
            f.write(line + '\n')
