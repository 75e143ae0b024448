#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tilt Shine effect - command line entry point.

Modes:
- preview: OpenCV window driven by the mouse (pointer fallback) or by a
  recorded orientation session replayed as sensor events
- css: print the style declarations derived from a single sample

Usage:
    python run.py preview --policy flicker --seed 7
    python run.py preview --replay session.jsonl --consent
    python run.py css --beta 20 --gamma -15
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

import numpy as np

from core.ctrl_handler import CtrlCHandler
from core.effect.effect_state import LinePolicy
from core.effect.effect_state_computer import compute_effect_state
from core.effect.flicker_scheduler import FlickerScheduler
from core.effect.tilt_effect import TiltShineEffect
from core.orientation.orientation_sample import OrientationSample
from core.orientation.platforms import EventPlatform, ReplayPlatform
from core.telemetry.effect_telemetry import EffectTelemetryLogger
from core.telemetry.loggers.effect_logger import get_effect_logger
from presentation.style_renderer import StyleRenderer
from utils.config import Config
from utils.config_sections import load_effect_config, load_preview_config

log = logging.getLogger("TiltShine")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Orientation-driven tilt shine effect")
    sub = parser.add_subparsers(dest="mode", required=True)

    preview = sub.add_parser("preview", help="Interactive OpenCV preview")
    preview.add_argument("--policy", choices=[p.value for p in LinePolicy], default=None,
                         help="Line visibility policy (default: Config.LINE_POLICY)")
    preview.add_argument("--seed", type=int, default=None, help="Flicker random seed")
    preview.add_argument("--replay", default=None, help="JSONL orientation recording")
    preview.add_argument("--consent", action="store_true",
                         help="Treat the replay sensor as consent-gated (press 'p' to grant)")
    preview.add_argument("--deny", action="store_true", help="Consent platform answers 'denied'")
    preview.add_argument("--loop", action="store_true", help="Loop the replay forever")
    preview.add_argument("--no-telemetry", action="store_true", help="Disable session logs")

    css = sub.add_parser("css", help="Print CSS declarations for one sample")
    css.add_argument("--alpha", type=float, default=0.0)
    css.add_argument("--beta", type=float, default=0.0)
    css.add_argument("--gamma", type=float, default=0.0)
    css.add_argument("--policy", choices=[p.value for p in LinePolicy], default="pattern")
    return parser


def run_css(args) -> dict:
    config = load_effect_config()
    sample = OrientationSample.from_event(args.alpha, args.beta, args.gamma)
    policy = LinePolicy(args.policy)
    entries = ()
    if policy is LinePolicy.FLICKER:
        entries = FlickerScheduler(config.line_count, config.flicker).entries
    state = compute_effect_state(
        sample,
        entries,
        policy=policy,
        line_count=config.line_count,
        pattern=config.pattern,
    )
    styles = StyleRenderer().render(state)
    print(json.dumps(styles, indent=2))
    return styles


async def run_preview(args) -> Optional[dict]:
    # Imported here so the css mode works without a display stack
    from presentation.dashboards.opencv_dashboard import OpenCVEffectDashboard

    config = load_effect_config()
    if args.policy:
        config.line_policy = args.policy
    if args.seed is not None:
        config.flicker.seed = args.seed
    preview_config = load_preview_config()

    if args.replay:
        platform = ReplayPlatform.from_jsonl(
            args.replay,
            width=preview_config.width,
            height=preview_config.height,
            requires_permission=args.consent,
            permission_answer="denied" if args.deny else "granted",
        )
    else:
        platform = EventPlatform(preview_config.width, preview_config.height)

    telemetry = None
    if Config.TELEMETRY_ENABLED and not args.no_telemetry:
        telemetry = EffectTelemetryLogger()
        get_effect_logger(session_dir=telemetry.get_session_dir())

    dashboard = OpenCVEffectDashboard(preview_config)
    dashboard.open(platform)

    effect = TiltShineEffect(
        platform,
        renderer=dashboard.render,
        config=config,
        rng=np.random.default_rng(config.flicker.seed),
        telemetry=telemetry,
    )
    effect.start()

    replay_task = None
    if isinstance(platform, ReplayPlatform):
        replay_task = asyncio.create_task(
            platform.replay(rate_hz=preview_config.replay_rate_hz, loop_forever=args.loop)
        )

    ctrl_handler = CtrlCHandler()
    try:
        while not ctrl_handler.should_stop:
            dashboard.status_text = (
                f"{effect.capability.value} | {effect.source.mode.value} | "
                f"permission: {effect.permission_status.value}"
            )
            action = dashboard.poll(delay_ms=1)
            if action == "quit":
                break
            if action == "user_action":
                effect.on_user_action()
            await asyncio.sleep(preview_config.poll_ms / 1000.0)
    finally:
        effect.stop()
        if replay_task is not None:
            replay_task.cancel()
        dashboard.close()

    if telemetry is not None:
        summary = telemetry.finalize_session()
        log.info(f"[Main] Session summary: {summary['states_emitted']} states, "
                 f"{summary['total_samples']} samples")
        return summary
    return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    args = build_parser().parse_args(argv)

    if args.mode == "css":
        run_css(args)
    else:
        asyncio.run(run_preview(args))
    return 0


if __name__ == "__main__":
    sys.exit(main())
