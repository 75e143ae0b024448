"""
Pure mapping from an orientation sample to the composite effect state.

The computation is deterministic given (sample, flicker entries, config):

1. Normalize the three angles to [0, 1]:
       n_alpha = alpha / 360
       n_beta  = (beta + 180) / 360
       n_gamma = (gamma + 90) / 180
2. Color:      r = 150 + 100*n_gamma, g = 150 + 100*n_beta, b = 220 + 35*n_alpha
3. Tilt:       rotate_x = -10*(n_beta - 0.5), rotate_y = 10*(n_gamma - 0.5)
4. Glare:      135 + gamma degrees (unclamped CSS angle)
5. Lines:      PATTERN, FLICKER or NONE policy

Example:
    >>> state = compute_effect_state(OrientationSample.neutral())
    >>> state.color.as_tuple()
    (200, 200, 220)
"""

import math
from typing import Optional, Sequence, Tuple

from core.effect.effect_state import (
    RGB,
    EffectState,
    FlickerEntry,
    LineAxis,
    LinePolicy,
    LineVisual,
    TiltTransform,
)
from core.orientation.orientation_sample import OrientationSample
from utils.config_sections import LinePatternConfig

TILT_RANGE_DEG = 10.0
GLARE_BASE_DEG = 135.0


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def normalize(sample: OrientationSample) -> Tuple[float, float, float]:
    """Return (n_alpha, n_beta, n_gamma), each clamped to [0, 1]."""
    n_alpha = _clamp(sample.alpha / 360.0, 0.0, 1.0)
    n_beta = _clamp((sample.beta + 180.0) / 360.0, 0.0, 1.0)
    n_gamma = _clamp((sample.gamma + 90.0) / 180.0, 0.0, 1.0)
    return n_alpha, n_beta, n_gamma


def compute_color(n_alpha: float, n_beta: float, n_gamma: float) -> RGB:
    r = math.floor(150 + 100 * n_gamma)
    g = math.floor(150 + 100 * n_beta)
    b = math.floor(220 + 35 * n_alpha)
    return RGB(
        r=int(_clamp(r, 0, 255)),
        g=int(_clamp(g, 0, 255)),
        b=int(_clamp(b, 0, 255)),
    )


def compute_transform(n_beta: float, n_gamma: float) -> TiltTransform:
    return TiltTransform(
        rotate_x_deg=-TILT_RANGE_DEG * (n_beta - 0.5),
        rotate_y_deg=TILT_RANGE_DEG * (n_gamma - 0.5),
    )


def compute_glare_angle(gamma: float) -> float:
    return GLARE_BASE_DEG + gamma


def is_line_visible(
    beta: float,
    gamma: float,
    index: int,
    axis: LineAxis,
    pattern: Optional[LinePatternConfig] = None,
) -> bool:
    """
    Deterministic visibility of one grid line.

    Horizontal lines step the seed forward by `horizontal_step` per index
    and compare against beta; vertical lines step it backwards by
    `vertical_step` and compare against gamma. The remainders truncate
    toward zero, so negative angles yield negative remainders before abs().
    """
    pattern = pattern or LinePatternConfig()
    if axis == "horizontal":
        seed = math.fmod(beta + gamma + index * pattern.horizontal_step, 360.0)
        return abs(math.fmod(seed + beta, pattern.horizontal_modulus)) > pattern.horizontal_threshold
    seed = math.fmod(beta + gamma - index * pattern.vertical_step, 360.0)
    return abs(math.fmod(seed + gamma, pattern.vertical_modulus)) > pattern.vertical_threshold


def pattern_lines(
    sample: OrientationSample,
    line_count: int,
    pattern: Optional[LinePatternConfig] = None,
) -> Tuple[LineVisual, ...]:
    pattern = pattern or LinePatternConfig()
    lines = []
    for axis in ("horizontal", "vertical"):
        for index in range(line_count):
            if is_line_visible(sample.beta, sample.gamma, index, axis, pattern):
                lines.append(LineVisual(axis, index, pattern.visible_opacity, 1.0))
            else:
                lines.append(LineVisual(axis, index, 0.0, 0.0))
    return tuple(lines)


def flicker_lines(entries: Sequence[FlickerEntry], line_count: int) -> Tuple[LineVisual, ...]:
    """Map 2×N flicker entries (horizontal first) onto line visuals."""
    if len(entries) != 2 * line_count:
        raise ValueError(f"Expected {2 * line_count} flicker entries, got {len(entries)}")
    lines = []
    for position, entry in enumerate(entries):
        axis: LineAxis = "horizontal" if position < line_count else "vertical"
        lines.append(LineVisual(
            axis,
            position % line_count,
            _clamp(entry.opacity, 0.0, 1.0),
            _clamp(entry.intensity, 0.0, 1.0),
        ))
    return tuple(lines)


def compute_effect_state(
    sample: OrientationSample,
    flicker_entries: Sequence[FlickerEntry] = (),
    policy: LinePolicy = LinePolicy.PATTERN,
    line_count: int = 20,
    pattern: Optional[LinePatternConfig] = None,
) -> EffectState:
    """
    Derive the full effect state for one orientation sample.

    Args:
        sample: Orientation reading (sensor, pointer or neutral)
        flicker_entries: Current flicker entries (FLICKER policy only)
        policy: Line visibility policy
        line_count: Lines per axis
        pattern: Constants of the deterministic pattern

    Returns:
        Fresh EffectState
    """
    n_alpha, n_beta, n_gamma = normalize(sample)

    if policy is LinePolicy.PATTERN:
        lines = pattern_lines(sample, line_count, pattern)
    elif policy is LinePolicy.FLICKER:
        lines = flicker_lines(flicker_entries, line_count)
    else:
        lines = ()

    return EffectState(
        color=compute_color(n_alpha, n_beta, n_gamma),
        transform=compute_transform(n_beta, n_gamma),
        glare_angle_deg=compute_glare_angle(sample.gamma),
        lines=lines,
    )
