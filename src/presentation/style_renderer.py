"""
CSS translation of an EffectState.

The host page only paints what it is given: this module turns the state into
the style declarations the element, its glare overlay and its grid lines
need. No orientation math happens here.

Usage:
    styles = StyleRenderer().render(state)
    container.style = styles["container"]
    shine.style = styles["shine"]
"""

from typing import Dict, List

from core.effect.effect_state import EffectState, LineVisual

PERSPECTIVE_PX = 1000
GLARE_STOPS = "rgba(255,255,255,0.7) 0%, rgba(255,255,255,0) 60%"


def _fmt(value: float) -> str:
    """Compact number formatting for CSS values (no trailing zeros)."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


class StyleRenderer:
    """Formats EffectState values as CSS declaration dictionaries."""

    def __init__(self, perspective_px: int = PERSPECTIVE_PX) -> None:
        self.perspective_px = perspective_px

    def transform(self, state: EffectState) -> str:
        return (
            f"perspective({self.perspective_px}px) "
            f"rotateX({_fmt(state.transform.rotate_x_deg)}deg) "
            f"rotateY({_fmt(state.transform.rotate_y_deg)}deg)"
        )

    def glare(self, state: EffectState) -> str:
        return f"linear-gradient({_fmt(state.glare_angle_deg)}deg, {GLARE_STOPS})"

    def color(self, state: EffectState) -> str:
        r, g, b = state.color.as_tuple()
        return f"rgb({r}, {g}, {b})"

    def line(self, line: LineVisual, color: str) -> Dict[str, str]:
        glow_px = _fmt(8 * line.glow_intensity)
        return {
            "opacity": _fmt(line.opacity),
            "box-shadow": f"0 0 {glow_px}px {color}",
        }

    def render(self, state: EffectState) -> Dict[str, object]:
        """
        Build all declarations for one state.

        Returns:
            {"container": {...}, "shine": {...}, "lines": [{"axis", "index", ...}]}
        """
        color = self.color(state)
        lines: List[Dict[str, str]] = []
        for line in state.lines:
            declarations = self.line(line, color)
            declarations["axis"] = line.axis
            declarations["index"] = str(line.index)
            lines.append(declarations)

        return {
            "container": {"transform": self.transform(state), "color": color},
            "shine": {"background": self.glare(state)},
            "lines": lines,
        }
