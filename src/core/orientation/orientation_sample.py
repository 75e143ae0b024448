"""
Orientation samples in device-orientation degrees.

A sample is a single reading of the three rotational axes:
- alpha: compass heading, 0° to 360°
- beta: front-back tilt, -180° to 180°
- gamma: left-right tilt, -90° to 90°

Samples come either from the spatial sensor (nullable axes, treated as 0) or
are synthesized from a pointer position inside the viewport.

Usage:
    sample = OrientationSample.from_event(alpha=None, beta=12.0, gamma=-4.5)
    neutral = OrientationSample.neutral()
    pointer = OrientationSample.from_pointer(x=320, y=240, width=640, height=480)
"""

from dataclasses import dataclass
from typing import Literal, Optional

SampleOrigin = Literal["neutral", "sensor", "pointer"]


@dataclass(frozen=True)
class OrientationSample:
    """Single orientation reading in degrees."""
    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0
    origin: SampleOrigin = "neutral"

    @classmethod
    def neutral(cls) -> "OrientationSample":
        """Centered sample presented before the first real reading."""
        return cls(0.0, 0.0, 0.0, "neutral")

    @classmethod
    def from_event(
        cls,
        alpha: Optional[float],
        beta: Optional[float],
        gamma: Optional[float],
    ) -> "OrientationSample":
        """Build a sensor sample; missing axes default to 0."""
        return cls(
            alpha=float(alpha) if alpha is not None else 0.0,
            beta=float(beta) if beta is not None else 0.0,
            gamma=float(gamma) if gamma is not None else 0.0,
            origin="sensor",
        )

    @classmethod
    def from_pointer(cls, x: float, y: float, width: float, height: float) -> "OrientationSample":
        """
        Synthesize a sample from a pointer position.

        Args:
            x, y: Pointer position in viewport coordinates
            width, height: Viewport size (must be > 0)

        Returns:
            Sample with gamma from the horizontal position, beta from the
            vertical one and alpha as their sum. The viewport center maps
            to the neutral (0, 0, 0) angles.
        """
        gamma = (x / width) * 180.0 - 90.0
        beta = (y / height) * 180.0 - 90.0
        return cls(alpha=gamma + beta, beta=beta, gamma=gamma, origin="pointer")
