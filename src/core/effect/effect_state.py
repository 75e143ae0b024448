"""Value types handed from the effect engine to the host renderer."""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Tuple

LineAxis = Literal["horizontal", "vertical"]


class LinePolicy(Enum):
    """Where line visibility comes from."""
    PATTERN = "pattern"  # Deterministic function of the orientation
    FLICKER = "flicker"  # Current flicker entries, independent of orientation
    NONE = "none"  # No decorative lines at all


@dataclass(frozen=True)
class RGB:
    r: int
    g: int
    b: int

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class TiltTransform:
    rotate_x_deg: float
    rotate_y_deg: float


@dataclass(frozen=True)
class LineVisual:
    axis: LineAxis
    index: int
    opacity: float  # 0-1
    glow_intensity: float  # 0-1

    @property
    def visible(self) -> bool:
        return self.opacity > 0.0


@dataclass(frozen=True)
class FlickerEntry:
    opacity: float  # 0.3-0.8 with default config
    intensity: float  # 0-1


@dataclass(frozen=True)
class EffectState:
    """Composite visual state. A new instance is built for every update."""
    color: RGB
    transform: TiltTransform
    glare_angle_deg: float
    lines: Tuple[LineVisual, ...]
