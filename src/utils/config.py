"""
Centralized configuration for the Tilt Shine effect engine.

This module provides all configuration constants and runtime settings for:
- Orientation acquisition (sensor vs pointer fallback)
- Effect state derivation (color, tilt, glare, line grid)
- Flicker perturbation timing and probability
- OpenCV preview host
- Telemetry output

The Config class contains all constants as class attributes, making them
accessible throughout the application without instantiation.

Usage:
    from utils.config import Config

    line_count = Config.LINE_COUNT
    if Config.LINE_POLICY == "flicker":
        # Start the flicker scheduler
"""


class Config:
    """System configuration constants for the Tilt Shine effect."""

    # ==========================================================================
    # LINE GRID: Decorative lines overlaying the effect
    # ==========================================================================

    LINE_COUNT = 20                     # Lines per axis (horizontal + vertical)
    LINE_POLICY = "pattern"             # "pattern", "flicker" or "none"

    # Deterministic pattern policy
    PATTERN_HORIZONTAL_STEP = 7         # Seed step per horizontal line index
    PATTERN_HORIZONTAL_MODULUS = 17
    PATTERN_HORIZONTAL_THRESHOLD = 5
    PATTERN_VERTICAL_STEP = 13          # Subtracted per vertical line index
    PATTERN_VERTICAL_MODULUS = 19
    PATTERN_VERTICAL_THRESHOLD = 6
    PATTERN_LINE_OPACITY = 0.6          # Opacity of a visible pattern line

    # ==========================================================================
    # FLICKER: Periodic random perturbation of line opacity/intensity
    # ==========================================================================

    FLICKER_TICK_MS = 50                # Timer period in milliseconds
    FLICKER_RESAMPLE_PROBABILITY = 0.2  # Chance per entry per tick
    FLICKER_OPACITY_MIN = 0.3
    FLICKER_OPACITY_MAX = 0.8
    FLICKER_SEED = None                 # None = entropy from OS

    # ==========================================================================
    # PREVIEW: OpenCV reference host
    # ==========================================================================

    PREVIEW_WIDTH = 512
    PREVIEW_HEIGHT = 512
    PREVIEW_WINDOW_NAME = "Tilt Shine Preview"
    PREVIEW_POLL_MS = 16                # cv2.waitKey poll interval (~60 FPS)
    PREVIEW_REPLAY_RATE_HZ = 60.0       # Replay speed for recorded samples

    # ==========================================================================
    # TELEMETRY
    # ==========================================================================

    TELEMETRY_ENABLED = True
    TELEMETRY_DIR = "logs"
