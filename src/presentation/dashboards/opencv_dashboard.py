"""
OpenCV preview host for the Tilt Shine effect.

The dashboard is a reference renderer: it paints each EffectState into a
numpy canvas (color fill, glare gradient, grid lines, tilt warp) and feeds
mouse movement back to the host platform as pointer events, so the pointer
fallback can be exercised on a desktop without an orientation sensor.

Keys:
- q / ESC: quit
- p: user action (requests orientation permission on consent platforms)

Usage:
    dashboard = OpenCVEffectDashboard()
    dashboard.open(platform)
    effect = TiltShineEffect(platform, renderer=dashboard.render)
    while dashboard.poll() != "quit":
        ...
    dashboard.close()
"""

import logging
import math
from typing import Optional

import cv2
import numpy as np

from core.effect.effect_state import EffectState
from utils.config_sections import PreviewConfig, load_preview_config

log = logging.getLogger("effect.renderer")

GLARE_MAX_ALPHA = 0.7
GLARE_EXTENT = 0.6  # Gradient reaches transparency at 60%
BACKGROUND = (24, 24, 24)


class OpenCVEffectDashboard:
    """Single-window OpenCV preview of the effect state."""

    def __init__(self, config: Optional[PreviewConfig] = None) -> None:
        self.config = config or load_preview_config()
        self.width = int(self.config.width)
        self.height = int(self.config.height)
        self.window_name = self.config.window_name

        self.frame_count = 0
        self.canvas = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        self.status_text = ""

        self._platform = None
        self._window_open = False

        # Pixel grid reused for every glare gradient
        ys, xs = np.mgrid[0:self.height, 0:self.width]
        self._xs = xs.astype(np.float32) - self.width / 2.0
        self._ys = ys.astype(np.float32) - self.height / 2.0

    # ------------------------------------------------------------------
    # window
    # ------------------------------------------------------------------

    def open(self, platform=None) -> None:
        """Create the window and forward mouse movement to `platform`."""
        self._platform = platform
        cv2.namedWindow(self.window_name, cv2.WINDOW_AUTOSIZE)
        if platform is not None:
            cv2.setMouseCallback(self.window_name, self._on_mouse)
            platform.set_viewport(self.width, self.height)
        self._window_open = True
        log.info(f"[Dashboard] Preview window ready ({self.width}x{self.height})")

    def close(self) -> None:
        if not self._window_open:
            return
        self._window_open = False
        try:
            cv2.destroyWindow(self.window_name)
        except cv2.error as err:
            log.warning(f"[Dashboard] Error closing window: {err}")

    def poll(self, delay_ms: Optional[int] = None) -> Optional[str]:
        """
        Show the latest canvas and read one key.

        Returns:
            "quit", "user_action" or None
        """
        if not self._window_open:
            return "quit"
        cv2.imshow(self.window_name, self.canvas)
        key = cv2.waitKey(delay_ms if delay_ms is not None else self.config.poll_ms) & 0xFF
        if key in (ord("q"), 27):
            return "quit"
        if key == ord("p"):
            return "user_action"
        return None

    def _on_mouse(self, event, x, y, flags, param) -> None:
        if event == cv2.EVENT_MOUSEMOVE and self._platform is not None:
            self._platform.emit_pointer(float(x), float(y))

    # ------------------------------------------------------------------
    # painting
    # ------------------------------------------------------------------

    def render(self, state: EffectState) -> None:
        """Renderer callback for TiltShineEffect."""
        self.canvas = self.draw(state)
        self.frame_count += 1

    def draw(self, state: EffectState) -> np.ndarray:
        r, g, b = state.color.as_tuple()
        image = np.empty((self.height, self.width, 3), dtype=np.float32)
        image[:] = (b, g, r)

        image = self._apply_glare(image, state.glare_angle_deg)
        self._draw_lines(image, state)

        frame = np.clip(image, 0, 255).astype(np.uint8)
        frame = self._apply_tilt(frame, state.transform.rotate_x_deg, state.transform.rotate_y_deg)

        if self.status_text:
            cv2.putText(frame, self.status_text, (10, self.height - 12),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.45, (255, 255, 255), 1)
        return frame

    def _apply_glare(self, image: np.ndarray, angle_deg: float) -> np.ndarray:
        # CSS gradient angles: 0deg points up, 90deg points right
        theta = math.radians(angle_deg)
        dx, dy = math.sin(theta), -math.cos(theta)
        half = (abs(self.width * dx) + abs(self.height * dy)) / 2.0 or 1.0

        position = (self._xs * dx + self._ys * dy + half) / (2.0 * half)
        alpha = np.clip(GLARE_MAX_ALPHA * (1.0 - position / GLARE_EXTENT), 0.0, GLARE_MAX_ALPHA)
        alpha = alpha[..., None]
        return image * (1.0 - alpha) + 255.0 * alpha

    def _draw_lines(self, image: np.ndarray, state: EffectState) -> None:
        counts = {"horizontal": 0, "vertical": 0}
        for line in state.lines:
            counts[line.axis] = max(counts[line.axis], line.index + 1)

        for line in state.lines:
            if not line.visible:
                continue
            span = self.height if line.axis == "horizontal" else self.width
            position = int((line.index + 0.5) * span / counts[line.axis])
            lo, hi = max(position - 1, 0), min(position + 1, span)
            brightness = 255.0 * (0.5 + 0.5 * line.glow_intensity)
            if line.axis == "horizontal":
                band = image[lo:hi, :, :]
            else:
                band = image[:, lo:hi, :]
            band[...] = band * (1.0 - line.opacity) + brightness * line.opacity

    def _apply_tilt(self, frame: np.ndarray, rotate_x: float, rotate_y: float) -> np.ndarray:
        if rotate_x == 0 and rotate_y == 0:
            return frame
        w, h = self.width, self.height
        inset_y = rotate_y / 90.0 * w
        inset_x = rotate_x / 90.0 * h

        left, right = max(-inset_y, 0.0), max(inset_y, 0.0)
        top, bottom = max(inset_x, 0.0), max(-inset_x, 0.0)

        src = np.float32([[0, 0], [w, 0], [w, h], [0, h]])
        dst = np.float32([
            [top, left],
            [w - top, right],
            [w - bottom, h - right],
            [bottom, h - left],
        ])
        matrix = cv2.getPerspectiveTransform(src, dst)
        return cv2.warpPerspective(frame, matrix, (w, h), borderValue=BACKGROUND)
