"""
Camera Controller
=================
Pan/zoom state with animated transitions.

Live interaction (drag-panning, wheel zoom) applies immediately and cancels
any running animation. Programmatic moves (fit, zoom buttons) set a pending
target that ``tick`` eases towards: exponential blend, no overshoot.
"""
from __future__ import annotations

import logging
from typing import Optional

from studymap.config import CameraConfig
from studymap.model.transform import Transform

logger = logging.getLogger(__name__)


class CameraController:
    def __init__(self, config: Optional[CameraConfig] = None) -> None:
        self.config = config or CameraConfig()
        self.transform = Transform()
        self.target: Optional[Transform] = None
        self.width: float = 0.0
        self.height: float = 0.0

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def animating(self) -> bool:
        return self.target is not None

    def clamp_scale(self, k: float) -> float:
        return max(self.config.k_min, min(self.config.k_max, k))

    def set_viewport(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)

    def cancel(self) -> None:
        self.target = None

    def animate_to(self, k: float, x: float, y: float) -> None:
        self.target = Transform(self.clamp_scale(k), x, y)

    def reset(self) -> None:
        """Animate back to the identity transform."""
        self.animate_to(1.0, 0.0, 0.0)

    def fit_to_bounds(self, bounds: Optional[tuple[float, float, float, float]]) -> None:
        """
        Set a pending target that frames ``bounds`` = (x_min, y_min, x_max, y_max).

        The scale leaves ``fit_padding`` model units around the box and never
        exceeds ``fit_max_zoom``, so a handful of close nodes does not fill
        the whole screen. Missing bounds or an empty viewport target identity.
        """
        if bounds is None or self.width <= 0.0 or self.height <= 0.0:
            self.reset()
            return

        x_min, y_min, x_max, y_max = bounds
        pad = self.config.fit_padding
        scale = min(
            self.width / (x_max - x_min + pad),
            self.height / (y_max - y_min + pad),
            self.config.fit_max_zoom,
        )
        k = self.clamp_scale(scale)
        self.target = Transform(
            k,
            self.width / 2.0 - (x_min + x_max) / 2.0 * k,
            self.height / 2.0 - (y_min + y_max) / 2.0 * k,
        )
        logger.debug(f"Camera fit target: k={k:.3f}, x={self.target.x:.1f}, y={self.target.y:.1f}.")

    def pan_by(self, dx: float, dy: float) -> None:
        self.target = None
        self.transform.x += dx
        self.transform.y += dy

    def zoom_at(self, sx: float, sy: float, factor: float) -> None:
        """Zoom by ``factor`` keeping the model point under screen (sx, sy) fixed."""
        if factor <= 0.0:
            raise ValueError(f"Zoom factor must be positive, got {factor}.")
        self.target = None
        t = self.transform
        new_k = self.clamp_scale(t.k * factor)
        ratio = new_k / t.k
        t.x = sx - (sx - t.x) * ratio
        t.y = sy - (sy - t.y) * ratio
        t.k = new_k

    def zoom_by(self, factor: float) -> None:
        """Animated zoom anchored at the viewport centre."""
        if factor <= 0.0:
            raise ValueError(f"Zoom factor must be positive, got {factor}.")
        base = self.transform
        new_k = self.clamp_scale(base.k * factor)
        ratio = new_k / base.k
        cx, cy = self.width / 2.0, self.height / 2.0
        self.target = Transform(new_k, cx - (cx - base.x) * ratio, cy - (cy - base.y) * ratio)

    def tick(self) -> bool:
        """Blend towards the pending target. Returns True while an animation is running."""
        if self.target is None:
            return False

        b = self.config.blend
        t, goal = self.transform, self.target
        t.k = t.k * (1.0 - b) + goal.k * b
        t.x = t.x * (1.0 - b) + goal.x * b
        t.y = t.y * (1.0 - b) + goal.y * b

        if (
            abs(t.x - goal.x) < self.config.epsilon_translate
            and abs(t.y - goal.y) < self.config.epsilon_translate
            and abs(t.k - goal.k) < self.config.epsilon_scale
        ):
            self.transform = goal.copy()
            self.target = None
        return True
