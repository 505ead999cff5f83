"""Camera transform: screen = model * k + (x, y)."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Transform:
    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def to_model(self, sx: float, sy: float) -> tuple[float, float]:
        """Screen pixel -> model coordinate."""
        return (sx - self.x) / self.k, (sy - self.y) / self.k

    def to_screen(self, mx: float, my: float) -> tuple[float, float]:
        """Model coordinate -> screen pixel."""
        return mx * self.k + self.x, my * self.k + self.y

    def visible_rect(self, width: float, height: float) -> tuple[float, float, float, float]:
        """(x, y, w, h) of the model-space area covered by a width x height viewport."""
        return -self.x / self.k, -self.y / self.k, width / self.k, height / self.k

    def copy(self) -> Transform:
        return Transform(self.k, self.x, self.y)

    def as_tuple(self) -> tuple[float, float, float]:
        return self.k, self.x, self.y
