"""
Colour Helpers
Parses the CSS-style colour strings used by node styles into QColor.
"""
from __future__ import annotations

from functools import lru_cache
import logging
import re

from PySide6.QtGui import QColor

logger = logging.getLogger(__name__)

_FUNC_RE = re.compile(r"^\s*(rgba?|hsla?)\s*\(\s*([^)]*)\)\s*$", re.IGNORECASE)


def _channel(token: str, scale: float) -> float:
    """'50%' -> 0.5, '128' -> 128 / scale."""
    token = token.strip()
    if token.endswith("%"):
        return float(token[:-1]) / 100.0
    return float(token) / scale


@lru_cache(maxsize=512)
def _parse(text: str) -> QColor:
    match = _FUNC_RE.match(text)
    if match is None:
        color = QColor(text.strip())
        if not color.isValid():
            logger.debug(f"Unknown colour '{text}', using grey.")
            color = QColor("gray")
        return color

    func = match.group(1).lower()
    parts = [p for p in re.split(r"[,\s/]+", match.group(2)) if p]
    alpha = _channel(parts[3], 1.0) if len(parts) > 3 else 1.0
    alpha = max(0.0, min(1.0, alpha))

    if func.startswith("rgb"):
        r, g, b = (max(0.0, min(1.0, _channel(p, 255.0))) for p in parts[:3])
        return QColor.fromRgbF(r, g, b, alpha)

    hue = (float(parts[0].rstrip("deg")) % 360.0) / 360.0
    sat = max(0.0, min(1.0, _channel(parts[1], 100.0)))
    light = max(0.0, min(1.0, _channel(parts[2], 100.0)))
    return QColor.fromHslF(hue, sat, light, alpha)


def parse_color(text: str) -> QColor:
    """
    Parse '#rrggbb', SVG names, 'rgb()/rgba()' and 'hsl()/hsla()'.

    Returns a fresh QColor each call, so callers may mutate it.
    """
    return QColor(_parse(text))


def with_alpha(text: str, alpha: float) -> QColor:
    """The colour ``text`` with its alpha channel replaced."""
    color = parse_color(text)
    color.setAlphaF(max(0.0, min(1.0, alpha)))
    return color
