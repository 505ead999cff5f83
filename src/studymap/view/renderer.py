"""
Map Renderer
============
Paints one frame of the study map with QPainter.

Draw order:
    1. Orbit rings (orbit mode without a focus path)
    2. Links (normal links, then the dashed focus path)
    3. Nodes (pulsing glow, fill, optional border)
    4. Hover tooltip

Everything except the background fill is drawn in model space under the
camera transform. Nodes and links that are not part of the active focus
path, or not highlighted while hovering, are drawn at ``dim_opacity``.
"""
from __future__ import annotations

from contextlib import contextmanager
import logging
import math
from typing import TYPE_CHECKING, Callable, Iterator, Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QBrush, QFont, QFontMetricsF, QPainter, QPen, QRadialGradient

from studymap.config import RenderConfig
from studymap.controller.simulation import radius_factor
from studymap.model.graph import ATTENTION_WEIGHT, SAFE_WEIGHT, Node
from studymap.model.layout import OrbitLayout
from studymap.view.colors import parse_color, with_alpha

if TYPE_CHECKING:
    from studymap.controller.engine import GraphEngine

logger = logging.getLogger(__name__)

TooltipFormatter = Callable[[Node], list[str]]


def default_tooltip(node: Node) -> list[str]:
    """Label, weight as a percentage, and item count / last review from the payload."""
    lines = [node.label or node.id]
    payload = node.payload or {}
    if node.is_group:
        if "count" in payload:
            lines.append(f"Items: {payload['count']}")
        if node.weight is not None:
            lines.append(f"Avg. mastery: {round(node.weight)}%")
    else:
        if node.weight is not None:
            lines.append(f"Mastery: {round(node.weight)}%")
        if payload.get("last_review"):
            lines.append(f"Last review: {payload['last_review']}")
    return lines


class MapRenderer:
    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        tooltip: Optional[TooltipFormatter] = None,
    ) -> None:
        self.config = config or RenderConfig()
        self.tooltip = tooltip or default_tooltip
        self.skipped: list[str] = []  # primitives skipped during the last frame

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def render(self, painter: QPainter, engine: GraphEngine) -> None:
        self.skipped = []
        cfg = self.config

        with self._primitive("background"):
            painter.fillRect(QRectF(0.0, 0.0, engine.width, engine.height), parse_color(cfg.background))

        if len(engine.graph) == 0:
            return

        with self._primitive("antialiasing"):
            painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)

        t = engine.transform
        painter.save()
        try:
            painter.translate(t.x, t.y)
            painter.scale(t.k, t.k)

            if isinstance(engine.mode, OrbitLayout) and engine.focus_path is None:
                self._draw_orbit_rings(painter, engine.width, engine.height, engine.config.simulation.orbit_extent)

            highlighted = engine.interaction.highlighted_ids()
            self._draw_links(painter, engine, highlighted)
            self._draw_path(painter, engine)
            self._draw_nodes(painter, engine, highlighted)

            hovered = engine.interaction.hovered
            if hovered is not None and engine.interaction.dragged is None:
                self._draw_tooltip(painter, engine, hovered)
        finally:
            painter.restore()

    # ------------------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------------------

    def _draw_orbit_rings(self, painter: QPainter, width: float, height: float, extent: float) -> None:
        cfg = self.config
        cx, cy = width / 2.0, height / 2.0
        rx, ry = width / 2.0 * extent, height / 2.0 * extent
        factors = (1.0, radius_factor(ATTENTION_WEIGHT), radius_factor(SAFE_WEIGHT))

        painter.save()
        painter.setOpacity(cfg.ring_opacity)
        painter.setPen(Qt.PenStyle.NoPen)
        for color, factor in zip(cfg.ring_colors, factors):
            with self._primitive("ellipse"):
                painter.setBrush(QBrush(parse_color(color)))
                painter.drawEllipse(QPointF(cx, cy), rx * factor, ry * factor)
        painter.restore()

    def _draw_links(self, painter: QPainter, engine: GraphEngine, highlighted: set[str]) -> None:
        cfg = self.config
        store = engine.store
        path = engine.focus_path
        width = cfg.orbit_link_width if isinstance(engine.mode, OrbitLayout) else cfg.link_width

        normal = QPen(parse_color(cfg.link_color), width)
        dimmed = QPen(parse_color(cfg.link_dimmed_color), width)

        painter.save()
        for link in engine.graph.links:
            a = store.position(link.parent_id)
            b = store.position(link.child_id)
            if a is None or b is None:
                continue
            if highlighted and link.parent_id not in highlighted and link.child_id not in highlighted:
                pen = dimmed
            else:
                pen = normal
            outside_path = path is not None and (link.parent_id not in path or link.child_id not in path)
            painter.setOpacity(cfg.dim_opacity if outside_path else 1.0)
            painter.setPen(pen)
            with self._primitive("line"):
                painter.drawLine(QPointF(*a), QPointF(*b))
        painter.restore()

    def _draw_path(self, painter: QPainter, engine: GraphEngine) -> None:
        path = engine.focus_path
        if path is None or not path.links:
            return
        cfg = self.config

        pen = QPen(parse_color(cfg.path_color), cfg.path_width)
        # Qt dash lengths and offsets are in units of the pen width
        with self._primitive("dash"):
            pen.setDashPattern([d / cfg.path_width for d in cfg.path_dash])
            cycle = sum(cfg.path_dash)
            offset = -((engine.clock * cfg.dash_speed) % cycle)
            pen.setDashOffset(offset / cfg.path_width)

        painter.save()
        painter.setOpacity(1.0)
        painter.setPen(pen)
        for link in path.links:
            a = engine.store.position(link.parent_id)
            b = engine.store.position(link.child_id)
            if a is None or b is None:
                continue
            with self._primitive("line"):
                painter.drawLine(QPointF(*a), QPointF(*b))
        painter.restore()

    def _draw_nodes(self, painter: QPainter, engine: GraphEngine, highlighted: set[str]) -> None:
        cfg = self.config
        path = engine.focus_path

        painter.save()
        for node in engine.graph.nodes:
            pos = engine.store.position(node.id)
            if pos is None:
                continue
            dimmed = (bool(highlighted) and node.id not in highlighted) or (
                path is not None and node.id not in path
            )
            painter.setOpacity(cfg.dim_opacity if dimmed else 1.0)
            center = QPointF(*pos)

            pulse = 0.5 + math.sin(engine.clock + pos[0]) * 0.2
            glow = node.radius + pulse * (cfg.leaf_glow if node.is_leaf else cfg.group_glow)
            with self._primitive("gradient"):
                gradient = QRadialGradient(center, glow)
                gradient.setColorAt(0.0, with_alpha(node.color, 0.6))
                gradient.setColorAt(0.5, with_alpha(node.color, 0.2))
                gradient.setColorAt(1.0, with_alpha(node.color, 0.0))
                painter.setPen(Qt.PenStyle.NoPen)
                painter.setBrush(QBrush(gradient))
                painter.drawEllipse(center, glow, glow)

            with self._primitive("ellipse"):
                painter.setBrush(QBrush(parse_color(node.color)))
                if node.border_color:
                    painter.setPen(QPen(parse_color(node.border_color), cfg.border_width))
                else:
                    painter.setPen(Qt.PenStyle.NoPen)
                painter.drawEllipse(center, node.radius, node.radius)
        painter.restore()

    def _draw_tooltip(self, painter: QPainter, engine: GraphEngine, node: Node) -> None:
        pos = engine.store.position(node.id)
        if pos is None:
            return
        cfg = self.config
        lines = self.tooltip(node)
        if not lines:
            return

        bold = QFont()
        bold.setPixelSize(cfg.tooltip_font_size)
        bold.setBold(True)
        regular = QFont(bold)
        regular.setBold(False)

        pad = cfg.tooltip_padding
        line_height = cfg.tooltip_font_size * 1.4
        text_width = max(
            QFontMetricsF(bold if i == 0 else regular).horizontalAdvance(line)
            for i, line in enumerate(lines)
        )
        box_w = text_width + pad * 2
        box_h = len(lines) * line_height + pad * 2 - (line_height - cfg.tooltip_font_size)

        view_x, view_y, view_w, view_h = engine.transform.visible_rect(engine.width, engine.height)
        box_x, box_y = tooltip_origin(
            pos, node.radius, (box_w, box_h), (view_x, view_y, view_w, view_h), cfg.tooltip_offset,
        )

        painter.save()
        painter.setOpacity(1.0)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QBrush(parse_color(cfg.tooltip_background)))
        rect = QRectF(box_x, box_y, box_w, box_h)
        corner = 6.0 / engine.transform.k
        with self._primitive("rounded_rect"):
            painter.drawRoundedRect(rect, corner, corner)

        for i, line in enumerate(lines):
            painter.setFont(bold if i == 0 else regular)
            painter.setPen(QPen(parse_color(cfg.tooltip_title_color if i == 0 else cfg.tooltip_text_color)))
            baseline = box_y + pad + line_height * i + cfg.tooltip_font_size
            with self._primitive("text"):
                painter.drawText(QPointF(box_x + pad, baseline), line)
        painter.restore()

    # ------------------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------------------

    @contextmanager
    def _primitive(self, name: str) -> Iterator[None]:
        """Skip a drawing primitive the surface does not support instead of aborting the frame."""
        try:
            yield
        except (AttributeError, NotImplementedError) as e:
            if name not in self.skipped:
                self.skipped.append(name)
                logger.debug(f"Skipping unsupported primitive '{name}': {e}")


def tooltip_origin(
    anchor: tuple[float, float],
    radius: float,
    size: tuple[float, float],
    view: tuple[float, float, float, float],
    offset: float = 10.0,
) -> tuple[float, float]:
    """
    Top-left corner of a tooltip box next to a node, in model coordinates.

    The box sits right of the node, vertically centred. It flips to the left
    when it would leave the visible area on the right and is clamped 5 units
    inside the top and bottom edges.
    """
    x, y = anchor
    box_w, box_h = size
    view_x, view_y, view_w, view_h = view

    box_x = x + radius + offset
    box_y = y - box_h / 2.0
    if box_x + box_w > view_x + view_w:
        box_x = x - radius - offset - box_w
    if box_y < view_y:
        box_y = view_y + 5.0
    if box_y + box_h > view_y + view_h:
        box_y = view_y + view_h - box_h - 5.0
    return box_x, box_y
