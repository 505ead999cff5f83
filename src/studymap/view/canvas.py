"""
Graph Canvas
============
The QWidget render target of the study map.

Why is this file needed?
------------------------
1. Frame loop: A QTimer drives ``engine.tick(dt)`` and schedules a repaint,
   ``paintEvent`` hands a QPainter to the renderer.
2. Events: Qt mouse/wheel/resize events are translated into engine calls.
   They only record intent; the next tick consumes it.
3. Signals: Engine callbacks are re-emitted as Qt signals so panels can
   connect to them like to any other widget.
"""
from __future__ import annotations

import logging
import time
from typing import Iterable, Optional

from PySide6.QtCore import QTimer, Qt, Signal
from PySide6.QtGui import QCloseEvent, QMouseEvent, QPainter, QPaintEvent, QResizeEvent, QWheelEvent
from PySide6.QtWidgets import QWidget

from studymap.config import EngineConfig
from studymap.controller.engine import GraphEngine
from studymap.model.graph import Link, Node
from studymap.model.layout import LayoutMode
from studymap.view.renderer import MapRenderer, TooltipFormatter

logger = logging.getLogger(__name__)

_CURSORS = {
    "grab": Qt.CursorShape.OpenHandCursor,
    "grabbing": Qt.CursorShape.ClosedHandCursor,
    "pointer": Qt.CursorShape.PointingHandCursor,
}


class GraphCanvas(QWidget):
    # Signal: clicked node, or None for empty space
    node_clicked = Signal(object)
    # Signal: hovered node accepted by the hover policy, or None
    node_hovered = Signal(object)

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        tooltip: Optional[TooltipFormatter] = None,
        seed: Optional[int] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.engine = GraphEngine(config, seed=seed)
        self.renderer = MapRenderer(self.engine.config.render, tooltip)

        self.engine.on_node_click = self.node_clicked.emit
        self.engine.on_node_hover = self.node_hovered.emit

        self.setMouseTracking(True)
        self.setMinimumSize(320, 240)
        self.setCursor(_CURSORS["grab"])

        # Frame timer
        self._timer = QTimer(self)
        self._timer.setInterval(self.engine.config.frame_interval_ms)
        self._timer.timeout.connect(self.advance_frame)
        self._last_frame: Optional[float] = None

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def set_graph(self, nodes: Iterable[Node], links: Iterable[Link]) -> None:
        self.engine.set_graph(nodes, links)
        self.update()

    def set_mode(self, mode: LayoutMode) -> None:
        self.engine.set_mode(mode)
        self.update()

    def zoom_in(self) -> None:
        self.engine.zoom_in()

    def zoom_out(self) -> None:
        self.engine.zoom_out()

    def reset_view(self) -> None:
        self.engine.reset_view()

    def start(self) -> None:
        if not self._timer.isActive():
            self._last_frame = None
            self._timer.start()
            logger.debug("Frame loop started.")

    def shutdown(self) -> None:
        """Stop the frame loop. Safe to call more than once."""
        if self._timer.isActive():
            self._timer.stop()
            logger.debug("Frame loop stopped.")

    @property
    def running(self) -> bool:
        return self._timer.isActive()

    def advance_frame(self) -> None:
        now = time.perf_counter()
        dt = 1.0 / 60.0 if self._last_frame is None else now - self._last_frame
        self._last_frame = now
        self.engine.tick(dt)
        self.update()

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        try:
            self.renderer.render(painter, self.engine)
        finally:
            painter.end()

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        size = event.size()
        self.engine.set_viewport(size.width(), size.height())

    def showEvent(self, event) -> None:
        super().showEvent(event)
        self.start()

    def hideEvent(self, event) -> None:
        super().hideEvent(event)
        self.shutdown()

    def closeEvent(self, event: QCloseEvent) -> None:
        self.shutdown()
        super().closeEvent(event)

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            return super().mousePressEvent(event)
        p = event.position()
        self.engine.interaction.pointer_down(p.x(), p.y())
        self._sync_cursor()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        p = event.position()
        self.engine.interaction.pointer_move(p.x(), p.y())
        self._sync_cursor()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            return super().mouseReleaseEvent(event)
        p = event.position()
        self.engine.interaction.pointer_up(p.x(), p.y())
        self._sync_cursor()

    def leaveEvent(self, event) -> None:
        self.engine.interaction.pointer_leave()
        self._sync_cursor()
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        p = event.position()
        # Qt reports eighths of a degree with the opposite sign of DOM deltaY
        self.engine.interaction.wheel(p.x(), p.y(), -event.angleDelta().y())
        event.accept()

    def _sync_cursor(self) -> None:
        self.setCursor(_CURSORS[self.engine.interaction.cursor])
