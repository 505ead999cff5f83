"""
Map Window
==========
The demo host around the graph canvas.

Why is this file needed?
------------------------
1. Layout: Control panels on the left, the canvas on the right, layout and
   zoom actions in the toolbar.
2. Host logic: It owns the full node/link set and decides what the canvas
   shows: subtree filter on group click, learning path (focus mode) on
   request, orbit summary counts.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtGui import QAction, QActionGroup, QCloseEvent
from PySide6.QtWidgets import QMainWindow, QSplitter, QVBoxLayout, QWidget

from studymap.config import EngineConfig
from studymap.model.graph import Graph, Link, Node
from studymap.model.layout import FocusPathLayout, ForceLayout, OrbitLayout
from studymap.view.canvas import GraphCanvas
from studymap.view.widgets.panels import FocusPanel, LegendPanel, TierSummaryPanel

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Study Map"
REFIT_DELAY_MS = 100


class MapWindow(QMainWindow):
    # Signal: leaf node the user clicked (the host opens the question)
    item_selected = Signal(object)

    def __init__(
        self,
        nodes: list[Node],
        links: list[Link],
        config: Optional[EngineConfig] = None,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1400, 900)

        self._full = Graph(nodes, links)
        self._filter: Optional[Node] = None
        self._focus: Optional[Node] = None
        self._orbit = False

        # --- MAIN CONTAINER ---
        splitter = QSplitter(Qt.Orientation.Horizontal)
        self.setCentralWidget(splitter)

        # --- LEFT SIDE: Panels ---
        side = QWidget()
        side_layout = QVBoxLayout(side)
        self.focus_panel = FocusPanel()
        self.summary_panel = TierSummaryPanel()
        self.legend_panel = LegendPanel()
        side_layout.addWidget(self.focus_panel)
        side_layout.addWidget(self.summary_panel)
        side_layout.addWidget(self.legend_panel)
        side_layout.addStretch()
        splitter.addWidget(side)

        # --- RIGHT SIDE: Canvas ---
        self.canvas = GraphCanvas(config=config, seed=seed)
        splitter.addWidget(self.canvas)
        splitter.setSizes([300, 1100])

        # --- SIGNAL CONNECTIONS ---
        self.canvas.node_clicked.connect(self.on_node_clicked)
        self.canvas.node_hovered.connect(self.on_node_hovered)
        self.focus_panel.focus_requested.connect(self.enter_focus)
        self.focus_panel.focus_exit_requested.connect(self.exit_focus)
        self.focus_panel.filter_clear_requested.connect(lambda: self.set_filter(None))

        self._create_actions()
        self._create_toolbar()

        # Initial data
        self.summary_panel.set_counts(self._full.tier_counts())
        self.summary_panel.setVisible(False)
        self._push_graph()

    def _create_actions(self) -> None:
        self.act_graph = QAction("Graph", self)
        self.act_graph.setCheckable(True)
        self.act_graph.setChecked(True)
        self.act_graph.triggered.connect(lambda: self.set_orbit(False))

        self.act_orbit = QAction("Orbit", self)
        self.act_orbit.setCheckable(True)
        self.act_orbit.triggered.connect(lambda: self.set_orbit(True))

        layout_group = QActionGroup(self)
        layout_group.setExclusive(True)
        layout_group.addAction(self.act_graph)
        layout_group.addAction(self.act_orbit)

        self.act_zoom_in = QAction("Zoom in", self)
        self.act_zoom_in.setShortcut("Ctrl++")
        self.act_zoom_in.triggered.connect(self.canvas.zoom_in)

        self.act_zoom_out = QAction("Zoom out", self)
        self.act_zoom_out.setShortcut("Ctrl+-")
        self.act_zoom_out.triggered.connect(self.canvas.zoom_out)

        self.act_reset = QAction("Reset view", self)
        self.act_reset.setShortcut("Ctrl+0")
        self.act_reset.triggered.connect(self.canvas.reset_view)

    def _create_toolbar(self) -> None:
        toolbar = self.addToolBar("View")
        toolbar.setMovable(False)
        toolbar.addAction(self.act_graph)
        toolbar.addAction(self.act_orbit)
        toolbar.addSeparator()
        toolbar.addAction(self.act_zoom_in)
        toolbar.addAction(self.act_zoom_out)
        toolbar.addAction(self.act_reset)

    # ------------------------------------------------------------------------------
    # Host state
    # ------------------------------------------------------------------------------

    def set_data(self, nodes: list[Node], links: list[Link]) -> None:
        """Replace the study data; filter and focus survive if their node still exists."""
        self._full = Graph(nodes, links)
        if self._filter is not None:
            self._filter = self._full.get(self._filter.id)
        if self._focus is not None:
            self._focus = self._full.get(self._focus.id)
            self.focus_panel.set_focus(self._focus)
        self.focus_panel.set_filter(self._filter)
        self.summary_panel.set_counts(self._full.tier_counts())
        self._push_graph()

    def set_orbit(self, orbit: bool) -> None:
        self._orbit = orbit
        self.summary_panel.setVisible(orbit)
        self._push_mode()
        logger.info(f"Layout switched to {'orbit' if orbit else 'graph'}.")

    def set_filter(self, node: Optional[Node]) -> None:
        self._filter = node
        self.focus_panel.set_filter(node)
        self._push_graph()
        self._schedule_refit()

    def enter_focus(self, node_id: str) -> None:
        node = self._visible_graph().get(node_id)
        if node is None or not node.is_group:
            logger.warning(f"Cannot focus on '{node_id}': not a visible group node.")
            return
        self._focus = node
        self.focus_panel.set_focus(node)
        self._push_mode()
        self._schedule_refit()

    def exit_focus(self) -> None:
        self._focus = None
        self.focus_panel.set_focus(None)
        self.focus_panel.set_candidate(None)
        self._push_mode()
        self._schedule_refit()

    def _visible_graph(self) -> Graph:
        if self._filter is None:
            return self._full
        return self._full.subtree(self._filter.id)

    def _push_graph(self) -> None:
        graph = self._visible_graph()
        self.canvas.set_graph(graph.nodes, graph.links)
        if self._focus is not None and self._focus.id not in graph:
            self._focus = None
            self.focus_panel.set_focus(None)
        self._push_mode()

    def _push_mode(self) -> None:
        if self._focus is not None:
            self.canvas.set_mode(FocusPathLayout(self._focus.id))
        elif self._orbit:
            self.canvas.set_mode(OrbitLayout())
        else:
            self.canvas.set_mode(ForceLayout())

    def _schedule_refit(self) -> None:
        QTimer.singleShot(REFIT_DELAY_MS, self.canvas.reset_view)

    # ------------------------------------------------------------------------------
    # Canvas callbacks
    # ------------------------------------------------------------------------------

    def on_node_clicked(self, node: Optional[Node]) -> None:
        if self._focus is not None:
            return  # clicks are disabled while a learning path is shown

        if node is None:
            if self._filter is not None:
                self.set_filter(None)
        elif node.is_group:
            self.set_filter(None if self._filter is not None and self._filter.id == node.id else node)
        else:
            logger.info(f"Item selected: {node.id}")
            self.statusBar().showMessage(f"Selected {node.label}", 3000)
            self.item_selected.emit(node)

    def on_node_hovered(self, node: Optional[Node]) -> None:
        # keep the last hovered group so the panel button stays usable
        if node is not None and self._focus is None and self._filter is None:
            self.focus_panel.set_candidate(node)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.canvas.shutdown()
        super().closeEvent(event)
