"""
Graph Engine
============
The single object a host talks to.

Why is this file needed?
------------------------
1. Orchestration: It owns the Position Store, the Simulation Engine, the
   Camera Controller and the Interaction Layer and keeps them consistent when
   the node/link set, the viewport or the layout mode change.
2. Frame contract: ``tick(dt)`` is the whole per-frame work before painting
   (consume pointer intent -> simulate -> advance camera). The host owns the
   loop, so the engine runs the same under a QTimer and inside a test.
3. Host controls: zoom in/out, reset view and the click/hover callbacks.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from studymap.config import EngineConfig
from studymap.controller.camera import CameraController
from studymap.controller.interaction import InteractionLayer, NodeCallback
from studymap.controller.simulation import SimulationEngine
from studymap.model.graph import Graph, Link, Node
from studymap.model.layout import (
    FocusPath, FocusPathLayout, ForceLayout, LayoutMode, OrbitLayout, build_focus_path,
)
from studymap.model.positions import PositionStore
from studymap.model.transform import Transform

logger = logging.getLogger(__name__)


class GraphEngine:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.store = PositionStore(rng=np.random.default_rng(seed))
        self.simulation = SimulationEngine(self.store, self.config.simulation)
        self.camera = CameraController(self.config.camera)
        self.interaction = InteractionLayer(
            self.store, self.camera, self.simulation, self.config.interaction,
        )

        self.graph = Graph()
        self.mode: LayoutMode = ForceLayout()
        self.focus_path: Optional[FocusPath] = None
        self.width: float = 0.0
        self.height: float = 0.0
        self.clock: float = 0.0  # seconds of animation time, drives pulse and dash flow
        # ids spawned while the viewport had no area, still waiting to be moved to its centre
        self._unplaced: set[str] = set()

    # ------------------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------------------

    @property
    def on_node_click(self) -> Optional[NodeCallback]:
        return self.interaction.on_click

    @on_node_click.setter
    def on_node_click(self, callback: Optional[NodeCallback]) -> None:
        self.interaction.on_click = callback

    @property
    def on_node_hover(self) -> Optional[NodeCallback]:
        return self.interaction.on_hover

    @on_node_hover.setter
    def on_node_hover(self, callback: Optional[NodeCallback]) -> None:
        self.interaction.on_hover = callback

    # ------------------------------------------------------------------------------
    # Inputs from the host
    # ------------------------------------------------------------------------------

    @property
    def transform(self) -> Transform:
        return self.camera.transform

    @property
    def settled(self) -> bool:
        return self.simulation.settled

    @property
    def _has_viewport(self) -> bool:
        return self.width > 0.0 and self.height > 0.0

    def set_graph(self, nodes: Iterable[Node], links: Iterable[Link]) -> None:
        """
        Replace the node/link set.

        Kinetic state is merged by id: surviving nodes keep their position and
        velocity, new ones spawn near the centre, missing ones are pruned.
        """
        self.graph = Graph(nodes, links)
        fresh = [n.id for n in self.graph.nodes if n.id not in self.store]
        center = (self.width / 2.0, self.height / 2.0) if self._has_viewport else (0.0, 0.0)
        self.store.reconcile(
            [n.id for n in self.graph.nodes],
            center=center,
            spread=self.config.simulation.spawn_spread,
        )
        if not self._has_viewport:
            self._unplaced.update(fresh)
        self._unplaced.intersection_update(self.store.ids)
        self.simulation.set_graph(self.graph)
        self.interaction.rebind(self.graph)

        logger.info(f"Graph updated: {len(self.graph.nodes)} nodes, {len(self.graph.links)} links.")

        # focus path follows the leaf set; a vanished target ends focus mode
        if isinstance(self.mode, FocusPathLayout):
            if self.mode.target_id in self.graph:
                self._apply_mode(self.mode)
            else:
                logger.info(f"Focus target '{self.mode.target_id}' left the graph, falling back to force layout.")
                self._apply_mode(ForceLayout())

    def set_viewport(self, width: float, height: float) -> None:
        """
        Resize the render target. Camera state is kept; a refit is requested
        only when no explicit camera target is pending.
        """
        self.width, self.height = float(width), float(height)
        self.simulation.set_viewport(width, height)
        self.camera.set_viewport(width, height)
        if not self._has_viewport:
            return
        if self._unplaced:
            rows = self.store.indices_of(self._unplaced)
            self.store.pos[rows] += np.array([self.width / 2.0, self.height / 2.0])
            logger.debug(f"Moved {len(rows)} node(s) spawned before the viewport existed to its centre.")
            self._unplaced.clear()
        if not self.camera.animating and len(self.graph):
            self.reset_view()

    def set_mode(self, mode: LayoutMode) -> None:
        if isinstance(mode, FocusPathLayout):
            target = self.graph.get(mode.target_id)
            if target is None or not target.is_group:
                raise ValueError(f"Focus path target '{mode.target_id}' is not a group node.")
        if mode == self.mode:
            return
        self._apply_mode(mode)

    def _apply_mode(self, mode: LayoutMode) -> None:
        self.mode = mode
        self.focus_path = (
            build_focus_path(self.graph, mode.target_id)
            if isinstance(mode, FocusPathLayout) else None
        )
        self.simulation.set_mode(mode, self.focus_path)

    # ------------------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------------------

    def tick(self, dt: float = 1.0 / 60.0) -> None:
        """One frame of work: pointer intent -> simulation -> camera."""
        self.clock += dt
        self.interaction.apply()
        if self.simulation.step():
            self.reset_view()
        self.camera.tick()

    # ------------------------------------------------------------------------------
    # Host controls
    # ------------------------------------------------------------------------------

    def zoom_in(self) -> None:
        self.camera.zoom_by(self.config.camera.zoom_step)

    def zoom_out(self) -> None:
        self.camera.zoom_by(1.0 / self.config.camera.zoom_step)

    def reset_view(self) -> None:
        """
        Fit the nodes relevant to the current mode into view.

        Force: every node (and wake the simulation). Focus path: the path
        members. Orbit: the identity transform, the rings are laid out in
        viewport coordinates already.
        """
        if len(self.graph) == 0 or self.width <= 0.0:
            self.camera.reset()
            return

        match self.mode:
            case ForceLayout():
                self.camera.fit_to_bounds(self.store.bounds())
                self.simulation.perturb()
            case FocusPathLayout():
                ids = self.focus_path.node_ids if self.focus_path is not None else ()
                self.camera.fit_to_bounds(self.store.bounds(ids))
            case OrbitLayout():
                self.camera.reset()

    def shutdown(self) -> None:
        """Drop every node and callback."""
        self.interaction.on_click = None
        self.interaction.on_hover = None
        self.set_graph([], [])
