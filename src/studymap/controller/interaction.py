"""
Interaction Layer
=================
Turns raw pointer/wheel events (screen pixels) into intents for the engine.

States:
    IDLE --(down on node)--> DRAGGING_NODE --(up)--> IDLE
    IDLE --(down on empty)--> PANNING --(up)--> IDLE

A press/release pair that moved less than ``click_threshold`` pixels is a
click and is dispatched to the host; anything longer is a drag or a pan.
"""
from __future__ import annotations

from enum import Enum, auto
import logging
import math
from typing import TYPE_CHECKING, Callable, Optional

from studymap.config import InteractionConfig

if TYPE_CHECKING:
    from studymap.controller.camera import CameraController
    from studymap.controller.simulation import SimulationEngine
    from studymap.model.graph import Graph, Node
    from studymap.model.positions import PositionStore

logger = logging.getLogger(__name__)

NodeCallback = Callable[["Node | None"], None]


class InteractionState(Enum):
    IDLE = auto()
    DRAGGING_NODE = auto()
    PANNING = auto()


class HoverPolicy:
    """Decides which hovered nodes are reported to the host."""

    def __init__(self, categories: frozenset[str]) -> None:
        self.categories = categories

    def __call__(self, node: Optional[Node]) -> bool:
        return node is not None and str(node.category) in self.categories


class InteractionLayer:
    def __init__(
        self,
        store: PositionStore,
        camera: CameraController,
        simulation: SimulationEngine,
        config: Optional[InteractionConfig] = None,
    ) -> None:
        self.config = config or InteractionConfig()
        self.store = store
        self.camera = camera
        self.simulation = simulation
        self.hover_policy = HoverPolicy(self.config.hover_categories)

        self.on_click: Optional[NodeCallback] = None
        self.on_hover: Optional[NodeCallback] = None

        self.state = InteractionState.IDLE
        self.hovered: Optional[Node] = None
        self.dragged: Optional[Node] = None
        self._reported_hover: Optional[str] = None
        self._press: tuple[float, float] = (0.0, 0.0)
        self._last: tuple[float, float] = (0.0, 0.0)
        self._drag_point: Optional[tuple[float, float]] = None

    # ------------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------------

    def hit_test(self, sx: float, sy: float) -> Optional[Node]:
        """
        Topmost node under screen point (sx, sy).

        Nodes are tested in reverse draw order so the one painted last wins.
        The hit radius is the node radius plus ``hit_margin`` screen pixels.
        """
        t = self.camera.transform
        mx, my = t.to_model(sx, sy)
        margin = self.config.hit_margin / t.k
        for node in reversed(self.simulation.graph.nodes):
            pos = self.store.position(node.id)
            if pos is None:
                continue
            reach = node.radius + margin
            if (mx - pos[0]) ** 2 + (my - pos[1]) ** 2 <= reach * reach:
                return node
        return None

    def highlighted_ids(self) -> set[str]:
        """Hovered node plus its neighbours; empty when nothing is hovered."""
        if self.hovered is None:
            return set()
        return {self.hovered.id, *self.simulation.graph.neighbors_of(self.hovered.id)}

    @property
    def cursor(self) -> str:
        if self.state is not InteractionState.IDLE:
            return "grabbing"
        return "pointer" if self.hovered is not None else "grab"

    # ------------------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------------------

    def pointer_down(self, sx: float, sy: float) -> None:
        self.camera.cancel()
        self._press = self._last = (sx, sy)

        node = self.hit_test(sx, sy)
        if node is not None:
            self.state = InteractionState.DRAGGING_NODE
            self.dragged = node
            self._drag_point = self.camera.transform.to_model(sx, sy)
            self.simulation.begin_drag(node.id)
        else:
            self.state = InteractionState.PANNING

    def pointer_move(self, sx: float, sy: float) -> None:
        match self.state:
            case InteractionState.DRAGGING_NODE:
                self._drag_point = self.camera.transform.to_model(sx, sy)
            case InteractionState.PANNING:
                self.camera.pan_by(sx - self._last[0], sy - self._last[1])
            case InteractionState.IDLE:
                self._update_hover(self.hit_test(sx, sy))
        self._last = (sx, sy)

    def pointer_up(self, sx: float, sy: float) -> None:
        if self.state is InteractionState.DRAGGING_NODE and self.dragged is not None:
            mx, my = self.camera.transform.to_model(sx, sy)
            self.store.pin(self.dragged.id, mx, my)
            self.simulation.end_drag()

        was_click = math.hypot(sx - self._press[0], sy - self._press[1]) < self.config.click_threshold

        self.state = InteractionState.IDLE
        self.dragged = None
        self._drag_point = None
        self._last = (sx, sy)

        if was_click and self.on_click is not None:
            self.on_click(self.hit_test(sx, sy))

    def pointer_leave(self) -> None:
        if self.state is InteractionState.IDLE:
            self._update_hover(None)

    def wheel(self, sx: float, sy: float, delta_y: float) -> None:
        factor = max(1.0 - delta_y * self.config.wheel_sensitivity, self.config.wheel_min_factor)
        self.camera.zoom_at(sx, sy, factor)

    def apply(self) -> None:
        """Consume recorded intent: keep the dragged node pinned under the pointer."""
        if self.dragged is not None and self._drag_point is not None:
            self.store.pin(self.dragged.id, *self._drag_point)

    def rebind(self, graph: Graph) -> None:
        """Swap held nodes for their rebuilt instances; drop the ones that are gone."""
        if self.dragged is not None:
            self.dragged = graph.get(self.dragged.id)
            if self.dragged is None:
                self._drag_point = None
                self.state = InteractionState.IDLE
        if self.hovered is not None:
            fresh = graph.get(self.hovered.id)
            if fresh is None:
                self._update_hover(None)
            else:
                self.hovered = fresh

    def _update_hover(self, node: Optional[Node]) -> None:
        if (self.hovered.id if self.hovered else None) == (node.id if node else None):
            return
        self.hovered = node

        reported = node if self.hover_policy(node) else None
        reported_id = reported.id if reported is not None else None
        if reported_id == self._reported_hover:
            return
        self._reported_hover = reported_id
        if self.on_hover is not None:
            self.on_hover(reported)
