"""
Simulation Engine
=================
Advances the Position Store by one tick under the active layout mode.

Why is this file needed?
------------------------
1. Physics: Force mode integrates repulsion, link springs and a centre pull
   with damping, and stops integrating once the graph has settled.
2. Layouts: Orbit and focus-path modes are deterministic target seeking, the
   targets are cached per graph/viewport.
3. Single dispatch: ``step`` is the only entry point and matches over the
   layout union, so a stale flag from a previous mode cannot leak into the
   next one.
"""
from __future__ import annotations

import logging
import math
import zlib
from typing import TYPE_CHECKING, Optional

import numpy as np

from studymap.config import SimulationConfig
from studymap.model.graph import Graph
from studymap.model.layout import (
    FocusPath, FocusPathLayout, ForceLayout, LayoutMode, OrbitLayout, serpentine_slots,
)

if TYPE_CHECKING:
    import numpy.typing as npt

    from studymap.model.positions import PositionStore

logger = logging.getLogger(__name__)


def _unit_hash(key: str) -> float:
    """Stable pseudo-random number in [0, 1) derived from ``key``."""
    return zlib.crc32(key.encode("utf-8")) / 2**32


def radius_factor(weight: float, margin: float = 5.0) -> float:
    """Orbit radius as a fraction of the outer ring: heavier nodes sit closer to the centre."""
    return 1.0 - weight / (100.0 + margin)


class SimulationEngine:
    def __init__(self, store: PositionStore, config: Optional[SimulationConfig] = None) -> None:
        self.config = config or SimulationConfig()
        self.store = store

        self.graph: Graph = Graph()
        self.mode: LayoutMode = ForceLayout()
        self.focus_path: Optional[FocusPath] = None
        self.width: float = 0.0
        self.height: float = 0.0

        self.settled: bool = False
        self.dragged_id: Optional[str] = None
        self.centering_pending: bool = False
        self.last_energy: float = 0.0
        self.ticks: int = 0

        # link endpoints as row indices into the store, rebuilt with the graph
        self._link_src: npt.NDArray[np.intp] = np.zeros(0, dtype=np.intp)
        self._link_dst: npt.NDArray[np.intp] = np.zeros(0, dtype=np.intp)
        self._targets: Optional[tuple[npt.NDArray[np.intp], npt.NDArray[np.float64]]] = None

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2.0, self.height / 2.0

    def set_graph(self, graph: Graph) -> None:
        """Adopt a new node/link set. The store must already be reconciled against it."""
        self.graph = graph
        self._link_src = self.store.indices_of(l.parent_id for l in graph.links)
        self._link_dst = self.store.indices_of(l.child_id for l in graph.links)
        if self.dragged_id is not None and self.dragged_id not in graph:
            self.dragged_id = None
        self._targets = None
        self.perturb()

    def set_viewport(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self._targets = None

    def set_mode(self, mode: LayoutMode, focus_path: Optional[FocusPath] = None) -> None:
        previous = self.mode
        self.mode = mode
        self.focus_path = focus_path if isinstance(mode, FocusPathLayout) else None
        self._targets = None

        if previous == mode:
            return

        match mode:
            case ForceLayout():
                self.store.kick(self.config.mode_kick)
                self.perturb()
            case OrbitLayout():
                self.centering_pending = True
            case FocusPathLayout():
                pass
        logger.info(f"Layout mode switched: {type(previous).__name__} -> {type(mode).__name__}.")

    def perturb(self) -> None:
        """Wake the force simulation up."""
        if self.settled:
            logger.debug("Force simulation perturbed.")
        self.settled = False

    def begin_drag(self, node_id: str) -> None:
        self.dragged_id = node_id
        self.perturb()

    def end_drag(self) -> None:
        if self.dragged_id is not None:
            self.store.stop(self.dragged_id)
        self.dragged_id = None

    def step(self) -> bool:
        """
        Advance one tick.

        Returns:
            True when the orbit layout has calmed down and asks the host for a
            one-shot viewport refit, False otherwise.
        """
        if len(self.store) == 0:
            return False
        self.ticks += 1

        match self.mode:
            case ForceLayout():
                self._step_force()
                return False
            case OrbitLayout():
                return self._step_orbit()
            case FocusPathLayout():
                self._step_focus()
                return False

    # ------------------------------------------------------------------------------
    # Force-directed
    # ------------------------------------------------------------------------------

    def _step_force(self) -> None:
        if self.settled and self.dragged_id is None:
            return

        cfg = self.config
        pos = self.store.pos
        vel = self.store.vel
        n = len(pos)

        # centre pull
        vel += (np.asarray(self.center) - pos) * cfg.center_strength

        # pairwise repulsion; diff[i, j] points from i towards j
        diff = pos[np.newaxis, :, :] - pos[:, np.newaxis, :]
        dist = np.sqrt(np.einsum("ijk,ijk->ij", diff, diff))
        dist = np.maximum(dist, cfg.min_distance)
        magnitude = -cfg.repulsion / (dist * dist * dist)
        vel += np.einsum("ij,ijk->ik", magnitude, diff)

        # link springs
        if len(self._link_src):
            delta = pos[self._link_dst] - pos[self._link_src]
            length = np.maximum(np.hypot(delta[:, 0], delta[:, 1]), cfg.min_distance)
            pull = ((length - cfg.link_distance) * cfg.link_strength / length)[:, np.newaxis] * delta
            np.add.at(vel, self._link_src, pull)
            np.add.at(vel, self._link_dst, -pull)

        moving = np.ones(n, dtype=bool)
        dragged_row = self.store.index_of(self.dragged_id) if self.dragged_id is not None else None
        if dragged_row is not None:
            moving[dragged_row] = False
            vel[dragged_row] = 0.0

        vel[moving] *= cfg.damping
        pos[moving] += vel[moving]

        self.last_energy = float(np.einsum("ij,ij->", vel[moving], vel[moving]))
        if self.dragged_id is None and self.last_energy < cfg.energy_threshold * int(moving.sum()):
            self.settled = True
            logger.debug(f"Force simulation settled after {self.ticks} ticks (energy {self.last_energy:.2e}).")

    # ------------------------------------------------------------------------------
    # Orbit
    # ------------------------------------------------------------------------------

    def orbit_targets(self) -> npt.NDArray[np.float64]:
        """(N, 2) target positions of every node in store order."""
        cfg = self.config
        cx, cy = self.center
        rx = self.width / 2.0 * cfg.orbit_extent
        ry = self.height / 2.0 * cfg.orbit_extent

        sector_roots = [n.id for n in self.graph.roots if n.is_group]
        sector_angle = {
            root_id: i / len(sector_roots) * 2.0 * math.pi
            for i, root_id in enumerate(sector_roots)
        }

        targets = np.empty((len(self.store), 2), dtype=np.float64)
        for row, node_id in enumerate(self.store.ids):
            node = self.graph.get(node_id)
            if node is None:
                targets[row] = self.store.pos[row]
                continue
            root_id = self.graph.root_of(node_id)
            base = sector_angle.get(root_id)
            if base is None:
                base = _unit_hash(node_id) * 2.0 * math.pi
            span = cfg.orbit_leaf_jitter if node.is_leaf else cfg.orbit_group_jitter
            angle = base + (_unit_hash(node_id + "#jitter") - 0.5) * span

            weight = node.weight if node.weight is not None else cfg.orbit_default_weight
            factor = radius_factor(weight, cfg.orbit_margin)
            targets[row] = (cx + math.cos(angle) * rx * factor, cy + math.sin(angle) * ry * factor)
        return targets

    def _step_orbit(self) -> bool:
        if self._targets is None:
            targets = self.orbit_targets()
            self._targets = (np.arange(len(targets), dtype=np.intp), targets)

        motion = self._seek(self.config.orbit_seek)

        threshold = self.config.orbit_centering_threshold * len(self.store)
        if self.centering_pending and motion < threshold:
            self.centering_pending = False
            logger.debug("Orbit layout calmed down, requesting a refit.")
            return True
        return False

    # ------------------------------------------------------------------------------
    # Focus path
    # ------------------------------------------------------------------------------

    def focus_targets(self) -> tuple[npt.NDArray[np.intp], npt.NDArray[np.float64]]:
        """Store rows of the path leaves and their grid slots."""
        cfg = self.config
        leaves = self.focus_path.leaves if self.focus_path is not None else ()
        rows = self.store.indices_of(n.id for n in leaves)
        slots = serpentine_slots(
            len(rows),
            self.width,
            self.height,
            spacing_x=cfg.focus_spacing_x,
            spacing_y=cfg.focus_spacing_y,
            row_fill=cfg.focus_row_fill,
        )
        return rows, np.array(slots, dtype=np.float64).reshape(-1, 2)

    def _step_focus(self) -> None:
        if self._targets is None:
            self._targets = self.focus_targets()
        self._seek(self.config.focus_seek)

    # ------------------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------------------

    def _seek(self, fraction: float) -> float:
        """Move the target rows ``fraction`` of the way to their targets; return sum(|v|)."""
        rows, targets = self._targets
        pos = self.store.pos
        vel = self.store.vel

        # rows outside the layout hold still
        vel[:] = 0.0
        if len(rows) == 0:
            return 0.0

        mask = np.ones(len(rows), dtype=bool)
        dragged_row = self.store.index_of(self.dragged_id) if self.dragged_id is not None else None
        if dragged_row is not None:
            mask &= rows != dragged_row
        rows, targets = rows[mask], targets[mask]

        vel[rows] = (targets - pos[rows]) * fraction
        pos[rows] += vel[rows]
        return float(np.abs(vel[rows]).sum())
