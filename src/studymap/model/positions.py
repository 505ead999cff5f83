"""
Position Store
==============
Per-node kinetic state (position + velocity) keyed by stable node id.

Why is this file needed?
------------------------
1. Continuity: The graph is rebuilt wholesale whenever the study data changes.
   Positions must survive that, otherwise every edit would make the map jump.
   ``reconcile`` keeps the entries of surviving ids untouched, creates fresh
   ones for new ids and prunes the rest.
2. Performance: The state lives in contiguous numpy arrays (one row per node,
   in graph order) so the force simulation can be vectorized. A dict maps
   node id -> row index.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class PositionStore:
    def __init__(self, rng: Optional[np.random.Generator] = None) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()
        self._index: dict[str, int] = {}
        self._ids: list[str] = []
        self.pos: npt.NDArray[np.float64] = np.zeros((0, 2), dtype=np.float64)
        self.vel: npt.NDArray[np.float64] = np.zeros((0, 2), dtype=np.float64)

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def reconcile(
        self,
        node_ids: Sequence[str],
        center: tuple[float, float],
        spread: float = 100.0,
    ) -> None:
        """
        Merge the store against a new id set.

        Existing ids keep their position and velocity, new ids get a random
        position within ``spread / 2`` of ``center`` and zero velocity,
        missing ids are dropped. Rows are re-ordered to follow ``node_ids``.
        """
        n = len(node_ids)
        new_pos = np.empty((n, 2), dtype=np.float64)
        new_vel = np.zeros((n, 2), dtype=np.float64)

        created = 0
        for row, node_id in enumerate(node_ids):
            old = self._index.get(node_id)
            if old is not None:
                new_pos[row] = self.pos[old]
                new_vel[row] = self.vel[old]
            else:
                new_pos[row] = np.asarray(center) + (self._rng.random(2) - 0.5) * spread
                created += 1

        removed = len(set(self._ids) - set(node_ids))
        self._ids = list(node_ids)
        self._index = {node_id: row for row, node_id in enumerate(self._ids)}
        self.pos = new_pos
        self.vel = new_vel

        if created or removed:
            logger.debug(f"Position store reconciled: +{created} / -{removed} entries, {n} total.")

    def clear(self) -> None:
        self.reconcile([], (0.0, 0.0))

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(self._ids)

    def index_of(self, node_id: str) -> Optional[int]:
        return self._index.get(node_id)

    def indices_of(self, node_ids: Iterable[str]) -> npt.NDArray[np.intp]:
        """Row indices of the given ids, skipping unknown ones."""
        return np.array(
            [self._index[i] for i in node_ids if i in self._index],
            dtype=np.intp,
        )

    def position(self, node_id: str) -> Optional[tuple[float, float]]:
        row = self._index.get(node_id)
        if row is None:
            return None
        return float(self.pos[row, 0]), float(self.pos[row, 1])

    def velocity(self, node_id: str) -> Optional[tuple[float, float]]:
        row = self._index.get(node_id)
        if row is None:
            return None
        return float(self.vel[row, 0]), float(self.vel[row, 1])

    def pin(self, node_id: str, x: float, y: float) -> None:
        """Place a node at (x, y) and zero its velocity."""
        row = self._index.get(node_id)
        if row is None:
            return
        self.pos[row] = (x, y)
        self.vel[row] = 0.0

    def stop(self, node_id: str) -> None:
        row = self._index.get(node_id)
        if row is not None:
            self.vel[row] = 0.0

    def kick(self, magnitude: float) -> None:
        """Add a uniform random velocity in [-magnitude/2, magnitude/2] to every node."""
        if len(self._ids) == 0 or magnitude == 0.0:
            return
        self.vel += (self._rng.random(self.vel.shape) - 0.5) * magnitude

    def bounds(self, node_ids: Optional[Iterable[str]] = None) -> Optional[tuple[float, float, float, float]]:
        """(x_min, y_min, x_max, y_max) of the given nodes, or of all nodes."""
        if node_ids is None:
            pts = self.pos
        else:
            pts = self.pos[self.indices_of(node_ids)]
        if len(pts) == 0:
            return None
        x_min, y_min = pts.min(axis=0)
        x_max, y_max = pts.max(axis=0)
        return float(x_min), float(y_min), float(x_max), float(y_max)
