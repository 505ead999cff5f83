"""
Layout Modes & Focus Path
=========================
The three mutually exclusive ways the map can be laid out, and the derived
learning path shown by the focus mode.

Logic:
1. ``ForceLayout``: free physics (repulsion + springs + centre pull).
2. ``OrbitLayout``: every node seeks a ring slot given by its weight.
3. ``FocusPathLayout(target_id)``: leaves under one group line up on a grid,
   weakest first, everything else fades out.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

from studymap.model.graph import Link

if TYPE_CHECKING:
    from studymap.model.graph import Graph, Node


@dataclass(frozen=True)
class ForceLayout:
    pass


@dataclass(frozen=True)
class OrbitLayout:
    pass


@dataclass(frozen=True)
class FocusPathLayout:
    target_id: str


LayoutMode = Union[ForceLayout, OrbitLayout, FocusPathLayout]


@dataclass(frozen=True)
class FocusPath:
    """
    Ordered leaves under ``target_id`` (weakest first) and the synthetic links
    chaining them. ``node_ids`` is the set rendered at full opacity: the
    leaves, the target and every group between them.
    """
    target_id: str
    leaves: tuple[Node, ...] = ()
    links: tuple[Link, ...] = ()
    node_ids: frozenset[str] = field(default_factory=frozenset)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.node_ids

    @property
    def order(self) -> list[str]:
        return [n.id for n in self.leaves]


def build_focus_path(graph: Graph, target_id: str) -> FocusPath:
    """
    Breadth-first descent from ``target_id`` collecting every descendant leaf,
    sorted ascending by weight. ``sorted`` is stable, so equal weights keep
    the graph's node order. Unknown weights sort as 0.
    """
    if target_id not in graph:
        return FocusPath(target_id=target_id)

    below = set(graph.descendants(target_id))
    leaves = [n for n in graph.nodes if n.id in below and n.is_leaf]
    leaves.sort(key=lambda n: n.weight if n.weight is not None else 0.0)

    links = tuple(Link(a.id, b.id) for a, b in zip(leaves, leaves[1:]))
    groups = {i for i in below if (node := graph.get(i)) is not None and node.is_group}
    node_ids = frozenset({target_id, *groups, *(n.id for n in leaves)})

    return FocusPath(target_id=target_id, leaves=tuple(leaves), links=links, node_ids=node_ids)


def serpentine_slots(
    count: int,
    width: float,
    height: float,
    spacing_x: float = 120.0,
    spacing_y: float = 100.0,
    row_fill: float = 0.8,
) -> list[tuple[float, float]]:
    """
    Grid slots for ``count`` path leaves, centred in a width x height viewport.

    Row width is how many ``spacing_x`` columns fit in ``row_fill`` of the
    viewport. Odd rows run right to left so consecutive leaves stay neighbours.
    """
    if count <= 0:
        return []
    per_row = max(1, int(width * row_fill // spacing_x))
    n_rows = (count + per_row - 1) // per_row
    cx, cy = width / 2.0, height / 2.0

    slots: list[tuple[float, float]] = []
    for i in range(count):
        row, col = divmod(i, per_row)
        if row % 2 == 1:
            col = per_row - 1 - col
        x = cx + (col - (per_row - 1) / 2.0) * spacing_x
        y = cy + (row - (n_rows - 1) / 2.0) * spacing_y
        slots.append((x, y))
    return slots
