"""
Graph Model
===========
Nodes, links and the validated forest the engine works on.

Why is this file needed?
------------------------
1. Contract: The external graph builder hands over a raw node/link set. This
   module defines exactly what a Node and a Link are.
2. Validation: The link set must form a forest. Broken links (unknown ids,
   second parents, cycles) are dropped here, once, so the simulation and the
   renderer never have to check again.
3. Topology: Parent/children/neighbour maps and root lookup are derived once
   per rebuild instead of per frame.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import Any, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------------------
class NodeCategory(StrEnum):
    GROUP = "group"
    LEAF = "leaf"


class WeightTier(StrEnum):
    """Proficiency bands used by the orbit rings and the tier summary."""
    CRITICAL = "critical"
    ATTENTION = "attention"
    SAFE = "safe"


ATTENTION_WEIGHT = 40.0
SAFE_WEIGHT = 80.0


def weight_tier(weight: float) -> WeightTier:
    if weight < ATTENTION_WEIGHT:
        return WeightTier.CRITICAL
    if weight < SAFE_WEIGHT:
        return WeightTier.ATTENTION
    return WeightTier.SAFE


# ------------------------------------------------------------------------------
# Data Structures
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class Node:
    id: str
    category: NodeCategory
    radius: float
    color: str
    label: str = ""
    weight: Optional[float] = None  # 0-100
    border_color: Optional[str] = None
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_group(self) -> bool:
        return self.category == NodeCategory.GROUP

    @property
    def is_leaf(self) -> bool:
        return self.category == NodeCategory.LEAF


@dataclass(frozen=True)
class Link:
    """Directed parent -> child edge."""
    parent_id: str
    child_id: str


# ------------------------------------------------------------------------------
# Forest
# ------------------------------------------------------------------------------
class Graph:
    """
    Immutable, validated forest built from a raw node/link set.

    Node order is preserved: it is the draw order (later nodes are drawn on
    top) and the tie-break order for focus paths.
    """

    def __init__(self, nodes: Iterable[Node] = (), links: Iterable[Link] = ()) -> None:
        self.nodes: tuple[Node, ...] = ()
        self.links: tuple[Link, ...] = ()
        self._by_id: dict[str, Node] = {}
        self._parent: dict[str, str] = {}
        self._children: dict[str, list[str]] = {}

        unique: list[Node] = []
        for node in nodes:
            if node.id in self._by_id:
                logger.debug(f"Duplicate node id '{node.id}' ignored.")
                continue
            self._by_id[node.id] = node
            self._children[node.id] = []
            unique.append(node)
        self.nodes = tuple(unique)

        valid: list[Link] = []
        dropped = 0
        for link in links:
            if self._accept(link):
                self._parent[link.child_id] = link.parent_id
                self._children[link.parent_id].append(link.child_id)
                valid.append(link)
            else:
                dropped += 1
        self.links = tuple(valid)

        if dropped:
            logger.debug(f"Dropped {dropped} invalid link(s) while building the graph.")

    def _accept(self, link: Link) -> bool:
        if link.parent_id not in self._by_id or link.child_id not in self._by_id:
            return False
        if link.parent_id == link.child_id:
            return False
        if link.child_id in self._parent:
            return False
        # Walk up from the parent; reaching the child would close a cycle.
        current: Optional[str] = link.parent_id
        while current is not None:
            if current == link.child_id:
                return False
            current = self._parent.get(current)
        return True

    # ------------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def __iter__(self):
        return iter(self.nodes)

    def get(self, node_id: str) -> Optional[Node]:
        return self._by_id.get(node_id)

    def parent_of(self, node_id: str) -> Optional[str]:
        return self._parent.get(node_id)

    def children_of(self, node_id: str) -> tuple[str, ...]:
        return tuple(self._children.get(node_id, ()))

    def neighbors_of(self, node_id: str) -> set[str]:
        """Parent and children of the node."""
        result = set(self._children.get(node_id, ()))
        parent = self._parent.get(node_id)
        if parent is not None:
            result.add(parent)
        return result

    def root_of(self, node_id: str) -> str:
        current = node_id
        while current in self._parent:
            current = self._parent[current]
        return current

    @property
    def roots(self) -> tuple[Node, ...]:
        return tuple(n for n in self.nodes if n.id not in self._parent)

    @property
    def leaves(self) -> tuple[Node, ...]:
        return tuple(n for n in self.nodes if n.is_leaf)

    def descendants(self, node_id: str) -> list[str]:
        """Breadth-first list of all ids below ``node_id`` (excluding it)."""
        result: list[str] = []
        queue = deque(self._children.get(node_id, ()))
        while queue:
            current = queue.popleft()
            result.append(current)
            queue.extend(self._children.get(current, ()))
        return result

    def subtree(self, root_id: str) -> Graph:
        """New graph restricted to ``root_id`` and everything beneath it."""
        if root_id not in self._by_id:
            return Graph()
        keep = {root_id, *self.descendants(root_id)}
        return Graph(
            nodes=[n for n in self.nodes if n.id in keep],
            links=[l for l in self.links if l.parent_id in keep and l.child_id in keep],
        )

    def tier_counts(self) -> dict[WeightTier, int]:
        """Number of leaves per weight tier. Leaves without a weight are skipped."""
        counts = {tier: 0 for tier in WeightTier}
        for node in self.leaves:
            if node.weight is not None:
                counts[weight_tier(node.weight)] += 1
        return counts
