"""Tests for model/graph.py - forest validation and topology queries."""

import pytest

from studymap.model.graph import Graph, Link, WeightTier, weight_tier
from factories import group, leaf, make_tree


class TestValidation:
    """Broken links are dropped silently, the rest of the graph survives."""

    def test_link_to_unknown_node_dropped(self):
        graph = Graph([group("a"), leaf("b")], [Link("a", "b"), Link("a", "ghost"), Link("ghost", "b")])

        assert graph.links == (Link("a", "b"),)

    def test_self_link_dropped(self):
        graph = Graph([group("a")], [Link("a", "a")])

        assert graph.links == ()

    def test_second_parent_dropped(self):
        graph = Graph([group("a"), group("b"), leaf("c")], [Link("a", "c"), Link("b", "c")])

        assert graph.links == (Link("a", "c"),)
        assert graph.parent_of("c") == "a"

    def test_cycle_dropped(self):
        graph = Graph(
            [group("a"), group("b"), group("c")],
            [Link("a", "b"), Link("b", "c"), Link("c", "a")],
        )

        assert len(graph.links) == 2
        assert graph.root_of("c") == "a"

    def test_duplicate_node_keeps_first(self):
        graph = Graph([group("a", label="first"), group("a", label="second")])

        assert len(graph) == 1
        assert graph.get("a").label == "first"

    def test_node_order_preserved(self):
        nodes = [leaf("z"), group("m"), leaf("a")]
        graph = Graph(nodes)

        assert [n.id for n in graph] == ["z", "m", "a"]


class TestTopology:
    @pytest.fixture
    def graph(self):
        return Graph(*make_tree(n_roots=2, n_topics=2, n_leaves=3))

    def test_roots(self, graph):
        assert [n.id for n in graph.roots] == ["s0", "s1"]

    def test_children_and_parent(self, graph):
        assert graph.children_of("s0") == ("s0t0", "s0t1")
        assert graph.parent_of("s0t1q2") == "s0t1"
        assert graph.parent_of("s0") is None

    def test_neighbors_include_parent_and_children(self, graph):
        assert graph.neighbors_of("s0t0") == {"s0", "s0t0q0", "s0t0q1", "s0t0q2"}

    def test_descendants_breadth_first(self, graph):
        below = graph.descendants("s1")

        assert below[:2] == ["s1t0", "s1t1"]
        assert len(below) == 2 + 2 * 3

    def test_subtree(self, graph):
        sub = graph.subtree("s0t1")

        assert {n.id for n in sub} == {"s0t1", "s0t1q0", "s0t1q1", "s0t1q2"}
        assert len(sub.links) == 3
        assert [n.id for n in sub.roots] == ["s0t1"]

    def test_subtree_of_unknown_is_empty(self, graph):
        assert len(graph.subtree("nope")) == 0

    def test_contains(self, graph):
        assert "s1t1q0" in graph
        assert "nope" not in graph


class TestWeightTiers:
    @pytest.mark.parametrize("weight, tier", [
        (0.0, WeightTier.CRITICAL),
        (39.9, WeightTier.CRITICAL),
        (40.0, WeightTier.ATTENTION),
        (79.9, WeightTier.ATTENTION),
        (80.0, WeightTier.SAFE),
        (100.0, WeightTier.SAFE),
    ])
    def test_tier_boundaries(self, weight, tier):
        assert weight_tier(weight) == tier

    def test_tier_counts_skip_groups_and_unknown_weights(self):
        graph = Graph([
            group("g", weight=10.0),
            leaf("a", weight=10.0),
            leaf("b", weight=50.0),
            leaf("c", weight=90.0),
            leaf("d", weight=95.0),
            leaf("e"),
        ])

        assert graph.tier_counts() == {
            WeightTier.CRITICAL: 1,
            WeightTier.ATTENTION: 1,
            WeightTier.SAFE: 2,
        }
