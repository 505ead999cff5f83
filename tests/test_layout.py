"""Tests for model/layout.py - focus path derivation and grid slots."""

from studymap.model.graph import Graph, Link
from studymap.model.layout import build_focus_path, serpentine_slots
from factories import group, leaf


def _graph():
    nodes = [
        group("root"),
        group("topic"),
        leaf("w80", weight=80.0),
        leaf("w20", weight=20.0),
        leaf("w50", weight=50.0),
        leaf("other", weight=0.0),
    ]
    links = [
        Link("root", "topic"),
        Link("topic", "w80"),
        Link("root", "w20"),
        Link("topic", "w50"),
    ]
    return Graph(nodes, links)


class TestFocusPath:
    def test_leaves_sorted_weakest_first(self):
        path = build_focus_path(_graph(), "root")

        assert path.order == ["w20", "w50", "w80"]

    def test_links_chain_consecutive_leaves(self):
        path = build_focus_path(_graph(), "root")

        assert path.links == (Link("w20", "w50"), Link("w50", "w80"))

    def test_node_ids_cover_target_groups_and_leaves(self):
        path = build_focus_path(_graph(), "root")

        assert path.node_ids == {"root", "topic", "w20", "w50", "w80"}
        assert "other" not in path

    def test_equal_weights_keep_graph_order(self):
        graph = Graph(
            [group("g"), leaf("b", weight=30.0), leaf("a", weight=30.0), leaf("c", weight=10.0)],
            [Link("g", "b"), Link("g", "a"), Link("g", "c")],
        )

        assert build_focus_path(graph, "g").order == ["c", "b", "a"]

    def test_unknown_weight_sorts_as_zero(self):
        graph = Graph(
            [group("g"), leaf("a", weight=5.0), leaf("b")],
            [Link("g", "a"), Link("g", "b")],
        )

        assert build_focus_path(graph, "g").order == ["b", "a"]

    def test_group_without_leaves_is_empty(self):
        graph = Graph([group("g"), group("h")], [Link("g", "h")])
        path = build_focus_path(graph, "g")

        assert path.leaves == ()
        assert path.links == ()
        assert path.node_ids == {"g", "h"}


class TestSerpentineSlots:
    def test_empty(self):
        assert serpentine_slots(0, 800, 600) == []

    def test_row_width_from_viewport(self):
        # 800 * 0.8 // 120 = 5 columns
        slots = serpentine_slots(7, 800, 600)

        assert len({y for _, y in slots[:5]}) == 1
        assert slots[5][1] > slots[0][1]

    def test_odd_rows_reverse_direction(self):
        slots = serpentine_slots(10, 800, 600)

        first_row = [x for x, _ in slots[:5]]
        second_row = [x for x, _ in slots[5:]]
        assert first_row == sorted(first_row)
        assert second_row == sorted(second_row, reverse=True)
        # the turn keeps consecutive leaves in the same column
        assert slots[4][0] == slots[5][0]

    def test_grid_centred(self):
        slots = serpentine_slots(10, 800, 600)

        xs = [x for x, _ in slots]
        ys = [y for _, y in slots]
        assert (min(xs) + max(xs)) / 2 == 400.0
        assert (min(ys) + max(ys)) / 2 == 300.0

    def test_narrow_viewport_keeps_one_column(self):
        slots = serpentine_slots(3, 50, 600)

        assert {x for x, _ in slots} == {25.0}
