"""Tests for controller/simulation.py - force, orbit and focus-path stepping."""

import math
from dataclasses import replace

import numpy as np
import pytest

from studymap.config import SimulationConfig
from studymap.controller.simulation import SimulationEngine, radius_factor
from studymap.model.graph import Graph, Link
from studymap.model.layout import FocusPathLayout, ForceLayout, OrbitLayout, build_focus_path
from studymap.model.positions import PositionStore
from factories import group, leaf, make_tree


def _simulation(nodes, links=(), width=800.0, height=600.0, seed=11, config=None):
    graph = Graph(nodes, links)
    store = PositionStore(rng=np.random.default_rng(seed))
    store.reconcile([n.id for n in graph.nodes], center=(width / 2, height / 2))
    sim = SimulationEngine(store, config)
    sim.set_viewport(width, height)
    sim.set_graph(graph)
    return sim


def _run_until_settled(sim, max_ticks):
    for tick in range(1, max_ticks + 1):
        sim.step()
        if sim.settled:
            return tick
    return None


class TestForce:
    @pytest.mark.parametrize("n_nodes", [10, 50, 100])
    @pytest.mark.parametrize("seed", [0, 1, 2, 11])
    def test_unlinked_nodes_settle(self, n_nodes, seed):
        sim = _simulation([leaf(f"n{i}") for i in range(n_nodes)], seed=seed)

        ticks = _run_until_settled(sim, 600)

        assert ticks is not None, f"{n_nodes} nodes (seed {seed}) still moving after 600 ticks"
        assert np.all(np.isfinite(sim.store.pos))

    def test_settle_threshold_scales_with_node_count(self):
        # no forces: the velocity only decays by the damping factor
        config = replace(SimulationConfig(), repulsion=0.0, center_strength=0.0)
        sim = _simulation([leaf(f"n{i}") for i in range(4)], config=config)
        sim.store.vel[:] = 0.04  # after damping: 0.0026 per node, 0.0104 in total

        sim._step_force()

        assert sim.settled
        assert sim.last_energy > sim.config.energy_threshold

    def test_forest_settles(self):
        sim = _simulation(*make_tree())
        assert len(sim.store) == 50

        assert _run_until_settled(sim, 1200) is not None

    def test_settled_graph_does_not_move(self):
        sim = _simulation([leaf("a"), leaf("b")])
        _run_until_settled(sim, 600)
        before = sim.store.pos.copy()

        sim.step()

        np.testing.assert_array_equal(sim.store.pos, before)

    def test_coincident_nodes_stay_finite(self):
        sim = _simulation([leaf("a"), leaf("b"), leaf("c")])
        sim.store.pos[:] = (400.0, 300.0)

        for _ in range(10):
            sim.step()

        assert np.all(np.isfinite(sim.store.pos))
        assert np.all(np.isfinite(sim.store.vel))

    def test_link_pulls_towards_rest_length(self):
        sim = _simulation([group("a"), leaf("b")], [Link("a", "b")])
        sim.store.pin("a", 100.0, 300.0)
        sim.store.pin("b", 700.0, 300.0)

        sim.step()

        assert sim.store.velocity("a")[0] > 0.0
        assert sim.store.velocity("b")[0] < 0.0

    def test_dragged_node_is_pinned_and_keeps_simulation_awake(self):
        sim = _simulation([leaf("a"), leaf("b")])
        _run_until_settled(sim, 600)

        sim.begin_drag("a")
        sim.store.pin("a", 10.0, 10.0)
        for _ in range(50):
            sim.step()

        assert sim.store.position("a") == (10.0, 10.0)
        assert not sim.settled

        sim.end_drag()
        assert sim.dragged_id is None
        assert sim.store.velocity("a") == (0.0, 0.0)

    def test_new_graph_wakes_simulation(self):
        sim = _simulation([leaf("a"), leaf("b")])
        _run_until_settled(sim, 600)

        sim.set_graph(sim.graph)

        assert not sim.settled

    def test_empty_store_is_noop(self):
        sim = _simulation([])

        assert sim.step() is False
        assert sim.ticks == 0


class TestOrbit:
    def test_radius_factor(self):
        assert radius_factor(0.0) == 1.0
        assert radius_factor(100.0) == pytest.approx(5.0 / 105.0)
        assert radius_factor(40.0) > radius_factor(80.0)

    def test_weak_leaves_orbit_further_out(self):
        nodes = [group("g"), leaf("weak", weight=0.0), leaf("strong", weight=100.0)]
        sim = _simulation(nodes, [Link("g", "weak"), Link("g", "strong")])
        sim.set_mode(OrbitLayout())

        for _ in range(500):
            sim.step()

        cx, cy = sim.center
        weak = math.dist(sim.store.position("weak"), (cx, cy))
        strong = math.dist(sim.store.position("strong"), (cx, cy))
        assert weak > strong

    def test_targets_are_stable_between_frames(self):
        sim = _simulation(*make_tree(n_roots=3, n_topics=2, n_leaves=2))

        np.testing.assert_array_equal(sim.orbit_targets(), sim.orbit_targets())

    def test_sectors_follow_group_roots(self):
        nodes, links = make_tree(n_roots=2, n_topics=1, n_leaves=1)
        sim = _simulation(nodes, links)
        targets = sim.orbit_targets()

        # the second root sits half a turn from the first
        cx, cy = sim.center
        a0 = math.atan2(targets[0, 1] - cy, targets[0, 0] - cx)
        row = sim.store.index_of("s1")
        a1 = math.atan2(targets[row, 1] - cy, targets[row, 0] - cx)
        assert abs(abs(a1 - a0) - math.pi) < 0.3

    def test_centering_requested_once(self):
        sim = _simulation(*make_tree(n_roots=2, n_topics=2, n_leaves=3))
        sim.set_mode(OrbitLayout())

        requests = sum(sim.step() for _ in range(400))

        assert requests == 1
        assert not sim.centering_pending

    def test_dragged_node_does_not_seek(self):
        sim = _simulation([group("g"), leaf("a", weight=10.0)], [Link("g", "a")])
        sim.set_mode(OrbitLayout())
        sim.begin_drag("a")
        sim.store.pin("a", 5.0, 5.0)

        for _ in range(20):
            sim.step()

        assert sim.store.position("a") == (5.0, 5.0)


class TestFocus:
    @pytest.fixture
    def sim(self):
        nodes = [
            group("root"),
            leaf("a", weight=60.0),
            leaf("b", weight=10.0),
            leaf("c", weight=30.0),
            leaf("outsider", weight=0.0),
        ]
        links = [Link("root", "a"), Link("root", "b"), Link("root", "c")]
        sim = _simulation(nodes, links)
        sim.set_mode(FocusPathLayout("root"), build_focus_path(sim.graph, "root"))
        return sim

    def test_path_leaves_reach_their_slots(self, sim):
        rows, slots = sim.focus_targets()

        for _ in range(300):
            sim.step()

        np.testing.assert_allclose(sim.store.pos[rows], slots, atol=1e-6)
        assert [sim.store.ids[r] for r in rows] == ["b", "c", "a"]

    def test_nodes_off_the_path_hold_still(self, sim):
        before = sim.store.position("outsider")

        for _ in range(30):
            sim.step()

        assert sim.store.position("outsider") == before
        assert sim.store.velocity("outsider") == (0.0, 0.0)
        assert sim.store.position("root") is not None

    def test_leaving_focus_kicks_force_mode(self, sim):
        for _ in range(30):
            sim.step()

        sim.set_mode(ForceLayout())

        assert sim.focus_path is None
        assert not sim.settled
        assert np.any(sim.store.vel != 0.0)


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        SimulationConfig(damping=1.5)
    with pytest.raises(ValueError):
        SimulationConfig(orbit_seek=0.0)
