"""Tests for the Prim and Kruskal executors."""

import random

import pytest

from algosim.components.graph import kruskal, prim
from algosim.core.trace import StepKind, StepTrace
from algosim.errors import TopologyError
from algosim.models.graph import Graph, default_graph


def run_to_end(executor):
    steps = []
    while True:
        try:
            steps.append(next(executor))
        except StopIteration as stop:
            return steps, stop.value


def make_random_connected_graph(n: int, extra_edges: int, seed: int) -> Graph:
    rng = random.Random(seed)
    graph = Graph()
    ids = [str(i) for i in range(n)]
    for node_id in ids:
        graph.add_node(node_id, 0, 0)
    for i in range(1, n):
        graph.add_edge(ids[rng.randrange(i)], ids[i], rng.randint(1, 9))
    for _ in range(extra_edges):
        u, v = rng.sample(ids, 2)
        if graph.edge_between(u, v) is None:
            graph.add_edge(u, v, rng.randint(1, 9))
    return graph


def make_two_islands() -> Graph:
    graph = Graph()
    for node_id in "ABCD":
        graph.add_node(node_id, 0, 0)
    graph.add_edge("A", "B", 1)
    graph.add_edge("C", "D", 2)
    return graph


class TestKruskal:
    """Tests for Kruskal on the demo graph."""

    def test_default_graph_mst(self):
        graph = default_graph()
        trace = StepTrace()

        _, outcome = run_to_end(kruskal(graph, trace))

        assert outcome.success is True
        assert outcome.details["total_weight"] == 13
        assert graph.total_tree_weight() == 13
        assert len(outcome.details["edges"]) == 5
        assert trace.last.line == "MST complete! Total weight: 13, Edges in MST: 5"

    def test_considers_edges_in_ascending_weight(self):
        graph = default_graph()
        trace = StepTrace()

        run_to_end(kruskal(graph, trace))

        considered = [e.line for e in trace if e.kind is StepKind.CONSIDER]
        assert considered[0] == "Considering edge C-B (weight: 1)"
        # Equal weights keep insertion order
        assert considered[1] == "Considering edge A-C (weight: 2)"
        assert considered[2] == "Considering edge E-D (weight: 2)"

    def test_rejects_cycle_edge(self):
        graph = default_graph()
        trace = StepTrace()

        run_to_end(kruskal(graph, trace))

        index = trace.lines.index("Considering edge A-B (weight: 4)")
        assert trace.lines[index + 1] == "  ✗ Rejected (would create cycle)"
        assert graph.edge_between("A", "B").in_tree is False

    def test_disconnected_graph_is_a_failure_with_forest(self):
        graph = make_two_islands()
        trace = StepTrace()

        _, outcome = run_to_end(kruskal(graph, trace))

        assert outcome.success is False
        assert outcome.reason == "graph is disconnected"
        assert trace.last.kind is StepKind.FAILURE
        assert len(graph.tree_edges()) == 2


class TestPrim:
    """Tests for Prim on the demo graph."""

    def test_default_graph_mst(self):
        graph = default_graph()
        trace = StepTrace()

        _, outcome = run_to_end(prim(graph, trace, "A"))

        assert outcome.success is True
        assert outcome.details["total_weight"] == 13
        assert graph.total_tree_weight() == 13
        assert trace.lines[0] == "Starting Prim's algorithm from node A"
        assert "Starting node A added to MST" in trace.lines
        assert "Adding node C to MST (edge weight: 2)" in trace.lines

    def test_disconnected_graph(self):
        graph = make_two_islands()
        trace = StepTrace()

        _, outcome = run_to_end(prim(graph, trace, "A"))

        assert outcome.success is False
        assert outcome.reason == "graph is disconnected"
        assert trace.last.line == "Graph is disconnected - MST cannot span all nodes"
        assert sorted(outcome.details["unreached"]) == ["C", "D"]

    def test_unknown_start_rejected(self):
        with pytest.raises(TopologyError):
            prim(default_graph(), StepTrace(), "nope")


class TestPrimKruskalAgree:
    """Both algorithms find a spanning tree of the same weight."""

    @pytest.mark.parametrize("seed", range(6))
    def test_equal_mst_weight(self, seed):
        graph = make_random_connected_graph(10, 14, seed)

        _, by_kruskal = run_to_end(kruskal(graph.copy(), StepTrace()))
        _, by_prim = run_to_end(prim(graph.copy(), StepTrace(), "0"))

        assert by_kruskal.details["total_weight"] == by_prim.details["total_weight"]
        assert len(by_kruskal.details["edges"]) == len(graph) - 1
        assert len(by_prim.details["edges"]) == len(graph) - 1
