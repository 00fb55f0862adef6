"""Tests for the Dijkstra executor."""

import math
import random

import pytest

from algosim.components.graph import dijkstra, select_closest, shortest_path
from algosim.core.step import ExecutorKind
from algosim.core.trace import StepKind, StepTrace
from algosim.errors import TopologyError
from algosim.models.graph import Graph, default_graph


def run_to_end(executor):
    """Pull every step; return (steps, outcome)."""
    steps = []
    while True:
        try:
            steps.append(next(executor))
        except StopIteration as stop:
            return steps, stop.value


def floyd_warshall(graph: Graph) -> dict[tuple[str, str], float]:
    ids = list(graph.nodes)
    dist = {(u, v): (0 if u == v else math.inf) for u in ids for v in ids}
    for edge in graph.edges:
        dist[edge.a, edge.b] = min(dist[edge.a, edge.b], edge.weight)
        dist[edge.b, edge.a] = min(dist[edge.b, edge.a], edge.weight)
    for k in ids:
        for i in ids:
            for j in ids:
                if dist[i, k] + dist[k, j] < dist[i, j]:
                    dist[i, j] = dist[i, k] + dist[k, j]
    return dist


def make_random_connected_graph(n: int, extra_edges: int, seed: int) -> Graph:
    rng = random.Random(seed)
    graph = Graph()
    ids = [f"N{i}" for i in range(n)]
    for i, node_id in enumerate(ids):
        graph.add_node(node_id, i * 10, 0)
    # Spanning chain keeps the graph connected
    for i in range(1, n):
        graph.add_edge(ids[rng.randrange(i)], ids[i], rng.randint(1, 20))
    for _ in range(extra_edges):
        u, v = rng.sample(ids, 2)
        if graph.edge_between(u, v) is None:
            graph.add_edge(u, v, rng.randint(1, 20))
    return graph


class TestDijkstraDefaultGraph:
    """Tests on the six-node demo graph."""

    def test_finds_shortest_path_a_to_f(self):
        """A to F goes A → C → B → D → F with distance 11."""
        graph = default_graph()
        trace = StepTrace()

        _, outcome = run_to_end(dijkstra(graph, trace, "A", "F"))

        assert outcome.success is True
        assert outcome.kind is ExecutorKind.DIJKSTRA
        assert outcome.details["path"] == ["A", "C", "B", "D", "F"]
        assert outcome.details["distance"] == 11
        assert trace.last.line == "Shortest path: A → C → B → D → F (distance: 11)"
        assert trace.last.kind is StepKind.SUCCESS

    def test_trace_starts_and_relaxes(self):
        """The trace opens with the start line and records strict improvements."""
        graph = default_graph()
        trace = StepTrace()

        run_to_end(dijkstra(graph, trace, "A", "F"))

        assert trace.lines[0] == "Starting from node A"
        assert trace.lines[1] == "Visiting node A with distance 0"
        assert "  Updated B: distance = 4 (via A)" in trace.lines
        assert "  Updated B: distance = 3 (via C)" in trace.lines
        assert "Reached target node F!" in trace.lines

    def test_stops_at_target(self):
        """Nodes farther than the target are never visited."""
        graph = default_graph()
        _, outcome = run_to_end(dijkstra(graph, StepTrace(), "A", "B"))

        assert outcome.details["visited"] == ["A", "C", "B"]
        assert graph.node("F").visited is False

    def test_yields_a_step_per_visit_and_relaxation(self):
        graph = default_graph()
        steps, outcome = run_to_end(dijkstra(graph, StepTrace(), "A", "F"))

        labels = [s.label for s in steps]
        assert labels[0] == "start"
        assert labels.count("select") == len(outcome.details["visited"])

    def test_rerun_resets_previous_state(self):
        """A second run starts from clean node state."""
        graph = default_graph()
        run_to_end(dijkstra(graph, StepTrace(), "A", "F"))
        _, outcome = run_to_end(dijkstra(graph, StepTrace(), "F", "A"))

        assert outcome.details["distance"] == 11
        assert outcome.details["path"] == ["F", "D", "B", "C", "A"]


class TestDijkstraNoPath:
    """Tests for unreachable targets."""

    def test_unreachable_target_fails(self):
        graph = default_graph()
        graph.add_node("Z", 10, 10)
        trace = StepTrace()

        _, outcome = run_to_end(dijkstra(graph, trace, "A", "Z"))

        assert outcome.success is False
        assert outcome.reason == "no path found"
        assert "No more reachable nodes" in trace.lines
        assert trace.last.line == "No path found from A to Z"
        assert trace.last.kind is StepKind.FAILURE

    def test_unknown_node_rejected_before_start(self):
        """Validation happens when the executor is created, not on first pull."""
        graph = default_graph()
        trace = StepTrace()

        with pytest.raises(TopologyError):
            dijkstra(graph, trace, "A", "Q")
        assert len(trace) == 0


class TestDijkstraAgainstReference:
    """Distances agree with an all-pairs reference computation."""

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_distances_match_floyd_warshall(self, seed):
        graph = make_random_connected_graph(12, 15, seed)
        reference = floyd_warshall(graph)
        ids = list(graph.nodes)
        source = ids[0]

        for target in ids[1:]:
            _, outcome = run_to_end(dijkstra(graph, StepTrace(), source, target))
            assert outcome.success is True
            assert outcome.details["distance"] == reference[source, target]

    def test_path_weight_equals_distance(self):
        graph = make_random_connected_graph(10, 10, seed=42)
        ids = list(graph.nodes)

        _, outcome = run_to_end(dijkstra(graph, StepTrace(), ids[0], ids[-1]))

        path = outcome.details["path"]
        weight = sum(graph.edge_between(u, v).weight for u, v in zip(path, path[1:]))
        assert weight == outcome.details["distance"]


class TestHelpers:
    """Tests for select_closest and shortest_path."""

    def test_select_closest_prefers_first_on_tie(self):
        graph = Graph()
        for node_id in ("X", "Y"):
            graph.add_node(node_id, 0, 0)
            graph.node(node_id).distance = 5

        assert select_closest(graph, ["X", "Y"]) == "X"
        assert select_closest(graph, ["Y", "X"]) == "Y"

    def test_select_closest_none_when_all_infinite(self):
        graph = Graph()
        graph.add_node("X", 0, 0)
        assert select_closest(graph, ["X"]) is None

    def test_shortest_path_empty_when_broken(self):
        graph = Graph()
        graph.add_node("X", 0, 0)
        graph.add_node("Y", 0, 0)
        assert shortest_path(graph, "X", "Y") == []
