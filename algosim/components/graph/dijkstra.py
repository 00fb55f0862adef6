"""Dijkstra's shortest-path algorithm as a resumable step sequence.

The minimum is found by a linear scan over unvisited nodes in insertion
order; ties go to the first node encountered.
"""

from __future__ import annotations

import logging
import math

from algosim.core.step import Executor, ExecutorKind, RunOutcome, Step
from algosim.core.trace import StepKind, StepTrace
from algosim.errors import TopologyError
from algosim.models.graph import Graph
from algosim.utils.formatting import fmt_number

logger = logging.getLogger(__name__)


def select_closest(graph: Graph, unvisited: list[str]) -> str | None:
    """Return the unvisited node with the smallest finite distance, or None."""
    best: str | None = None
    best_distance = math.inf
    for node_id in unvisited:
        distance = graph.node(node_id).distance
        if distance < best_distance:
            best, best_distance = node_id, distance
    return best


def shortest_path(graph: Graph, start: str, target: str) -> list[str]:
    """Walk predecessors back from ``target``.

    Returns:
        Node ids from start to target, or an empty list if the walk does
        not reach ``start``.
    """
    path: list[str] = []
    current: str | None = target
    while current is not None and current != start:
        path.append(current)
        if len(path) > len(graph):
            return []
        current = graph.node(current).predecessor
    if current != start:
        return []
    path.append(start)
    path.reverse()
    return path


def dijkstra(graph: Graph, trace: StepTrace, start: str, target: str) -> Executor:
    """Create a Dijkstra executor from ``start`` to ``target``.

    Raises:
        TopologyError: If either node is not in the graph.
    """
    for label, node_id in (("start", start), ("target", target)):
        if node_id not in graph:
            raise TopologyError(f"{label} node {node_id!r} is not in the graph")
    return _run(graph, trace, start, target)


def _run(graph: Graph, trace: StepTrace, start: str, target: str) -> Executor:
    kind = ExecutorKind.DIJKSTRA
    graph.reset_state()
    graph.node(start).distance = 0
    trace.append(f"Starting from node {start}", StepKind.START)
    yield Step("start", focus=start)

    unvisited = list(graph.nodes)
    visit_order: list[str] = []

    while unvisited:
        current = select_closest(graph, unvisited)
        if current is None:
            trace.append("No more reachable nodes", StepKind.WARNING)
            break

        node = graph.node(current)
        trace.append(
            f"Visiting node {current} with distance {fmt_number(node.distance)}",
            StepKind.VISIT,
        )
        yield Step("select", focus=current)

        node.visited = True
        unvisited.remove(current)
        visit_order.append(current)

        if current == target:
            trace.append(f"Reached target node {target}!", StepKind.VISIT)
            break

        for neighbor_id, edge in graph.neighbors(current):
            neighbor = graph.node(neighbor_id)
            if neighbor.visited:
                continue
            candidate = node.distance + edge.weight
            if candidate < neighbor.distance:
                neighbor.distance = candidate
                neighbor.predecessor = current
                trace.append(
                    f"  Updated {neighbor_id}: distance = {fmt_number(candidate)} (via {current})",
                    StepKind.UPDATE,
                )
        yield Step("relax", focus=current)

    path = shortest_path(graph, start, target)
    distances = {node_id: n.distance for node_id, n in graph.nodes.items()}
    if not path:
        trace.append(f"No path found from {start} to {target}", StepKind.FAILURE)
        logger.info("Dijkstra: %s unreachable from %s", target, start)
        return RunOutcome.failed(
            kind, "no path found", path=[], visited=visit_order, distances=distances
        )

    distance = graph.node(target).distance
    trace.append(
        f"Shortest path: {' → '.join(path)} (distance: {fmt_number(distance)})",
        StepKind.SUCCESS,
    )
    return RunOutcome.succeeded(
        kind, path=path, distance=distance, visited=visit_order, distances=distances
    )
