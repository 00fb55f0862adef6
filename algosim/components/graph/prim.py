"""Prim's minimum spanning tree as a resumable step sequence.

``Node.distance`` holds the key: the weight of the cheapest edge linking
the node to the growing tree.
"""

from __future__ import annotations

import logging

from algosim.components.graph.dijkstra import select_closest
from algosim.core.step import Executor, ExecutorKind, RunOutcome, Step
from algosim.core.trace import StepKind, StepTrace
from algosim.errors import TopologyError
from algosim.models.graph import Graph
from algosim.utils.formatting import fmt_number

logger = logging.getLogger(__name__)


def prim(graph: Graph, trace: StepTrace, start: str) -> Executor:
    """Create a Prim executor growing the tree from ``start``.

    Raises:
        TopologyError: If ``start`` is not in the graph.
    """
    if start not in graph:
        raise TopologyError(f"start node {start!r} is not in the graph")
    return _run(graph, trace, start)


def _run(graph: Graph, trace: StepTrace, start: str) -> Executor:
    kind = ExecutorKind.PRIM
    graph.reset_state()
    graph.node(start).distance = 0
    trace.append(f"Starting Prim's algorithm from node {start}", StepKind.START)
    yield Step("start", focus=start)

    unvisited = list(graph.nodes)
    total_weight = 0.0

    while unvisited:
        current = select_closest(graph, unvisited)
        if current is None:
            trace.append("Graph is disconnected - MST cannot span all nodes", StepKind.FAILURE)
            logger.info("Prim: %d node(s) unreachable from %s", len(unvisited), start)
            return RunOutcome.failed(
                kind,
                "graph is disconnected",
                total_weight=total_weight,
                edges=_tree_pairs(graph),
                unreached=list(unvisited),
            )

        node = graph.node(current)
        node.in_tree = True
        node.visited = True
        unvisited.remove(current)

        if node.predecessor is not None:
            total_weight += node.distance
            edge = graph.edge_between(node.predecessor, current)
            edge.in_tree = True
            trace.append(
                f"Adding node {current} to MST (edge weight: {fmt_number(node.distance)})",
                StepKind.ACCEPT,
            )
        else:
            trace.append(f"Starting node {current} added to MST", StepKind.ACCEPT)
        yield Step("add", focus=current)

        for neighbor_id, edge in graph.neighbors(current):
            neighbor = graph.node(neighbor_id)
            if neighbor.in_tree:
                continue
            if edge.weight < neighbor.distance:
                neighbor.distance = edge.weight
                neighbor.predecessor = current
                trace.append(
                    f"  Updated {neighbor_id}: key = {fmt_number(edge.weight)} (via {current})",
                    StepKind.UPDATE,
                )
        yield Step("relax", focus=current)

    edges = _tree_pairs(graph)
    trace.append(
        f"MST complete! Total weight: {fmt_number(total_weight)}, Edges in MST: {len(edges)}",
        StepKind.SUCCESS,
    )
    return RunOutcome.succeeded(kind, total_weight=total_weight, edges=edges)


def _tree_pairs(graph: Graph) -> list[tuple[str, str]]:
    return [(edge.a, edge.b) for edge in graph.tree_edges()]

