"""Kruskal's minimum spanning tree as a resumable step sequence."""

from __future__ import annotations

import logging

from algosim.core.step import Executor, ExecutorKind, RunOutcome, Step
from algosim.core.trace import StepKind, StepTrace
from algosim.models.graph import Edge, Graph
from algosim.models.union_find import DisjointSet
from algosim.utils.formatting import fmt_number

logger = logging.getLogger(__name__)


def kruskal(graph: Graph, trace: StepTrace) -> Executor:
    """Create a Kruskal executor over every edge of ``graph``."""
    return _run(graph, trace)


def _run(graph: Graph, trace: StepTrace) -> Executor:
    kind = ExecutorKind.KRUSKAL
    graph.reset_state()

    # Stored edges are already one per undirected pair; sorted() is stable.
    ordered: list[Edge] = sorted(graph.edges, key=lambda e: e.weight)
    trace.append("Starting Kruskal's algorithm", StepKind.START)
    trace.append(f"Sorted {len(ordered)} edges by weight", StepKind.INFO)
    yield Step("sort")

    components = DisjointSet(graph.nodes)
    chosen: list[tuple[str, str]] = []
    total_weight = 0.0

    for edge in ordered:
        trace.append(
            f"Considering edge {edge.label} (weight: {fmt_number(edge.weight)})",
            StepKind.CONSIDER,
        )
        yield Step("consider", focus=(edge.a, edge.b))

        if components.union(edge.a, edge.b):
            edge.in_tree = True
            graph.node(edge.a).in_tree = True
            graph.node(edge.b).in_tree = True
            chosen.append((edge.a, edge.b))
            total_weight += edge.weight
            trace.append(
                f"  ✓ Added to MST (total weight: {fmt_number(total_weight)})",
                StepKind.ACCEPT,
            )
        else:
            trace.append("  ✗ Rejected (would create cycle)", StepKind.REJECT)
        yield Step("decide", focus=(edge.a, edge.b))

    disconnected = components.set_count > 1
    trace.append(
        f"MST complete! Total weight: {fmt_number(total_weight)}, Edges in MST: {len(chosen)}",
        StepKind.INFO if disconnected else StepKind.SUCCESS,
    )
    if disconnected:
        trace.append(
            f"Graph is disconnected - result is a spanning forest of "
            f"{components.set_count} trees",
            StepKind.FAILURE,
        )
        logger.info("Kruskal: %d components remain", components.set_count)
        return RunOutcome.failed(
            kind, "graph is disconnected", total_weight=total_weight, edges=chosen
        )
    return RunOutcome.succeeded(kind, total_weight=total_weight, edges=chosen)
