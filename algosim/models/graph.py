"""Mutable weighted graph shared by Dijkstra, Prim and Kruskal.

Edges are stored once per undirected pair. Collaborators that expect the
doubled representation (a->b and b->a with equal weight) get it from
``directed_edges()``; a weight change on the single stored edge is seen
by both directed copies.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from algosim.errors import TopologyError

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """A graph vertex plus the per-run state executors write.

    Attributes:
        id: Unique identifier.
        x: Horizontal canvas position.
        y: Vertical canvas position.
        distance: Tentative distance (Dijkstra) or connecting key (Prim).
        predecessor: Node this one was reached from, if any.
        visited: True once the node has been settled.
        in_tree: True once the node is part of a spanning tree.
    """

    id: str
    x: float
    y: float
    distance: float = math.inf
    predecessor: str | None = None
    visited: bool = False
    in_tree: bool = False

    def reset(self) -> None:
        self.distance = math.inf
        self.predecessor = None
        self.visited = False
        self.in_tree = False


@dataclass
class Edge:
    """An undirected weighted edge."""

    a: str
    b: str
    weight: float
    in_tree: bool = False

    def connects(self, u: str, v: str) -> bool:
        return (self.a == u and self.b == v) or (self.a == v and self.b == u)

    def other(self, node_id: str) -> str:
        """Return the endpoint opposite ``node_id``."""
        if node_id == self.a:
            return self.b
        if node_id == self.b:
            return self.a
        raise ValueError(f"{node_id!r} is not an endpoint of {self.a}-{self.b}")

    @property
    def label(self) -> str:
        return f"{self.a}-{self.b}"


@dataclass(frozen=True)
class DirectedEdge:
    """One direction of an undirected edge, for renderers."""

    source: str
    target: str
    weight: float
    in_tree: bool


@dataclass(frozen=True)
class NodeSnapshot:
    id: str
    x: float
    y: float
    distance: float
    predecessor: str | None
    visited: bool
    in_tree: bool


@dataclass(frozen=True)
class EdgeSnapshot:
    a: str
    b: str
    weight: float
    in_tree: bool


@dataclass(frozen=True)
class GraphSnapshot:
    """Read-only copy of a graph's structure and algorithm state."""

    nodes: tuple[NodeSnapshot, ...]
    edges: tuple[EdgeSnapshot, ...]

    def node(self, node_id: str) -> NodeSnapshot:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(node_id)


def _check_weight(weight: float) -> float:
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        raise TopologyError(f"edge weight must be a number, got {weight!r}")
    if not math.isfinite(weight) or weight <= 0:
        raise TopologyError(f"edge weight must be positive and finite, got {weight}")
    return weight


class Graph:
    """Mutable undirected graph with insertion-ordered nodes and edges.

    Args:
        width: Canvas width that ``move_node`` clamps positions to.
        height: Canvas height that ``move_node`` clamps positions to.
        margin: Distance kept from the canvas border when clamping.
    """

    def __init__(
        self,
        width: float = math.inf,
        height: float = math.inf,
        margin: float = 0.0,
    ) -> None:
        self._nodes: dict[str, Node] = {}
        self._edges: list[Edge] = []
        self._width = width
        self._height = height
        self._margin = margin
        self._adjacency: dict[str, list[Edge]] | None = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> Mapping[str, Node]:
        return MappingProxyType(self._nodes)

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges)

    def node(self, node_id: str) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise TopologyError(f"unknown node {node_id!r}") from None

    def edge_between(self, u: str, v: str) -> Edge | None:
        for edge in self._adjacency_index().get(u, ()):
            if edge.connects(u, v):
                return edge
        return None

    def neighbors(self, node_id: str) -> list[tuple[str, Edge]]:
        """Return ``(neighbor_id, edge)`` pairs in edge insertion order."""
        self.node(node_id)
        return [(edge.other(node_id), edge) for edge in self._adjacency_index()[node_id]]

    def directed_edges(self) -> list[DirectedEdge]:
        """Both directions of every edge, a->b immediately followed by b->a."""
        result: list[DirectedEdge] = []
        for edge in self._edges:
            result.append(DirectedEdge(edge.a, edge.b, edge.weight, edge.in_tree))
            result.append(DirectedEdge(edge.b, edge.a, edge.weight, edge.in_tree))
        return result

    def tree_edges(self) -> list[Edge]:
        return [edge for edge in self._edges if edge.in_tree]

    def total_tree_weight(self) -> float:
        return sum(edge.weight for edge in self._edges if edge.in_tree)

    def _adjacency_index(self) -> dict[str, list[Edge]]:
        if self._adjacency is None:
            index: dict[str, list[Edge]] = {node_id: [] for node_id in self._nodes}
            for edge in self._edges:
                index[edge.a].append(edge)
                index[edge.b].append(edge)
            self._adjacency = index
        return self._adjacency

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def add_node(self, node_id: str, x: float, y: float) -> Node:
        node_id = str(node_id).strip()
        if not node_id:
            raise TopologyError("node id must not be empty")
        if node_id in self._nodes:
            raise TopologyError(f"node {node_id!r} already exists")
        x, y = self._clamp(x, y)
        node = Node(id=node_id, x=x, y=y)
        self._nodes[node_id] = node
        self._adjacency = None
        logger.debug("Added node %s at (%.0f, %.0f)", node_id, x, y)
        return node

    def remove_node(self, node_id: str) -> None:
        """Remove a node and every edge touching it."""
        self.node(node_id)
        del self._nodes[node_id]
        self._edges = [e for e in self._edges if node_id not in (e.a, e.b)]
        self._adjacency = None
        logger.debug("Removed node %s", node_id)

    def move_node(self, node_id: str, x: float, y: float) -> None:
        node = self.node(node_id)
        node.x, node.y = self._clamp(x, y)

    def add_edge(self, u: str, v: str, weight: float = 1) -> Edge:
        self.node(u)
        self.node(v)
        if u == v:
            raise TopologyError(f"self-loop on {u!r} is not allowed")
        if self.edge_between(u, v) is not None:
            raise TopologyError(f"edge {u}-{v} already exists")
        edge = Edge(a=u, b=v, weight=_check_weight(weight))
        self._edges.append(edge)
        self._adjacency = None
        logger.debug("Added edge %s (weight %s)", edge.label, weight)
        return edge

    def remove_edge(self, u: str, v: str) -> None:
        edge = self._require_edge(u, v)
        self._edges.remove(edge)
        self._adjacency = None

    def set_weight(self, u: str, v: str, weight: float) -> None:
        edge = self._require_edge(u, v)
        edge.weight = _check_weight(weight)

    def reset_state(self) -> None:
        """Clear distances, predecessors and visited/in-tree flags."""
        for node in self._nodes.values():
            node.reset()
        for edge in self._edges:
            edge.in_tree = False

    def _require_edge(self, u: str, v: str) -> Edge:
        edge = self.edge_between(u, v)
        if edge is None:
            raise TopologyError(f"no edge between {u!r} and {v!r}")
        return edge

    def _clamp(self, x: float, y: float) -> tuple[float, float]:
        lo = self._margin
        return (
            min(max(float(x), lo), self._width - lo),
            min(max(float(y), lo), self._height - lo),
        )

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def copy(self) -> Graph:
        clone = Graph(self._width, self._height, self._margin)
        for node in self._nodes.values():
            clone._nodes[node.id] = Node(**vars(node))
        clone._edges = [Edge(**vars(edge)) for edge in self._edges]
        return clone

    def snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(
            nodes=tuple(NodeSnapshot(**vars(n)) for n in self._nodes.values()),
            edges=tuple(EdgeSnapshot(**vars(e)) for e in self._edges),
        )

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self._nodes)}, edges={len(self._edges)})"


DEFAULT_NODES: tuple[tuple[str, float, float], ...] = (
    ("A", 100, 150),
    ("B", 250, 80),
    ("C", 250, 220),
    ("D", 400, 80),
    ("E", 400, 220),
    ("F", 550, 150),
)

DEFAULT_EDGES: tuple[tuple[str, str, float], ...] = (
    ("A", "B", 4),
    ("A", "C", 2),
    ("B", "D", 5),
    ("C", "B", 1),
    ("C", "E", 10),
    ("D", "F", 3),
    ("E", "D", 2),
    ("E", "F", 6),
)


def default_graph(
    width: float = math.inf, height: float = math.inf, margin: float = 0.0
) -> Graph:
    """Build the six-node demo graph (A..F)."""
    graph = Graph(width, height, margin)
    for node_id, x, y in DEFAULT_NODES:
        graph.add_node(node_id, x, y)
    for u, v, weight in DEFAULT_EDGES:
        graph.add_edge(u, v, weight)
    return graph
