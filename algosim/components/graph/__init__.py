"""Shortest-path and minimum-spanning-tree executors over ``Graph``."""

from algosim.components.graph.dijkstra import dijkstra, select_closest, shortest_path
from algosim.components.graph.kruskal import kruskal
from algosim.components.graph.prim import prim

__all__ = [
    "dijkstra",
    "kruskal",
    "prim",
    "select_closest",
    "shortest_path",
]
