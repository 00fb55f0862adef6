"""Algorithm executors for the workbench models."""

from algosim.components.consensus import paxos, pbft
from algosim.components.graph import dijkstra, kruskal, prim
from algosim.components.grid import breadth_first_search, depth_first_search

__all__ = [
    "breadth_first_search",
    "depth_first_search",
    "dijkstra",
    "kruskal",
    "paxos",
    "pbft",
    "prim",
]
