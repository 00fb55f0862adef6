"""Mutable models the executors operate on."""

from algosim.models.cluster import (
    PaxosCluster,
    PaxosPhase,
    PaxosServer,
    PbftCluster,
    PbftPhase,
    PbftReplica,
    Role,
)
from algosim.models.graph import Edge, Graph, GraphSnapshot, Node, default_graph
from algosim.models.grid import CellKind, Grid, GridSnapshot
from algosim.models.union_find import DisjointSet

__all__ = [
    "CellKind",
    "DisjointSet",
    "Edge",
    "Graph",
    "GraphSnapshot",
    "Grid",
    "GridSnapshot",
    "Node",
    "PaxosCluster",
    "PaxosPhase",
    "PaxosServer",
    "PbftCluster",
    "PbftPhase",
    "PbftReplica",
    "Role",
    "default_graph",
]
