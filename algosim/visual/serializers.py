"""Snapshot serialization to JSON-safe dicts.

Infinite distances become None; enums become their values; grid cells
become ``[row, col]`` lists.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from algosim.core.state import WorkbenchSnapshot
    from algosim.core.step import Focus
    from algosim.models.cluster import PaxosClusterSnapshot, PbftClusterSnapshot
    from algosim.models.graph import GraphSnapshot
    from algosim.models.grid import GridSnapshot


def _finite(value: float) -> float | None:
    return None if math.isinf(value) else value


def serialize_graph(graph: GraphSnapshot) -> dict[str, Any]:
    return {
        "nodes": [
            {
                "id": n.id,
                "x": n.x,
                "y": n.y,
                "distance": _finite(n.distance),
                "predecessor": n.predecessor,
                "visited": n.visited,
                "in_tree": n.in_tree,
            }
            for n in graph.nodes
        ],
        "edges": [
            {"from": e.a, "to": e.b, "weight": e.weight, "in_tree": e.in_tree}
            for e in graph.edges
        ],
    }


def serialize_grid(grid: GridSnapshot) -> dict[str, Any]:
    return {
        "rows": grid.rows,
        "cols": grid.cols,
        "start": list(grid.start),
        "end": list(grid.end),
        "cells": [[kind.value for kind in row] for row in grid.cells],
    }


def serialize_paxos(paxos: PaxosClusterSnapshot) -> dict[str, Any]:
    return {
        "phase": paxos.phase.value,
        "servers": [
            {
                "id": s.id,
                "role": s.role.value,
                "promised_round": s.promised_round,
                "accepted_round": s.accepted_round,
                "accepted_value": s.accepted_value,
                "learned": s.learned,
                "failed": s.failed,
            }
            for s in paxos.servers
        ],
    }


def serialize_pbft(pbft: PbftClusterSnapshot) -> dict[str, Any]:
    return {
        "n": pbft.n,
        "f": pbft.f,
        "quorum": pbft.quorum,
        "replicas": [
            {
                "id": r.id,
                "is_primary": r.is_primary,
                "is_byzantine": r.is_byzantine,
                "phase": r.phase.value,
                "prepare_count": r.prepare_count,
                "commit_count": r.commit_count,
                "value": r.value,
                "replied": r.replied,
            }
            for r in pbft.replicas
        ],
    }


def serialize_focus(focus: Focus) -> Any:
    if isinstance(focus, tuple):
        return list(focus)
    return focus


def serialize_snapshot(snapshot: WorkbenchSnapshot) -> dict[str, Any]:
    """Serialize a full workbench snapshot."""
    outcome = snapshot.outcome.to_dict() if snapshot.outcome else None
    if outcome is not None:
        outcome["details"] = json_safe(outcome["details"])
    return {
        "graph": serialize_graph(snapshot.graph),
        "grid": serialize_grid(snapshot.grid),
        "paxos": serialize_paxos(snapshot.paxos),
        "pbft": serialize_pbft(snapshot.pbft),
        "is_running": snapshot.is_running,
        "focus": serialize_focus(snapshot.focus),
        "messages": [m.to_dict() for m in snapshot.pending_messages],
        "trace_length": len(snapshot.trace),
        "outcome": outcome,
    }


def json_safe(val: Any) -> Any:
    if isinstance(val, float):
        return _finite(val)
    if isinstance(val, dict):
        return {str(k): json_safe(v) for k, v in val.items()}
    if isinstance(val, (list, tuple)):
        return [json_safe(item) for item in val]
    if isinstance(val, (int, str, bool, type(None))):
        return val
    return str(val)
