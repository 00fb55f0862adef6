"""Topology edit commands.

Each edit is a frozen dataclass with an ``op`` name and an ``apply``
method that mutates the models of an ``EditTarget`` (in practice a
``Workbench``). Edits validate before they mutate, so a rejected edit
leaves the model unchanged.

Edits arriving over the wire are dicts decoded by ``edit_from_dict``::

    {"op": "add_edge", "u": "A", "v": "F", "weight": 7}
    {"op": "toggle_wall", "row": 3, "col": 4}
    {"op": "fail_server", "server_id": 2}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, ClassVar, Protocol

from algosim.config import EngineConfig
from algosim.errors import TopologyError
from algosim.faults import ByzantineReplica, CrashServer, FaultContext, heal_all
from algosim.models.cluster import PaxosCluster, PbftCluster
from algosim.models.graph import Graph
from algosim.models.grid import Grid

logger = logging.getLogger(__name__)


class EditTarget(Protocol):
    config: EngineConfig
    graph: Graph
    grid: Grid
    paxos: PaxosCluster
    pbft: PbftCluster


class Edit(Protocol):
    op: ClassVar[str]

    def apply(self, target: EditTarget) -> None: ...


# ----------------------------------------------------------------------
# Graph
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class AddNode:
    op: ClassVar[str] = "add_node"
    node_id: str
    x: float
    y: float

    def apply(self, target: EditTarget) -> None:
        target.graph.add_node(self.node_id, self.x, self.y)


@dataclass(frozen=True)
class RemoveNode:
    """Remove a node together with its incident edges."""

    op: ClassVar[str] = "remove_node"
    node_id: str

    def apply(self, target: EditTarget) -> None:
        target.graph.remove_node(self.node_id)


@dataclass(frozen=True)
class MoveNode:
    op: ClassVar[str] = "move_node"
    node_id: str
    x: float
    y: float

    def apply(self, target: EditTarget) -> None:
        target.graph.move_node(self.node_id, self.x, self.y)


@dataclass(frozen=True)
class AddEdge:
    op: ClassVar[str] = "add_edge"
    u: str
    v: str
    weight: float = 1

    def apply(self, target: EditTarget) -> None:
        target.graph.add_edge(self.u, self.v, self.weight)


@dataclass(frozen=True)
class RemoveEdge:
    op: ClassVar[str] = "remove_edge"
    u: str
    v: str

    def apply(self, target: EditTarget) -> None:
        target.graph.remove_edge(self.u, self.v)


@dataclass(frozen=True)
class SetEdgeWeight:
    op: ClassVar[str] = "set_weight"
    u: str
    v: str
    weight: float

    def apply(self, target: EditTarget) -> None:
        target.graph.set_weight(self.u, self.v, self.weight)


# ----------------------------------------------------------------------
# Grid
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class ToggleWall:
    op: ClassVar[str] = "toggle_wall"
    row: int
    col: int

    def apply(self, target: EditTarget) -> None:
        target.grid.toggle_wall((self.row, self.col))


@dataclass(frozen=True)
class PaintWall:
    """Drag-drawing a wall; start and end cells are skipped silently."""

    op: ClassVar[str] = "paint_wall"
    row: int
    col: int

    def apply(self, target: EditTarget) -> None:
        target.grid.paint_wall((self.row, self.col))


@dataclass(frozen=True)
class PlaceStart:
    op: ClassVar[str] = "place_start"
    row: int
    col: int

    def apply(self, target: EditTarget) -> None:
        target.grid.place_start((self.row, self.col))


@dataclass(frozen=True)
class PlaceEnd:
    op: ClassVar[str] = "place_end"
    row: int
    col: int

    def apply(self, target: EditTarget) -> None:
        target.grid.place_end((self.row, self.col))


@dataclass(frozen=True)
class RandomizeWalls:
    """Fill the maze with random walls; ``density`` defaults to the config's."""

    op: ClassVar[str] = "randomize_walls"
    density: float | None = None
    seed: int | None = None

    def apply(self, target: EditTarget) -> None:
        density = target.config.wall_density if self.density is None else self.density
        target.grid.randomize_walls(density, self.seed)


@dataclass(frozen=True)
class ClearWalls:
    op: ClassVar[str] = "clear_walls"

    def apply(self, target: EditTarget) -> None:
        target.grid.clear_walls()


@dataclass(frozen=True)
class ClearPath:
    op: ClassVar[str] = "clear_path"

    def apply(self, target: EditTarget) -> None:
        target.grid.clear_path()


# ----------------------------------------------------------------------
# Faults
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class SetServerFailed:
    """Crash (or restart) a Paxos acceptor or learner."""

    op: ClassVar[str] = "fail_server"
    server_id: int
    failed: bool = True

    def apply(self, target: EditTarget) -> None:
        fault = CrashServer(self.server_id)
        ctx = FaultContext(target.paxos, target.pbft)
        if self.failed:
            fault.inject(ctx)
        else:
            fault.heal(ctx)


@dataclass(frozen=True)
class SetByzantine:
    """Flag (or clear) a PBFT backup as Byzantine."""

    op: ClassVar[str] = "set_byzantine"
    replica_id: int
    byzantine: bool = True

    def apply(self, target: EditTarget) -> None:
        fault = ByzantineReplica(self.replica_id)
        ctx = FaultContext(target.paxos, target.pbft)
        if self.byzantine:
            fault.inject(ctx)
        else:
            fault.heal(ctx)


@dataclass(frozen=True)
class ClearFaults:
    """Restart every failed server and clear every Byzantine flag."""

    op: ClassVar[str] = "clear_faults"

    def apply(self, target: EditTarget) -> None:
        heal_all(FaultContext(target.paxos, target.pbft))


EDIT_TYPES: dict[str, type] = {
    cls.op: cls
    for cls in (
        AddNode,
        RemoveNode,
        MoveNode,
        AddEdge,
        RemoveEdge,
        SetEdgeWeight,
        ToggleWall,
        PaintWall,
        PlaceStart,
        PlaceEnd,
        RandomizeWalls,
        ClearWalls,
        ClearPath,
        SetServerFailed,
        SetByzantine,
        ClearFaults,
    )
}


def edit_from_dict(data: Any) -> Edit:
    """Decode ``{"op": name, ...fields}`` into an edit.

    Raises:
        TopologyError: If the payload is not a dict, the op is unknown, or
            the fields do not match the edit.
    """
    if not isinstance(data, dict) or "op" not in data:
        raise TopologyError(f"Invalid edit format: {data!r}")

    op = data["op"]
    cls = EDIT_TYPES.get(op)
    if cls is None:
        raise TopologyError(f"Unknown edit operation: {op!r}")

    params = {k: v for k, v in data.items() if k != "op"}
    allowed = {f.name for f in fields(cls)}
    unknown = set(params) - allowed
    if unknown:
        raise TopologyError(f"{op}: unexpected field(s) {sorted(unknown)}")
    try:
        return cls(**params)
    except TypeError as exc:
        raise TopologyError(f"{op}: {exc}") from None


def edit_to_dict(edit: Edit) -> dict[str, Any]:
    data: dict[str, Any] = {"op": edit.op}
    for f in fields(edit):
        data[f.name] = getattr(edit, f.name)
    return data
