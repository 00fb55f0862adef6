"""Transition and outcome types exchanged between executors and the controller.

An executor is a generator: it mutates its model, appends trace lines,
and yields a ``Step`` at every suspension point. When it finishes it
returns a ``RunOutcome``.
"""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from algosim.components.consensus.messages import Message


class ExecutorKind(str, Enum):
    """Algorithms the workbench can run."""

    DIJKSTRA = "dijkstra"
    PRIM = "prim"
    KRUSKAL = "kruskal"
    DFS = "dfs"
    BFS = "bfs"
    PAXOS = "paxos"
    PBFT = "pbft"


Focus = Union[str, int, tuple[int, int], tuple[str, str], None]
"""What a step highlights: a node id, a grid cell, an edge, or a participant."""


@dataclass(frozen=True)
class Step:
    """One discrete transition of an executor.

    Attributes:
        label: Short machine-friendly name of the transition ("visit", "relax").
        focus: The node, cell, edge or participant being worked on.
        messages: Messages "in flight" until the next step.
        pause: Multiplier applied to the controller delay after this step.
    """

    label: str
    focus: Focus = None
    messages: tuple[Message, ...] = ()
    pause: float = 1.0


@dataclass(frozen=True)
class RunOutcome:
    """Terminal result of a run.

    Attributes:
        kind: Executor that produced the outcome.
        success: Whether the algorithm reached its goal.
        reason: Why the run failed (e.g. "no path found"), or None.
        cancelled: True if the run was interrupted before finishing.
        details: Algorithm-specific results (path, total weight, ...).
    """

    kind: ExecutorKind
    success: bool
    reason: str | None = None
    cancelled: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def succeeded(cls, kind: ExecutorKind, **details: Any) -> RunOutcome:
        return cls(kind=kind, success=True, details=details)

    @classmethod
    def failed(cls, kind: ExecutorKind, reason: str, **details: Any) -> RunOutcome:
        return cls(kind=kind, success=False, reason=reason, details=details)

    @classmethod
    def interrupted(cls, kind: ExecutorKind) -> RunOutcome:
        return cls(kind=kind, success=False, reason="cancelled", cancelled=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "success": self.success,
            "reason": self.reason,
            "cancelled": self.cancelled,
            "details": dict(self.details),
        }


Executor = Generator[Step, None, RunOutcome]
"""Type alias for executor generators."""
