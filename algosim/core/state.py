"""Immutable snapshots handed to render collaborators.

ControllerState describes the run lifecycle. WorkbenchSnapshot bundles
it with every model snapshot and the trace so a renderer can sample the
whole engine at any time, mid-run included.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from algosim.core.step import ExecutorKind, Focus, RunOutcome, Step
    from algosim.core.trace import TraceEntry
    from algosim.components.consensus.messages import Message
    from algosim.models.cluster import PaxosClusterSnapshot, PbftClusterSnapshot
    from algosim.models.graph import GraphSnapshot
    from algosim.models.grid import GridSnapshot


@dataclass(frozen=True)
class ControllerState:
    """Snapshot of the step controller.

    Attributes:
        kind: Executor of the active or last run, or None.
        is_running: True while a run is attached.
        steps_taken: Steps yielded by the active or last run.
        delay_s: Current delay between steps in seconds.
        current_step: Most recent step of the active run.
        outcome: Outcome of the last finished run.
        cancel_requested: True if the last run was cancelled.
    """

    kind: ExecutorKind | None
    is_running: bool
    steps_taken: int
    delay_s: float
    current_step: Step | None
    outcome: RunOutcome | None
    cancel_requested: bool


@dataclass(frozen=True)
class WorkbenchSnapshot:
    """Everything a renderer needs to draw one frame.

    Attributes:
        graph: Graph nodes and edges with per-node algorithm state.
        grid: Maze cells.
        paxos: Paxos servers and current phase.
        pbft: PBFT replicas and quorum parameters.
        is_running: True while an executor is active; edits are rejected.
        focus: What the current step highlights.
        pending_messages: Messages in flight until the next step.
        trace: Full ordered trace.
        outcome: Outcome of the last finished run.
    """

    graph: GraphSnapshot
    grid: GridSnapshot
    paxos: PaxosClusterSnapshot
    pbft: PbftClusterSnapshot
    is_running: bool
    focus: Focus
    pending_messages: tuple[Message, ...]
    trace: tuple[TraceEntry, ...]
    outcome: RunOutcome | None
