"""Core engine types: step trace, transitions, and the step controller."""

from algosim.core.controller import StepController
from algosim.core.state import ControllerState, WorkbenchSnapshot
from algosim.core.step import Executor, ExecutorKind, RunOutcome, Step
from algosim.core.trace import StepKind, StepTrace, TraceEntry

__all__ = [
    "ControllerState",
    "Executor",
    "ExecutorKind",
    "RunOutcome",
    "Step",
    "StepController",
    "StepKind",
    "StepTrace",
    "TraceEntry",
    "WorkbenchSnapshot",
]
