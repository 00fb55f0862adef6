"""Workbench: the command surface render collaborators talk to.

A Workbench owns one instance of every model (graph, grid, Paxos cluster,
PBFT cluster), the shared step trace, and the StepController. Commands
(run, edit, reset, set_speed) go through it; renderers sample
``snapshot()`` between steps.

Example::

    bench = Workbench()
    bench.run("dijkstra", start="A", target="F")
    outcome = bench.finish(sleep=lambda _: None)
    print(outcome.details["path"])
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from algosim.components.consensus import paxos, pbft
from algosim.components.graph import dijkstra, kruskal, prim
from algosim.components.grid import breadth_first_search, depth_first_search
from algosim.config import EngineConfig
from algosim.core.controller import StepController
from algosim.core.state import WorkbenchSnapshot
from algosim.core.step import Executor, ExecutorKind, RunOutcome, Step
from algosim.core.trace import StepTrace
from algosim.edits import Edit, edit_from_dict
from algosim.errors import TopologyError
from algosim.faults import Fault, FaultContext, active_faults
from algosim.models.cluster import PaxosCluster, PbftCluster
from algosim.models.graph import Graph, default_graph
from algosim.models.grid import Grid

logger = logging.getLogger(__name__)


class Workbench:
    """Models, trace and controller for every algorithm simulation.

    Only one run may be active at a time. While it is active, new runs and
    edits are rejected (they return False and log a warning).

    Args:
        config: Defaults for models and timing. ``EngineConfig()`` if None.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self.trace = StepTrace()
        self.controller = StepController(delay_s=self.config.step_delay_s)
        self._build_models()

    def _build_models(self) -> None:
        cfg = self.config
        self.graph: Graph = default_graph(cfg.canvas_width, cfg.canvas_height, cfg.canvas_margin)
        self.grid = Grid(cfg.grid_rows, cfg.grid_cols, cfg.grid_start, cfg.grid_end)
        self.paxos = PaxosCluster(cfg.paxos_acceptors, cfg.paxos_learners)
        self.pbft = PbftCluster(cfg.pbft_replicas)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.controller.is_running

    @property
    def outcome(self) -> RunOutcome | None:
        return self.controller.outcome

    @property
    def faults(self) -> list[Fault]:
        return active_faults(FaultContext(self.paxos, self.pbft))

    def snapshot(self) -> WorkbenchSnapshot:
        """Immutable copy of everything a renderer draws."""
        step = self.controller.current_step
        return WorkbenchSnapshot(
            graph=self.graph.snapshot(),
            grid=self.grid.snapshot(),
            paxos=self.paxos.snapshot(),
            pbft=self.pbft.snapshot(),
            is_running=self.is_running,
            focus=step.focus if step else None,
            pending_messages=step.messages if step else (),
            trace=self.trace.entries,
            outcome=self.controller.outcome,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def run(self, kind: ExecutorKind | str, **params: Any) -> bool:
        """Start an algorithm over the current model.

        Args:
            kind: Executor to run, or its name ("dijkstra", "paxos", ...).
            **params: Executor parameters (``start``/``target`` for graph
                algorithms, ``round``/``value`` for Paxos, ``request``/
                ``view``/``sequence`` for PBFT).

        Returns:
            False if a run is already active (nothing changes).

        Raises:
            ValueError: If ``kind`` is unknown.
            TopologyError: If the parameters are invalid. Nothing is started.
        """
        kind = ExecutorKind(kind)
        if self.is_running:
            logger.warning("Rejected %s run: %s is still running",
                           kind.value, self.controller.kind.value)
            return False
        executor = self._build_executor(kind, params)
        return self.controller.start(kind, executor)

    def step(self) -> Step | None:
        """Advance the active run by one step (None once it has finished)."""
        return self.controller.step()

    def finish(self, sleep: Callable[[float], None] = time.sleep) -> RunOutcome:
        """Drive the active run to completion at the configured speed."""
        return self.controller.run(sleep=sleep)

    async def play(self) -> RunOutcome:
        """Drive the active run to completion without blocking the event loop."""
        return await self.controller.run_async()

    def cancel(self) -> bool:
        return self.controller.cancel()

    def reset(self) -> None:
        """Cancel any run, rebuild the default models and clear the trace."""
        self.controller.clear()
        self._build_models()
        self.trace.clear()
        logger.info("Workbench reset")

    def edit(self, edit: Edit | dict) -> bool:
        """Apply a topology edit.

        Args:
            edit: An edit object or its ``{"op": ...}`` dict form.

        Returns:
            False if a run is active (the model is untouched).

        Raises:
            TopologyError: If the edit is invalid. The model is unchanged.
        """
        if isinstance(edit, dict):
            edit = edit_from_dict(edit)
        if self.is_running:
            logger.warning("Rejected %s edit: %s is running", edit.op, self.controller.kind.value)
            return False
        edit.apply(self)
        logger.debug("Applied edit %r", edit)
        return True

    def set_speed(self, delay_ms: float) -> None:
        """Set the delay between steps; applies from the next step on."""
        self.controller.set_speed(delay_ms)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _build_executor(self, kind: ExecutorKind, params: dict[str, Any]) -> Executor:
        try:
            if kind is ExecutorKind.DIJKSTRA:
                return dijkstra(
                    self.graph,
                    self.trace,
                    params.pop("start", None) or self._first_node(),
                    params.pop("target", None) or self._last_node(),
                    **params,
                )
            if kind is ExecutorKind.PRIM:
                start = params.pop("start", None) or self._first_node()
                return prim(self.graph, self.trace, start, **params)
            if kind is ExecutorKind.KRUSKAL:
                return kruskal(self.graph, self.trace, **params)
            if kind is ExecutorKind.DFS:
                return depth_first_search(self.grid, self.trace, **params)
            if kind is ExecutorKind.BFS:
                return breadth_first_search(self.grid, self.trace, **params)
            if kind is ExecutorKind.PAXOS:
                params.setdefault("value", self.config.paxos_value)
                return paxos(self.paxos, self.trace, **params)
            params.setdefault("request", self.config.pbft_request)
            return pbft(self.pbft, self.trace, **params)
        except TypeError as exc:
            raise TopologyError(f"{kind.value}: {exc}") from None

    def _first_node(self) -> str:
        if not self.graph.nodes:
            raise TopologyError("the graph has no nodes")
        return next(iter(self.graph.nodes))

    def _last_node(self) -> str:
        if not self.graph.nodes:
            raise TopologyError("the graph has no nodes")
        return list(self.graph.nodes)[-1]

    def __repr__(self) -> str:
        return f"Workbench(running={self.is_running}, trace={len(self.trace)})"
