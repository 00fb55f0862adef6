"""Step-by-step driver for executor generators.

StepController owns at most one executor at a time. It pulls one
transition per ``step()`` call, sleeps between pulls when a run is
played, and honours cancellation at the next suspension point.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
import uuid
from typing import Callable

from algosim.core.state import ControllerState
from algosim.core.step import Executor, ExecutorKind, RunOutcome, Step

logger = logging.getLogger(__name__)


class StepController:
    """Timing and lifecycle control for a single active run.

    - **Lifecycle**: ``start`` a run, pull it with ``step``, drive it with
      ``run``/``run_async``, interrupt it with ``cancel``.
    - **Timing**: ``set_speed`` changes the delay used from the next
      suspension point on; each step scales it by ``Step.pause``.
    - **Hooks**: ``on_step`` callbacks see every yielded step.

    Args:
        delay_s: Initial delay between steps, in seconds.
    """

    def __init__(self, delay_s: float = 1.0) -> None:
        if delay_s < 0:
            raise ValueError(f"delay must be >= 0, got {delay_s}")
        self._delay_s = delay_s
        self._lock = threading.RLock()
        self._executor: Executor | None = None
        self._finished: Executor | None = None
        self._kind: ExecutorKind | None = None
        self._current_step: Step | None = None
        self._outcome: RunOutcome | None = None
        self._steps_taken = 0
        self._cancel_requested = False
        self._step_hooks: dict[str, Callable[[Step], None]] = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._executor is not None

    @property
    def delay_s(self) -> float:
        return self._delay_s

    @property
    def kind(self) -> ExecutorKind | None:
        return self._kind

    @property
    def current_step(self) -> Step | None:
        """The most recent step, or None before the first pull / after the run."""
        return self._current_step

    @property
    def outcome(self) -> RunOutcome | None:
        """Outcome of the last finished run."""
        return self._outcome

    @property
    def steps_taken(self) -> int:
        return self._steps_taken

    def get_state(self) -> ControllerState:
        """Return an immutable snapshot of the controller."""
        return ControllerState(
            kind=self._kind,
            is_running=self.is_running,
            steps_taken=self._steps_taken,
            delay_s=self._delay_s,
            current_step=self._current_step,
            outcome=self._outcome,
            cancel_requested=self._cancel_requested,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def set_speed(self, delay_ms: float) -> None:
        """Set the delay between steps in milliseconds."""
        if delay_ms < 0:
            raise ValueError(f"delay must be >= 0 ms, got {delay_ms}")
        self._delay_s = delay_ms / 1000.0
        logger.info("Step delay set to %.0f ms", delay_ms)

    def start(self, kind: ExecutorKind, executor: Executor) -> bool:
        """Attach a new executor.

        Returns:
            False (and leaves the active run alone) if a run is in progress.
        """
        with self._lock:
            if self._executor is not None:
                logger.warning(
                    "Rejected %s run: %s is still running", kind.value, self._kind.value
                )
                executor.close()
                return False
            self._executor = executor
            self._kind = kind
            self._current_step = None
            self._outcome = None
            self._steps_taken = 0
            self._cancel_requested = False
        logger.info("Run started: %s", kind.value, extra={"run_kind": kind.value})
        return True

    def step(self) -> Step | None:
        """Advance the active run by one transition.

        Returns:
            The yielded Step, or None once the run has finished (the outcome
            is then available from ``outcome``).

        Raises:
            RuntimeError: If no run is active.
            Exception: Whatever the executor raised. The run is over and
                its outcome is a failure with reason ``"error: ..."``.
        """
        if self._executor is None:
            raise RuntimeError("Cannot step: no run is active")
        return self._advance(self._executor)

    def run(self, sleep: Callable[[float], None] = time.sleep) -> RunOutcome:
        """Drive the active run to completion, sleeping between steps.

        Args:
            sleep: Called with the delay in seconds after each step. Tests
                pass a no-op to run synchronously.

        Returns:
            The run's outcome (``cancelled`` if interrupted).

        Raises:
            RuntimeError: If no run is active.
        """
        executor, kind = self._executor, self._kind
        if executor is None:
            raise RuntimeError("Cannot run: no run is active")
        while True:
            step = self._advance(executor)
            if step is None:
                return self._outcome_of(executor, kind)
            delay = self._delay_s * step.pause
            if delay > 0:
                sleep(delay)

    async def run_async(self) -> RunOutcome:
        """Like ``run`` but awaits ``asyncio.sleep`` between steps."""
        executor, kind = self._executor, self._kind
        if executor is None:
            raise RuntimeError("Cannot run: no run is active")
        while True:
            step = self._advance(executor)
            if step is None:
                return self._outcome_of(executor, kind)
            await asyncio.sleep(self._delay_s * step.pause)

    def cancel(self) -> bool:
        """Interrupt the active run at the next suspension point.

        Partial model mutations made by the run are kept.

        Returns:
            True if a run was active.
        """
        with self._lock:
            if self._executor is None:
                return False
            self._cancel_requested = True
            self._finish_cancelled()
        return True

    def clear(self) -> None:
        """Forget the last outcome and step. Cancels an active run first."""
        self.cancel()
        with self._lock:
            self._outcome = None
            self._finished = None
            self._current_step = None
            self._kind = None
            self._steps_taken = 0
            self._cancel_requested = False

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def on_step(self, callback: Callable[[Step], None]) -> str:
        """Register a callback invoked after every yielded step.

        Returns:
            Hook ID for ``remove_hook``.
        """
        hook_id = str(uuid.uuid4())[:8]
        self._step_hooks[hook_id] = callback
        return hook_id

    def remove_hook(self, hook_id: str) -> None:
        """Remove a step hook.

        Raises:
            KeyError: If the ID is unknown.
        """
        del self._step_hooks[hook_id]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _advance(self, executor: Executor) -> Step | None:
        """Pull one step from ``executor`` if it is still the active run."""
        with self._lock:
            if self._executor is not executor:
                # Cancelled (or replaced) while the caller was sleeping.
                return None
            try:
                step = next(executor)
            except StopIteration as stop:
                self._finish(stop.value)
                return None
            except Exception as exc:
                self._finish(RunOutcome.failed(self._kind, f"error: {exc!r}"))
                raise
            self._current_step = step
            self._steps_taken += 1

        logger.debug("[%s] step %d: %s", self._kind.value, self._steps_taken, step.label)
        for callback in list(self._step_hooks.values()):
            callback(step)
        return step

    def _outcome_of(self, executor: Executor, kind: ExecutorKind) -> RunOutcome:
        """Outcome of ``executor``'s run; interrupted if it was cleared or replaced."""
        with self._lock:
            if self._finished is executor and self._outcome is not None:
                return self._outcome
        return RunOutcome.interrupted(kind)

    def _finish(self, outcome: RunOutcome | None) -> None:
        kind = self._kind
        self._finished = self._executor
        self._executor = None
        self._current_step = None
        if outcome is None:
            outcome = RunOutcome.failed(kind, "executor returned no outcome")
        self._outcome = outcome
        logger.info(
            "Run finished: %s success=%s reason=%s",
            kind.value,
            self._outcome.success,
            self._outcome.reason,
            extra={"run_kind": kind.value},
        )

    def _finish_cancelled(self) -> None:
        kind = self._kind
        self._finished = self._executor
        self._executor.close()
        self._executor = None
        self._current_step = None
        self._outcome = RunOutcome.interrupted(kind)
        logger.info("Run cancelled: %s", kind.value, extra={"run_kind": kind.value})

    def __repr__(self) -> str:
        kind = self._kind.value if self._kind else None
        return f"StepController(kind={kind}, running={self.is_running}, steps={self._steps_taken})"
