"""WorkbenchBridge: mediator between the workbench and the API layer.

Serializes workbench state to JSON-safe dicts under a lock, forwards
commands, and captures algosim log records so the browser can show them
next to the trace.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from algosim.core.step import ExecutorKind
from algosim.visual.serializers import json_safe, serialize_snapshot

if TYPE_CHECKING:
    from algosim.workbench import Workbench


@dataclass
class RecordedLog:
    wall_time: str
    level: str
    logger_name: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "wall_time": self.wall_time,
            "level": self.level,
            "logger_name": self.logger_name,
            "message": self.message,
        }


class _BridgeLogHandler(logging.Handler):
    """Captures log records from the algosim logger hierarchy."""

    def __init__(self, bridge: WorkbenchBridge) -> None:
        super().__init__(level=logging.DEBUG)
        self._bridge = bridge

    def emit(self, record: logging.LogRecord) -> None:
        try:
            logger_name = record.name
            if logger_name.startswith("algosim."):
                logger_name = logger_name[len("algosim.") :]

            entry = RecordedLog(
                wall_time=datetime.now(UTC).strftime("%H:%M:%S.%f")[:-3],
                level=record.levelname,
                logger_name=logger_name,
                message=self.format(record),
            )

            with self._bridge._log_lock:
                self._bridge._log_buffer.append(entry)
                self._bridge._new_logs_buffer.append(entry)
        except Exception:
            self.handleError(record)


class WorkbenchBridge:
    """Wraps a Workbench for the HTTP API."""

    MAX_LOG_BUFFER = 5000

    def __init__(self, bench: Workbench, log_level: int = logging.INFO) -> None:
        self._bench = bench
        self._lock = threading.RLock()
        self._log_lock = threading.Lock()
        self._log_buffer: deque[RecordedLog] = deque(maxlen=self.MAX_LOG_BUFFER)
        self._new_logs_buffer: list[RecordedLog] = []

        # Install log handler on the algosim root logger
        self._logger = logging.getLogger("algosim")
        self._prev_log_level = self._logger.level
        if self._logger.level > log_level or self._logger.level == logging.NOTSET:
            self._logger.setLevel(log_level)
        self._log_handler = _BridgeLogHandler(self)
        self._log_handler.setLevel(log_level)
        self._logger.addHandler(self._log_handler)

    @property
    def bench(self) -> Workbench:
        return self._bench

    def get_state(self) -> dict[str, Any]:
        """Return the full workbench state."""
        with self._lock:
            state = serialize_snapshot(self._bench.snapshot())
            state["delay_ms"] = round(self._bench.controller.delay_s * 1000)
        return state

    def get_trace(self, since: int = 0) -> list[dict[str, Any]]:
        """Return trace entries with index >= ``since``."""
        with self._lock:
            return [e.to_dict() for e in self._bench.trace.since(since)]

    def get_logs(self, last_n: int = 100) -> list[dict[str, Any]]:
        with self._log_lock:
            logs = list(self._log_buffer)
        return [entry.to_dict() for entry in logs[-last_n:]]

    def _drain_new_logs(self) -> list[dict[str, Any]]:
        with self._log_lock:
            new_logs = [entry.to_dict() for entry in self._new_logs_buffer]
            self._new_logs_buffer.clear()
        return new_logs

    def _result(self, trace_from: int, **extra: Any) -> dict[str, Any]:
        return {
            "state": self.get_state(),
            "new_trace": self.get_trace(trace_from),
            "new_logs": self._drain_new_logs(),
            **extra,
        }

    def run(self, kind: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Start a run.

        Raises:
            ValueError: If ``kind`` is unknown or the parameters are invalid.
        """
        with self._lock:
            trace_from = len(self._bench.trace)
            started = self._bench.run(ExecutorKind(kind), **(params or {}))
            return self._result(trace_from, started=started)

    def step(self, count: int = 1) -> dict[str, Any]:
        """Advance the active run by up to ``count`` steps."""
        with self._lock:
            trace_from = len(self._bench.trace)
            steps = 0
            delay_s = 0.0
            for _ in range(count):
                if not self._bench.is_running:
                    break
                step = self._bench.step()
                if step is None:
                    break
                steps += 1
                delay_s = self._bench.controller.delay_s * step.pause
            return self._result(trace_from, steps=steps, delay_s=delay_s)

    def reset(self) -> dict[str, Any]:
        with self._lock:
            self._bench.reset()
            with self._log_lock:
                self._log_buffer.clear()
                self._new_logs_buffer.clear()
            return self.get_state()

    def edit(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Apply an edit given in ``{"op": ...}`` form.

        Raises:
            TopologyError: If the edit is invalid.
        """
        with self._lock:
            applied = self._bench.edit(payload)
            return {"applied": applied, "state": self.get_state()}

    def set_speed(self, delay_ms: float) -> dict[str, Any]:
        with self._lock:
            self._bench.set_speed(delay_ms)
            return self.get_state()

    def outcome(self) -> dict[str, Any] | None:
        with self._lock:
            outcome = self._bench.outcome
            if outcome is None:
                return None
            data = outcome.to_dict()
            data["details"] = json_safe(data["details"])
            return data

    def close(self) -> None:
        """Remove the log handler and restore logger level."""
        self._logger.removeHandler(self._log_handler)
        self._logger.setLevel(self._prev_log_level)
