"""Append-only step trace shared by every executor.

Executors append one human-readable line per notable action. The trace
is never edited in place; the only removal is a full ``clear()`` on reset.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)


class StepKind(str, Enum):
    """Category of a trace line, used by renderers to style it."""

    START = "start"
    VISIT = "visit"
    UPDATE = "update"
    CONSIDER = "consider"
    ACCEPT = "accept"
    REJECT = "reject"
    PHASE = "phase"
    MESSAGE = "message"
    WARNING = "warning"
    SUCCESS = "success"
    FAILURE = "failure"
    INFO = "info"


@dataclass(frozen=True)
class TraceEntry:
    """One line of the trace.

    Attributes:
        index: Zero-based position in the trace.
        line: Human-readable text.
        kind: Category of the line.
    """

    index: int
    line: str
    kind: StepKind

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "line": self.line, "kind": self.kind.value}


class StepTrace:
    """Ordered, append-only log of trace entries."""

    def __init__(self) -> None:
        self._entries: list[TraceEntry] = []

    def append(self, line: str, kind: StepKind = StepKind.INFO) -> TraceEntry:
        """Append a line and return the stored entry."""
        entry = TraceEntry(index=len(self._entries), line=line, kind=StepKind(kind))
        self._entries.append(entry)
        logger.debug("trace[%d] %s: %s", entry.index, entry.kind.value, line)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> tuple[TraceEntry, ...]:
        return tuple(self._entries)

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(e.line for e in self._entries)

    @property
    def last(self) -> TraceEntry | None:
        return self._entries[-1] if self._entries else None

    def since(self, index: int) -> list[TraceEntry]:
        """Return entries with ``entry.index >= index``."""
        return self._entries[max(index, 0):]

    def to_records(self) -> list[dict[str, Any]]:
        return [e.to_dict() for e in self._entries]

    def to_dataframe(self) -> pd.DataFrame:
        """Export the trace as a DataFrame with index, line and kind columns."""
        import pandas as pd

        return pd.DataFrame(self.to_records(), columns=["index", "line", "kind"])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(tuple(self._entries))

    def __repr__(self) -> str:
        return f"StepTrace(entries={len(self._entries)})"
