"""Engine defaults and environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class EngineConfig:
    """Defaults used when a workbench builds or rebuilds its models.

    Attributes:
        step_delay_ms: Delay between steps when a run is played.
        grid_rows: Maze height in cells.
        grid_cols: Maze width in cells.
        grid_start: (row, col) of the start cell after a reset.
        grid_end: (row, col) of the end cell after a reset.
        wall_density: Probability of a wall per cell for random mazes.
        canvas_width: Width of the graph canvas nodes are clamped to.
        canvas_height: Height of the graph canvas nodes are clamped to.
        canvas_margin: Distance nodes keep from the canvas border.
        paxos_acceptors: Number of Paxos acceptors.
        paxos_learners: Number of Paxos learners.
        pbft_replicas: Number of PBFT replicas (replica 0 is primary).
        paxos_value: Default value proposed by the Paxos proposer.
        pbft_request: Default client request for PBFT.
    """

    step_delay_ms: int = 1000
    grid_rows: int = 15
    grid_cols: int = 25
    grid_start: tuple[int, int] = (7, 2)
    grid_end: tuple[int, int] = (7, 22)
    wall_density: float = 0.3
    canvas_width: float = 650.0
    canvas_height: float = 300.0
    canvas_margin: float = 30.0
    paxos_acceptors: int = 3
    paxos_learners: int = 2
    pbft_replicas: int = 5
    paxos_value: str = "Value-A"
    pbft_request: str = "Transaction-X"

    def __post_init__(self) -> None:
        if self.step_delay_ms < 0:
            raise ValueError(f"step_delay_ms must be >= 0, got {self.step_delay_ms}")
        if self.grid_rows < 1 or self.grid_cols < 1:
            raise ValueError(
                f"grid must be at least 1x1, got {self.grid_rows}x{self.grid_cols}"
            )
        for label, (row, col) in (("grid_start", self.grid_start), ("grid_end", self.grid_end)):
            if not (0 <= row < self.grid_rows and 0 <= col < self.grid_cols):
                raise ValueError(f"{label} {(row, col)} is outside the grid")
        if self.grid_start == self.grid_end:
            raise ValueError("grid_start and grid_end must differ")
        if not 0.0 <= self.wall_density < 1.0:
            raise ValueError(f"wall_density must be in [0, 1), got {self.wall_density}")
        if self.paxos_acceptors < 1:
            raise ValueError("paxos_acceptors must be >= 1")
        if self.paxos_learners < 0:
            raise ValueError("paxos_learners must be >= 0")
        if self.pbft_replicas < 1:
            raise ValueError("pbft_replicas must be >= 1")

    @property
    def step_delay_s(self) -> float:
        return self.step_delay_ms / 1000.0

    def with_overrides(self, **changes) -> EngineConfig:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from ``ALGOSIM_*`` environment variables.

        Reads ``ALGOSIM_STEP_DELAY_MS``, ``ALGOSIM_GRID_ROWS``,
        ``ALGOSIM_GRID_COLS`` and ``ALGOSIM_PBFT_REPLICAS``. Unset variables
        keep their defaults.

        Raises:
            ValueError: If a variable is not an integer or is out of range.
        """
        env_fields = {
            "ALGOSIM_STEP_DELAY_MS": "step_delay_ms",
            "ALGOSIM_GRID_ROWS": "grid_rows",
            "ALGOSIM_GRID_COLS": "grid_cols",
            "ALGOSIM_PBFT_REPLICAS": "pbft_replicas",
        }
        changes: dict[str, int] = {}
        for var, field_name in env_fields.items():
            raw = os.environ.get(var, "").strip()
            if not raw:
                continue
            try:
                changes[field_name] = int(raw)
            except ValueError:
                raise ValueError(f"{var} must be an integer, got {raw!r}") from None

        config = cls()
        if "grid_rows" in changes or "grid_cols" in changes:
            # Keep the endpoints on the middle row of a resized grid.
            rows = changes.get("grid_rows", config.grid_rows)
            cols = changes.get("grid_cols", config.grid_cols)
            mid = rows // 2
            changes["grid_start"] = (mid, min(2, cols - 1))
            changes["grid_end"] = (mid, max(cols - 3, 0))
        return config.with_overrides(**changes)
