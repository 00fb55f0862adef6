"""Rectangular maze grid searched by DFS and BFS.

The grid always holds exactly one start and one end cell. Placing a new
start or end clears the previous occupant. Walls are impassable.
"""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from enum import Enum

import numpy as np

from algosim.errors import TopologyError

logger = logging.getLogger(__name__)

Cell = tuple[int, int]


class CellKind(str, Enum):
    EMPTY = "empty"
    WALL = "wall"
    START = "start"
    END = "end"
    VISITED = "visited"
    PATH = "path"
    CURRENT = "current"


SEARCH_MARKS = frozenset({CellKind.VISITED, CellKind.PATH, CellKind.CURRENT})


def _coordinate(value) -> int:
    """Row or column index as an int. Floats, bools and strings are rejected."""
    if isinstance(value, bool):
        raise TopologyError(f"cell coordinate must be an integer, got {value!r}")
    try:
        return operator.index(value)
    except TypeError:
        raise TopologyError(f"cell coordinate must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class GridSnapshot:
    """Read-only copy of a grid."""

    rows: int
    cols: int
    start: Cell
    end: Cell
    cells: tuple[tuple[CellKind, ...], ...]

    def kind(self, cell: Cell) -> CellKind:
        row, col = cell
        return self.cells[row][col]


class Grid:
    """Mutable ``rows x cols`` grid of cells.

    Args:
        rows: Number of rows.
        cols: Number of columns.
        start: (row, col) of the start cell.
        end: (row, col) of the end cell.
    """

    def __init__(self, rows: int, cols: int, start: Cell, end: Cell) -> None:
        if rows < 1 or cols < 1:
            raise TopologyError(f"grid must be at least 1x1, got {rows}x{cols}")
        self._rows = rows
        self._cols = cols
        self._cells: list[list[CellKind]] = [
            [CellKind.EMPTY] * cols for _ in range(rows)
        ]
        start = self._check_in_bounds(start)
        end = self._check_in_bounds(end)
        if start == end:
            raise TopologyError("start and end must be different cells")
        self._start = start
        self._end = end
        self._set(start, CellKind.START)
        self._set(end, CellKind.END)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def start(self) -> Cell:
        return self._start

    @property
    def end(self) -> Cell:
        return self._end

    def kind(self, cell: Cell) -> CellKind:
        row, col = self._check_in_bounds(cell)
        return self._cells[row][col]

    def in_bounds(self, cell: Cell) -> bool:
        row, col = cell
        return 0 <= row < self._rows and 0 <= col < self._cols

    def passable(self, cell: Cell) -> bool:
        return self.in_bounds(cell) and self.kind(cell) is not CellKind.WALL

    def neighbors(self, cell: Cell, order: tuple[Cell, ...]) -> list[Cell]:
        """In-bounds, non-wall cells offset from ``cell`` by each delta in ``order``."""
        row, col = cell
        result = []
        for d_row, d_col in order:
            candidate = (row + d_row, col + d_col)
            if self.passable(candidate):
                result.append(candidate)
        return result

    def cells_of(self, kind: CellKind) -> list[Cell]:
        return [
            (row, col)
            for row in range(self._rows)
            for col in range(self._cols)
            if self._cells[row][col] is kind
        ]

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def toggle_wall(self, cell: Cell) -> CellKind:
        """Flip a cell between wall and empty. Start and end are protected."""
        cell = self._check_in_bounds(cell)
        current = self.kind(cell)
        if current in (CellKind.START, CellKind.END):
            raise TopologyError(f"cannot place a wall on the {current.value} cell {cell}")
        new_kind = CellKind.EMPTY if current is CellKind.WALL else CellKind.WALL
        self._set(cell, new_kind)
        return new_kind

    def paint_wall(self, cell: Cell) -> None:
        """Set a wall while drag-drawing. Start and end cells are skipped."""
        cell = self._check_in_bounds(cell)
        if self.kind(cell) not in (CellKind.START, CellKind.END):
            self._set(cell, CellKind.WALL)

    def place_start(self, cell: Cell) -> None:
        self._place(cell, CellKind.START)

    def place_end(self, cell: Cell) -> None:
        self._place(cell, CellKind.END)

    def clear_path(self) -> None:
        """Turn visited/path/current marks back into empty cells."""
        for row in self._cells:
            for col, kind in enumerate(row):
                if kind in SEARCH_MARKS:
                    row[col] = CellKind.EMPTY

    def clear_walls(self) -> None:
        for row in self._cells:
            for col, kind in enumerate(row):
                if kind is CellKind.WALL:
                    row[col] = CellKind.EMPTY

    def randomize_walls(self, density: float, seed: int | None = None) -> int:
        """Replace every empty or marked cell with a wall with probability ``density``.

        Returns:
            Number of walls placed.
        """
        if not 0.0 <= density < 1.0:
            raise TopologyError(f"wall density must be in [0, 1), got {density}")
        self.clear_path()
        self.clear_walls()
        rng = np.random.default_rng(seed)
        draws = rng.random((self._rows, self._cols)) < density
        placed = 0
        for row, col in zip(*np.nonzero(draws)):
            cell = (int(row), int(col))
            if self.kind(cell) is CellKind.EMPTY:
                self._set(cell, CellKind.WALL)
                placed += 1
        logger.debug("Placed %d random walls (density=%.2f)", placed, density)
        return placed

    def mark(self, cell: Cell, kind: CellKind) -> None:
        """Set a search mark. Start, end and walls keep their kind."""
        if kind not in SEARCH_MARKS and kind is not CellKind.EMPTY:
            raise ValueError(f"{kind.value} is not a search mark")
        if self.kind(cell) not in (CellKind.START, CellKind.END, CellKind.WALL):
            self._set(cell, kind)

    def _place(self, cell: Cell, kind: CellKind) -> None:
        cell = self._check_in_bounds(cell)
        current = self.kind(cell)
        other = CellKind.END if kind is CellKind.START else CellKind.START
        if current is CellKind.WALL:
            raise TopologyError(f"cannot place {kind.value} on a wall at {cell}")
        if current is other:
            raise TopologyError(f"cannot place {kind.value} on the {other.value} cell {cell}")

        previous = self._start if kind is CellKind.START else self._end
        self._set(previous, CellKind.EMPTY)
        self._set(cell, kind)
        if kind is CellKind.START:
            self._start = cell
        else:
            self._end = cell

    def _set(self, cell: Cell, kind: CellKind) -> None:
        row, col = cell
        self._cells[row][col] = kind

    def _check_in_bounds(self, cell: Cell) -> Cell:
        row, col = _coordinate(cell[0]), _coordinate(cell[1])
        if not self.in_bounds((row, col)):
            raise TopologyError(f"cell {(row, col)} is outside the {self._rows}x{self._cols} grid")
        return row, col

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def snapshot(self) -> GridSnapshot:
        return GridSnapshot(
            rows=self._rows,
            cols=self._cols,
            start=self._start,
            end=self._end,
            cells=tuple(tuple(row) for row in self._cells),
        )

    def render(self) -> str:
        """Plain-text picture of the grid, one character per cell."""
        glyphs = {
            CellKind.EMPTY: ".",
            CellKind.WALL: "#",
            CellKind.START: "S",
            CellKind.END: "E",
            CellKind.VISITED: "o",
            CellKind.PATH: "*",
            CellKind.CURRENT: "@",
        }
        return "\n".join("".join(glyphs[kind] for kind in row) for row in self._cells)

    @classmethod
    def from_text(cls, text: str) -> Grid:
        """Build a grid from ``render()``-style text (only ``.#SE`` are read)."""
        lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
        if not lines:
            raise TopologyError("grid text is empty")
        width = len(lines[0])
        if any(len(line) != width for line in lines):
            raise TopologyError("grid text rows must have equal length")
        start = end = None
        for row, line in enumerate(lines):
            for col, char in enumerate(line):
                if char == "S":
                    if start is not None:
                        raise TopologyError("grid text has more than one start")
                    start = (row, col)
                elif char == "E":
                    if end is not None:
                        raise TopologyError("grid text has more than one end")
                    end = (row, col)
        if start is None or end is None:
            raise TopologyError("grid text needs exactly one S and one E")
        grid = cls(len(lines), width, start, end)
        for row, line in enumerate(lines):
            for col, char in enumerate(line):
                if char == "#":
                    grid._set((row, col), CellKind.WALL)
        return grid

    def __repr__(self) -> str:
        return f"Grid({self._rows}x{self._cols}, start={self._start}, end={self._end})"
