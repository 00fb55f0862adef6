"""Depth-first and breadth-first maze search over a ``Grid``.

Both searches share one loop and differ only in the frontier: DFS pops
the most recently pushed cell, BFS the oldest. Each frontier entry
carries the cells leading to it, so the path is rebuilt without
back-pointers on the grid.
"""

from __future__ import annotations

import logging
from collections import deque

from algosim.core.step import Executor, ExecutorKind, RunOutcome, Step
from algosim.core.trace import StepKind, StepTrace
from algosim.models.grid import Cell, CellKind, Grid
from algosim.utils.formatting import fmt_cell

logger = logging.getLogger(__name__)

RIGHT, DOWN, LEFT, UP = (0, 1), (1, 0), (0, -1), (-1, 0)

# DFS pushes the reverse of this order, so "right" is explored first.
DFS_ORDER: tuple[Cell, ...] = (RIGHT, DOWN, LEFT, UP)
BFS_ORDER: tuple[Cell, ...] = (UP, RIGHT, DOWN, LEFT)


def depth_first_search(grid: Grid, trace: StepTrace) -> Executor:
    """Create a DFS executor from ``grid.start`` to ``grid.end``."""
    return _search(grid, trace, ExecutorKind.DFS)


def breadth_first_search(grid: Grid, trace: StepTrace) -> Executor:
    """Create a BFS executor; the path found has minimum length."""
    return _search(grid, trace, ExecutorKind.BFS)


def _search(grid: Grid, trace: StepTrace, kind: ExecutorKind) -> Executor:
    grid.clear_path()
    start, end = grid.start, grid.end
    trace.append(f"Starting {kind.value.upper()} from {fmt_cell(start)}", StepKind.START)

    frontier: deque[tuple[Cell, list[Cell]]] = deque([(start, [])])
    visited: set[Cell] = {start}
    explored = 0

    while frontier:
        if kind is ExecutorKind.DFS:
            cell, path = frontier.pop()
        else:
            cell, path = frontier.popleft()
        explored += 1

        grid.mark(cell, CellKind.CURRENT)
        yield Step("explore", focus=cell)
        if grid.kind(cell) is CellKind.CURRENT:
            grid.mark(cell, CellKind.VISITED)

        if cell == end:
            for on_path in path:
                if grid.kind(on_path) is CellKind.VISITED:
                    grid.mark(on_path, CellKind.PATH)
            full_path = [*path, cell]
            trace.append(
                f"Found path! Nodes explored: {explored}, Path length: {len(full_path)}",
                StepKind.SUCCESS,
            )
            yield Step("path", focus=cell)
            return RunOutcome.succeeded(kind, path=full_path, explored=explored)

        if kind is ExecutorKind.DFS:
            neighbors = grid.neighbors(cell, DFS_ORDER)
            neighbors.reverse()
        else:
            neighbors = grid.neighbors(cell, BFS_ORDER)
        for neighbor in neighbors:
            if neighbor not in visited:
                visited.add(neighbor)
                frontier.append((neighbor, [*path, cell]))

    trace.append(f"No path found. Nodes explored: {explored}", StepKind.FAILURE)
    logger.info("%s: frontier exhausted after %d cells", kind.value, explored)
    return RunOutcome.failed(kind, "no path found", path=[], explored=explored)
