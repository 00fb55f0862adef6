"""Maze search executors over ``Grid``."""

from algosim.components.grid.search import (
    BFS_ORDER,
    DFS_ORDER,
    breadth_first_search,
    depth_first_search,
)

__all__ = [
    "BFS_ORDER",
    "DFS_ORDER",
    "breadth_first_search",
    "depth_first_search",
]
