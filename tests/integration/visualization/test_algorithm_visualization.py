"""Integration tests that render workbench snapshots to images.

These tests drive the workbench to completion and plot the final model
state, so the results of each algorithm can be checked by eye.

Run:
    pytest tests/integration/visualization/test_algorithm_visualization.py -v

Output:
    test_output/test_algorithm_visualization/<test_name>/
"""

from __future__ import annotations

import numpy as np

from algosim.models.grid import CellKind

CELL_CODES = {
    CellKind.EMPTY: 0,
    CellKind.VISITED: 1,
    CellKind.PATH: 2,
    CellKind.WALL: 3,
    CellKind.START: 4,
    CellKind.END: 5,
    CellKind.CURRENT: 1,
}


def _no_sleep(_: float) -> None:
    pass


class TestGraphVisualization:
    def test_dijkstra_and_mst(self, bench, test_output_dir):
        """Shortest path from A to F next to the minimum spanning tree."""
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        bench.run("dijkstra", start="A", target="F")
        path = bench.finish(sleep=_no_sleep).details["path"]
        path_edges = {frozenset(pair) for pair in zip(path, path[1:])}
        dijkstra_snap = bench.snapshot().graph

        bench.run("kruskal")
        mst = bench.finish(sleep=_no_sleep)
        mst_snap = bench.snapshot().graph

        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))
        for ax, snap, title, highlight in (
            (ax1, dijkstra_snap, f"Dijkstra A→F: {' → '.join(path)}",
             lambda e: frozenset((e.a, e.b)) in path_edges),
            (ax2, mst_snap, f"Kruskal MST (weight {mst.details['total_weight']:g})",
             lambda e: e.in_tree),
        ):
            for edge in snap.edges:
                a, b = snap.node(edge.a), snap.node(edge.b)
                on = highlight(edge)
                ax.plot([a.x, b.x], [a.y, b.y], color="tab:green" if on else "lightgray",
                        linewidth=3 if on else 1, zorder=1)
                ax.annotate(f"{edge.weight:g}", ((a.x + b.x) / 2, (a.y + b.y) / 2), fontsize=9)
            for node in snap.nodes:
                ax.scatter(node.x, node.y, s=400, color="tab:blue", zorder=2)
                ax.annotate(node.id, (node.x, node.y), ha="center", va="center",
                            color="white", zorder=3)
            ax.set_title(title)
            ax.invert_yaxis()
            ax.set_aspect("equal")
            ax.axis("off")

        plt.tight_layout()
        plt.savefig(test_output_dir / "graph_algorithms.png", dpi=120)
        plt.close()

        assert (test_output_dir / "graph_algorithms.png").exists()
        assert sum(e.in_tree for e in mst_snap.edges) == len(mst_snap.nodes) - 1


class TestMazeVisualization:
    def test_bfs_vs_dfs(self, bench, test_output_dir):
        """BFS and DFS over the same random maze."""
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        bench.edit({"op": "randomize_walls", "density": 0.2, "seed": 11})
        images = {}
        outcomes = {}
        for kind in ("bfs", "dfs"):
            bench.run(kind)
            outcomes[kind] = bench.finish(sleep=_no_sleep)
            cells = bench.snapshot().grid.cells
            images[kind] = np.array([[CELL_CODES[c] for c in row] for row in cells])

        fig, axes = plt.subplots(2, 1, figsize=(10, 9))
        for ax, kind in zip(axes, ("bfs", "dfs")):
            outcome = outcomes[kind]
            ax.imshow(images[kind], cmap="viridis", vmin=0, vmax=5)
            ax.set_title(
                f"{kind.upper()}: explored {outcome.details['explored']}, "
                f"path {len(outcome.details['path'])}"
            )
            ax.set_xticks([])
            ax.set_yticks([])

        plt.tight_layout()
        plt.savefig(test_output_dir / "maze_search.png", dpi=120)
        plt.close()

        assert (test_output_dir / "maze_search.png").exists()
        assert outcomes["bfs"].success == outcomes["dfs"].success


class TestConsensusVisualization:
    def test_pbft_fault_sweep(self, bench, test_output_dir):
        """Replies received by the client as Byzantine replicas are added."""
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        replies = []
        for byzantine in range(bench.pbft.n - 1):
            if byzantine:
                bench.edit({"op": "set_byzantine", "replica_id": byzantine})
            bench.run("pbft")
            outcome = bench.finish(sleep=_no_sleep)
            replies.append(len(outcome.details.get("replied", [])))

        fig, ax = plt.subplots(figsize=(8, 5))
        ax.bar(range(len(replies)), replies, color="tab:purple")
        ax.axhline(bench.pbft.quorum + 1, color="red", linestyle="--", label="commit quorum + 1")
        ax.set_xlabel("Byzantine replicas")
        ax.set_ylabel("Matching replies")
        ax.set_title(f"PBFT with n={bench.pbft.n} (f={bench.pbft.f})")
        ax.legend()

        plt.tight_layout()
        plt.savefig(test_output_dir / "pbft_fault_sweep.png", dpi=120)
        plt.close()

        assert replies[0] == bench.pbft.n
        assert replies[1] == bench.pbft.n - 1
        assert all(r == 0 for r in replies[2:])
