"""Tests for the Grid model."""

import numpy as np
import pytest

from algosim.errors import TopologyError
from algosim.models.grid import CellKind, Grid


def make_grid() -> Grid:
    return Grid(5, 6, (2, 0), (2, 5))


class TestGridBasics:
    """Construction and queries."""

    def test_start_and_end_placed(self):
        grid = make_grid()
        assert grid.kind((2, 0)) is CellKind.START
        assert grid.kind((2, 5)) is CellKind.END
        assert len(grid.cells_of(CellKind.EMPTY)) == 5 * 6 - 2

    def test_start_equal_end_rejected(self):
        with pytest.raises(TopologyError):
            Grid(3, 3, (1, 1), (1, 1))

    def test_out_of_bounds_rejected(self):
        with pytest.raises(TopologyError):
            Grid(3, 3, (0, 0), (3, 0))

    def test_neighbors_skip_walls_and_edges(self):
        grid = make_grid()
        grid.toggle_wall((1, 0))
        order = ((-1, 0), (0, 1), (1, 0), (0, -1))
        assert grid.neighbors((2, 0), order) == [(2, 1), (3, 0)]


class TestWalls:
    """Wall editing."""

    def test_toggle_wall_round_trip(self):
        grid = make_grid()
        assert grid.toggle_wall((0, 0)) is CellKind.WALL
        assert grid.toggle_wall((0, 0)) is CellKind.EMPTY

    @pytest.mark.parametrize("cell", [(2, 0), (2, 5)])
    def test_toggle_wall_on_endpoint_rejected(self, cell):
        grid = make_grid()
        before = grid.snapshot()
        with pytest.raises(TopologyError):
            grid.toggle_wall(cell)
        assert grid.snapshot() == before

    def test_paint_wall_skips_endpoints(self):
        grid = make_grid()
        grid.paint_wall((2, 0))
        grid.paint_wall((0, 3))
        assert grid.kind((2, 0)) is CellKind.START
        assert grid.kind((0, 3)) is CellKind.WALL

    def test_randomize_walls_is_seeded(self):
        first, second = make_grid(), make_grid()
        placed = first.randomize_walls(0.4, seed=7)
        second.randomize_walls(0.4, seed=7)

        assert placed == len(first.cells_of(CellKind.WALL))
        assert first.snapshot() == second.snapshot()
        assert first.kind(first.start) is CellKind.START
        assert first.kind(first.end) is CellKind.END

    def test_randomize_walls_rejects_bad_density(self):
        with pytest.raises(TopologyError):
            make_grid().randomize_walls(1.5)

    @pytest.mark.parametrize("cell", [(1.7, 2), (1, 2.0), (True, 2), ("1", 2)])
    def test_non_integer_cell_rejected(self, cell):
        grid = make_grid()
        with pytest.raises(TopologyError):
            grid.toggle_wall(cell)
        assert grid.cells_of(CellKind.WALL) == []

    def test_numpy_integer_cell_accepted(self):
        grid = make_grid()
        grid.toggle_wall((np.int64(1), np.int64(2)))
        assert grid.kind((1, 2)) is CellKind.WALL

    def test_clear_walls(self):
        grid = make_grid()
        grid.randomize_walls(0.5, seed=1)
        grid.clear_walls()
        assert grid.cells_of(CellKind.WALL) == []


class TestEndpoints:
    """Moving start and end."""

    def test_place_start_moves_it(self):
        grid = make_grid()
        grid.place_start((0, 0))

        assert grid.start == (0, 0)
        assert grid.kind((2, 0)) is CellKind.EMPTY
        assert grid.cells_of(CellKind.START) == [(0, 0)]

    def test_place_on_wall_rejected(self):
        grid = make_grid()
        grid.toggle_wall((0, 0))
        with pytest.raises(TopologyError):
            grid.place_end((0, 0))
        assert grid.end == (2, 5)

    def test_place_start_on_end_rejected(self):
        grid = make_grid()
        with pytest.raises(TopologyError):
            grid.place_start((2, 5))


class TestMarksAndText:
    """Search marks and text round trip."""

    def test_mark_skips_protected_cells(self):
        grid = make_grid()
        grid.toggle_wall((0, 0))
        grid.mark((0, 0), CellKind.VISITED)
        grid.mark((2, 0), CellKind.VISITED)
        grid.mark((1, 1), CellKind.VISITED)

        assert grid.kind((0, 0)) is CellKind.WALL
        assert grid.kind((2, 0)) is CellKind.START
        assert grid.kind((1, 1)) is CellKind.VISITED

    def test_mark_rejects_structural_kinds(self):
        with pytest.raises(ValueError):
            make_grid().mark((1, 1), CellKind.WALL)

    def test_clear_path_keeps_walls(self):
        grid = make_grid()
        grid.toggle_wall((0, 0))
        grid.mark((1, 1), CellKind.PATH)
        grid.clear_path()

        assert grid.kind((0, 0)) is CellKind.WALL
        assert grid.kind((1, 1)) is CellKind.EMPTY

    def test_from_text_and_render(self):
        text = "S.#\n..E"
        grid = Grid.from_text(text)
        assert grid.start == (0, 0)
        assert grid.end == (1, 2)
        assert grid.render() == text

    def test_from_text_requires_endpoints(self):
        with pytest.raises(TopologyError):
            Grid.from_text("...\n.#.")
