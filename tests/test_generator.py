"""Tests for the recursive backtracker."""

import random

import pytest

from shifting_maze.core import Direction, Grid, MazeGenerator, Position
from shifting_maze.core.validator import reachable_count


def boundary_openings(grid: Grid) -> list[tuple[Position, Direction]]:
    """Every outer wall that has been knocked out."""
    openings = []
    for cell in grid:
        for direction in Direction.ordered():
            if not cell.has_wall(direction) and grid.neighbor(cell, direction) is None:
                openings.append((cell.position, direction))
    return openings


SIZES = [(1, 1), (1, 2), (2, 1), (1, 7), (5, 1), (2, 2), (3, 5), (10, 10), (17, 9)]


class TestGeneration:
    """Tests for the spanning-tree property."""

    @pytest.mark.parametrize("width,height", SIZES)
    def test_every_cell_visited_once(self, width, height):
        """Carving visits every cell."""
        grid = Grid.create(width, height)
        MazeGenerator(random.Random(7)).generate(grid)
        assert all(cell.visited for cell in grid)

    @pytest.mark.parametrize("width,height", SIZES)
    @pytest.mark.parametrize("seed", [0, 1, 99])
    def test_spanning_tree(self, width, height, seed):
        """w*h - 1 passages and every cell connected means a perfect maze."""
        grid = Grid.create(width, height)
        MazeGenerator(random.Random(seed)).generate(grid)

        assert grid.count_passages() == width * height - 1
        assert reachable_count(grid, Position(0, 0)) == width * height
        assert reachable_count(grid, Position(width - 1, height - 1)) == width * height
        assert grid.walls_consistent()

    def test_same_seed_same_maze(self):
        """Generation is deterministic under a seeded random source."""
        first = Grid.create(12, 8)
        second = Grid.create(12, 8)
        a = MazeGenerator(random.Random(2024)).generate(first)
        b = MazeGenerator(random.Random(2024)).generate(second)

        assert first.snapshot_walls() == second.snapshot_walls()
        assert a == b

    def test_generate_discards_previous_layout(self):
        """Regenerating on a used grid still yields a perfect maze."""
        grid = Grid.create(6, 6)
        generator = MazeGenerator(random.Random(3))
        generator.generate(grid)
        generator.generate(grid)

        assert grid.count_passages() == 35
        assert len(boundary_openings(grid)) == 2


class TestOpenings:
    """Tests for entrance and exit placement."""

    @pytest.mark.parametrize("seed", range(40))
    def test_distinct_sides_and_cells(self, seed):
        """Entrance and exit use different sides and different cells."""
        grid = Grid.create(6, 4)
        openings = MazeGenerator(random.Random(seed)).generate(grid)

        assert openings.entrance_side != openings.exit_side
        assert openings.entrance != openings.exit

    @pytest.mark.parametrize("seed", range(40))
    def test_narrow_grids_never_share_a_cell(self, seed):
        """Even one-cell-wide grids keep entrance and exit apart."""
        for width, height in [(1, 2), (2, 1), (1, 5)]:
            grid = Grid.create(width, height)
            openings = MazeGenerator(random.Random(seed)).generate(grid)
            assert openings.entrance != openings.exit

    @pytest.mark.parametrize("seed", range(20))
    def test_openings_face_outwards(self, seed):
        """Exactly two outer walls are removed, one per opening, on its side."""
        grid = Grid.create(5, 5)
        openings = MazeGenerator(random.Random(seed)).generate(grid)

        found = boundary_openings(grid)
        assert sorted(found, key=str) == sorted(
            [
                (openings.entrance, openings.entrance_side.outward),
                (openings.exit, openings.exit_side.outward),
            ],
            key=str,
        )

    def test_single_cell_grid(self):
        """A 1x1 grid gets both openings on its only cell."""
        grid = Grid.create(1, 1)
        openings = MazeGenerator(random.Random(5)).generate(grid)

        assert openings.entrance == openings.exit == Position(0, 0)
        assert openings.entrance_side != openings.exit_side
        cell = grid.cell_at(0, 0)
        assert sum(1 for wall in cell.walls if not wall) == 2
