"""Tests for the DFS solver and reachability checks."""

import random

import pytest

from shifting_maze.core import (
    Direction,
    Grid,
    IllegalMoveError,
    Maze,
    MazeGenerator,
    OutOfBoundsError,
    Position,
    find_solution,
    is_reachable,
    partial_solution,
    replay,
)
from shifting_maze.core.solver import path_to_keys
from shifting_maze.core.validator import all_reachable


def open_grid(width: int, height: int) -> Grid:
    """A grid with every interior wall removed."""
    grid = Grid.create(width, height)
    for cell in grid:
        for direction in (Direction.RIGHT, Direction.DOWN):
            neighbor = grid.neighbor(cell, direction)
            if neighbor is not None:
                grid.remove_wall_between(cell, neighbor)
    return grid


class TestFindSolution:
    """Tests for find_solution."""

    @pytest.mark.parametrize("seed", range(10))
    def test_solution_reaches_exit(self, seed):
        """Replaying the solution from the entrance lands on the exit."""
        maze = Maze.generate(12, 9, MazeGenerator(random.Random(seed)))
        moves = find_solution(maze.grid, maze.entrance, maze.exit)

        assert moves
        assert replay(maze.grid, maze.entrance, moves) == maze.exit

    def test_solution_from_every_cell(self):
        """A perfect maze is solvable from anywhere."""
        maze = Maze.generate(6, 6, MazeGenerator(random.Random(11)))
        for cell in maze.grid:
            moves = find_solution(maze.grid, cell.position, maze.exit)
            assert replay(maze.grid, cell.position, moves) == maze.exit

    def test_start_on_exit_is_empty(self):
        """No moves are needed when already standing on the exit."""
        maze = Maze.generate(1, 1, MazeGenerator(random.Random(0)))
        assert find_solution(maze.grid, maze.entrance, maze.exit) == []

    def test_unreachable_exit_is_empty(self):
        """A walled-off exit yields an empty path."""
        grid = Grid.create(2, 1)
        assert find_solution(grid, Position(0, 0), Position(1, 0)) == []

    def test_direction_order_breaks_ties(self):
        """With several routes the Up, Right, Down, Left order decides."""
        grid = open_grid(2, 2)
        moves = find_solution(grid, Position(0, 0), Position(1, 1))
        assert moves == [Direction.RIGHT, Direction.DOWN]

    def test_backtracks_out_of_dead_ends(self):
        """Dead ends explored first do not end up in the path."""
        # Corridor (0,0)-(1,0)-(2,0) with a branch down from (1,0) to (1,1)
        grid = Grid.create(3, 2)
        grid.remove_wall_between(grid.cell_at(0, 0), grid.cell_at(1, 0))
        grid.remove_wall_between(grid.cell_at(1, 0), grid.cell_at(2, 0))
        grid.remove_wall_between(grid.cell_at(1, 0), grid.cell_at(1, 1))
        grid.remove_wall_between(grid.cell_at(1, 1), grid.cell_at(0, 1))

        moves = find_solution(grid, Position(0, 0), Position(0, 1))
        assert moves == [Direction.RIGHT, Direction.DOWN, Direction.LEFT]

    def test_large_maze_does_not_recurse(self):
        """Long corridors are handled without hitting the recursion limit."""
        maze = Maze.generate(80, 80, MazeGenerator(random.Random(3)))
        moves = find_solution(maze.grid, maze.entrance, maze.exit)
        assert replay(maze.grid, maze.entrance, moves) == maze.exit

    def test_out_of_bounds_start(self):
        """Positions outside the grid are rejected."""
        grid = Grid.create(2, 2)
        with pytest.raises(OutOfBoundsError):
            find_solution(grid, Position(5, 5), Position(0, 0))


class TestPartialSolution:
    """Tests for partial_solution."""

    def test_is_prefix_of_full_solution(self):
        """Partial solutions are prefixes of the full one."""
        maze = Maze.generate(10, 10, MazeGenerator(random.Random(5)))
        full = find_solution(maze.grid, maze.entrance, maze.exit)

        for steps in (0, 1, 3, len(full), len(full) + 5):
            partial = partial_solution(maze.grid, maze.entrance, maze.exit, steps)
            assert partial == full[:steps]
            assert len(partial) == min(steps, len(full))

    def test_negative_steps(self):
        """Negative step counts are rejected."""
        grid = Grid.create(1, 1)
        with pytest.raises(ValueError):
            partial_solution(grid, Position(0, 0), Position(0, 0), -1)


class TestReplay:
    """Tests for replay and key rendering."""

    def test_replay_into_wall(self):
        """Walking into a wall raises IllegalMoveError."""
        grid = Grid.create(2, 1)
        with pytest.raises(IllegalMoveError):
            replay(grid, Position(0, 0), [Direction.RIGHT])

    def test_path_to_keys(self):
        """Moves render as WASD."""
        moves = [Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT]
        assert path_to_keys(moves) == "wdsa"


class TestValidator:
    """Tests for reachability checks."""

    def test_generated_maze_is_reachable(self):
        """Every cell of a perfect maze reaches the exit."""
        maze = Maze.generate(7, 5, MazeGenerator(random.Random(8)))
        starts = [cell.position for cell in maze.grid]
        assert all_reachable(maze.grid, starts, maze.exit)

    def test_closed_grid_is_not_reachable(self):
        """Nothing is reachable through standing walls."""
        grid = Grid.create(3, 3)
        assert not is_reachable(grid, Position(0, 0), Position(2, 2))
        assert is_reachable(grid, Position(1, 1), Position(1, 1))

    def test_all_reachable_fails_on_any_stranded_start(self):
        """One stranded start is enough to fail."""
        grid = Grid.create(3, 1)
        grid.remove_wall_between(grid.cell_at(0, 0), grid.cell_at(1, 0))
        exit_ = Position(1, 0)

        assert all_reachable(grid, [Position(0, 0)], exit_)
        assert not all_reachable(grid, [Position(0, 0), Position(2, 0)], exit_)
        assert all_reachable(grid, [], exit_)
