"""
Randomized depth-first backtracker.

Carves a spanning tree over the grid starting from (0, 0), so every cell
is reachable from every other through exactly one simple path, then opens
an entrance and an exit on two different outer sides.

Basic usage:

    generator = MazeGenerator(random.Random(42))
    grid = Grid.create(10, 10)
    openings = generator.generate(grid)
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from .grid import Cell, Direction, Grid, MazeError, Position, Side

logger = logging.getLogger(__name__)


class MazeGenerationError(MazeError):
    """Raised when carving leaves cells unvisited."""

    pass


@dataclass(frozen=True)
class Openings:
    """Entrance and exit produced by a generation run."""
    entrance: Position
    exit: Position
    entrance_side: Side
    exit_side: Side


class MazeGenerator:
    """Carve perfect mazes using a shared random source."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()

    def generate(self, grid: Grid) -> Openings:
        """
        Reset the grid and carve a fresh layout in place.

        Args:
            grid: Grid to carve. All previous walls are discarded.

        Returns:
            Openings with the new entrance and exit.

        Raises:
            MazeGenerationError: If a cell was left unvisited.
        """
        grid.reset()
        self.carve(grid)
        return self.place_openings(grid)

    def carve(self, grid: Grid) -> None:
        """Run the stack-based backtracker from the top-left cell."""
        start = grid.cell_at(0, 0)
        start.visited = True
        stack: list[Cell] = [start]

        while stack:
            current = stack[-1]
            nxt = self._unvisited_neighbor(grid, current)
            if nxt is None:
                stack.pop()
                continue
            grid.remove_wall_between(current, nxt)
            nxt.visited = True
            stack.append(nxt)

        unvisited = [cell.position for cell in grid if not cell.visited]
        if unvisited:
            raise MazeGenerationError(
                f"Maze generation left {len(unvisited)} cell(s) unvisited, "
                f"first at ({unvisited[0].x}, {unvisited[0].y})"
            )

    def _unvisited_neighbor(self, grid: Grid, cell: Cell) -> Optional[Cell]:
        candidates: list[Cell] = []
        for direction in Direction.ordered():
            nxt = grid.neighbor(cell, direction)
            if nxt is not None and not nxt.visited:
                candidates.append(nxt)
        if not candidates:
            return None
        return candidates[self.rng.randrange(len(candidates))]

    def place_openings(self, grid: Grid) -> Openings:
        """Open an entrance and an exit on two distinct random sides."""
        entrance_side = Side(self.rng.randrange(4))
        entrance = self._pick_on_side(grid, entrance_side)

        # Resample the exit until it sits on another side, and on another
        # cell unless the grid has only one
        single_cell = grid.width * grid.height == 1
        while True:
            exit_side = Side(self.rng.randrange(4))
            if exit_side == entrance_side:
                continue
            exit_ = self._pick_on_side(grid, exit_side)
            if single_cell or exit_ != entrance:
                break

        grid.open_boundary(entrance.x, entrance.y, entrance_side.outward)
        grid.open_boundary(exit_.x, exit_.y, exit_side.outward)
        logger.debug(
            "Openings placed: entrance %s on %s, exit %s on %s",
            entrance.to_dict(), entrance_side.name, exit_.to_dict(), exit_side.name,
        )
        return Openings(
            entrance=entrance,
            exit=exit_,
            entrance_side=entrance_side,
            exit_side=exit_side,
        )

    def _pick_on_side(self, grid: Grid, side: Side) -> Position:
        if side == Side.TOP:
            return Position(self.rng.randrange(grid.width), 0)
        if side == Side.RIGHT:
            return Position(grid.width - 1, self.rng.randrange(grid.height))
        if side == Side.BOTTOM:
            return Position(self.rng.randrange(grid.width), grid.height - 1)
        return Position(0, self.rng.randrange(grid.height))
