"""A grid together with its entrance and exit."""

from dataclasses import dataclass

from .generator import MazeGenerator
from .grid import Direction, Grid, Position, WallSnapshot


@dataclass
class MazeSnapshot:
    """Everything needed to put a layout back exactly as it was."""
    walls: WallSnapshot
    entrance: Position
    exit: Position


class Maze:
    """
    Owned grid plus index references to its two boundary openings.

    Entrance and exit are stored as positions rather than cell objects so a
    rebuilt grid never leaves them dangling.
    """

    def __init__(self, grid: Grid, entrance: Position, exit_: Position):
        grid.cell_at(entrance.x, entrance.y)
        grid.cell_at(exit_.x, exit_.y)
        self.grid = grid
        self.entrance = entrance
        self.exit = exit_

    @classmethod
    def generate(cls, width: int, height: int, generator: MazeGenerator) -> "Maze":
        """Build a brand-new perfect maze."""
        grid = Grid.create(width, height)
        openings = generator.generate(grid)
        return cls(grid, openings.entrance, openings.exit)

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def regenerate(self, generator: MazeGenerator) -> None:
        """Re-carve the layout in place with new openings."""
        openings = generator.generate(self.grid)
        self.entrance = openings.entrance
        self.exit = openings.exit

    def snapshot(self) -> MazeSnapshot:
        return MazeSnapshot(
            walls=self.grid.snapshot_walls(),
            entrance=self.entrance,
            exit=self.exit,
        )

    def restore(self, snapshot: MazeSnapshot) -> None:
        """Put a previous layout back verbatim."""
        self.grid.restore_walls(snapshot.walls)
        self.entrance = snapshot.entrance
        self.exit = snapshot.exit

    def opening_directions(self, position: Position) -> list[Direction]:
        """All outward openings on a cell (a 1x1 maze has two)."""
        cell = self.grid.cell_at(position.x, position.y)
        return [
            direction
            for direction in Direction.ordered()
            if not cell.has_wall(direction) and self.grid.neighbor(cell, direction) is None
        ]
