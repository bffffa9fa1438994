"""
Maze grid and wall topology.

The grid is a width x height lattice of cells addressed by (x, y), with
x growing to the right and y growing downwards. Every cell carries four
wall flags indexed by direction:

    0 = Up, 1 = Right, 2 = Down, 3 = Left

Walls between neighbouring cells are only ever removed in matched pairs
through `Grid.remove_wall_between`, so checking the wall on the current
cell is always enough to decide whether a step is legal.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


class MazeError(Exception):
    """Base exception for maze engine errors."""

    pass


class OutOfBoundsError(MazeError):
    """Raised when a cell outside the grid is addressed."""

    pass


class NotAdjacentError(MazeError):
    """Raised when a wall is removed between non-adjacent cells."""

    pass


class Direction(Enum):
    """Movement directions, in the fixed Up, Right, Down, Left order."""
    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"

    @property
    def index(self) -> int:
        """Wall index for this direction."""
        return _ORDER.index(self)

    @property
    def delta(self) -> tuple[int, int]:
        """Get (dx, dy) for this direction."""
        deltas = {
            Direction.UP: (0, -1),
            Direction.RIGHT: (1, 0),
            Direction.DOWN: (0, 1),
            Direction.LEFT: (-1, 0),
        }
        return deltas[self]

    @property
    def opposite(self) -> "Direction":
        """Direction pointing back the other way."""
        return _ORDER[(self.index + 2) % 4]

    @property
    def key(self) -> str:
        """Keyboard symbol (WASD) for this direction."""
        keys = {
            Direction.UP: "w",
            Direction.RIGHT: "d",
            Direction.DOWN: "s",
            Direction.LEFT: "a",
        }
        return keys[self]

    @classmethod
    def from_key(cls, key: str) -> "Direction":
        """Convert a WASD symbol or a direction name to a Direction."""
        mapping = {
            "w": cls.UP,
            "d": cls.RIGHT,
            "s": cls.DOWN,
            "a": cls.LEFT,
        }
        normalized = key.strip().lower()
        if normalized in mapping:
            return mapping[normalized]
        return cls(normalized)

    @classmethod
    def ordered(cls) -> tuple["Direction", ...]:
        """All directions in wall-index order."""
        return _ORDER


_ORDER: tuple[Direction, ...] = (
    Direction.UP,
    Direction.RIGHT,
    Direction.DOWN,
    Direction.LEFT,
)


class Side(Enum):
    """Outer edges of the grid, used to place entrance and exit."""
    TOP = 0
    RIGHT = 1
    BOTTOM = 2
    LEFT = 3

    @property
    def outward(self) -> Direction:
        """Direction that points out of the grid through this side."""
        return _ORDER[self.value]


@dataclass(frozen=True)
class Position:
    """2D position in the maze."""
    x: int
    y: int

    def move(self, direction: Direction) -> "Position":
        """Return new position after moving in direction."""
        dx, dy = direction.delta
        return Position(self.x + dx, self.y + dy)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"x": self.x, "y": self.y}


@dataclass
class Cell:
    """A single maze cell. `walls[i]` is True while the wall is standing."""
    x: int
    y: int
    walls: list[bool] = field(default_factory=lambda: [True, True, True, True])
    visited: bool = False

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)

    def has_wall(self, direction: Direction) -> bool:
        return self.walls[direction.index]

    def is_fully_closed(self) -> bool:
        """Return True if all four walls are closed."""
        return all(self.walls)


WallSnapshot = list[list[list[bool]]]


class Grid:
    """
    Rectangular cell lattice owned by the maze engine.

    Cells are stored row-major (`cells[y][x]`). Wall flags are mutated only
    through `remove_wall_between` and `open_boundary`; `reset` and
    `restore_walls` rebuild the whole layout.
    """

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(
                f"Grid dimensions must be at least 1x1, got {width}x{height}"
            )
        self.width = width
        self.height = height
        self.cells: list[list[Cell]] = [
            [Cell(x, y) for x in range(width)] for y in range(height)
        ]

    @classmethod
    def create(cls, width: int, height: int) -> "Grid":
        """Create a grid where every wall is standing."""
        return cls(width, height)

    def reset(self) -> None:
        """Close every wall and clear visited flags, keeping dimensions."""
        for cell in self:
            cell.visited = False
            cell.walls[:] = [True, True, True, True]

    def __iter__(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if (x, y) is within the bounds of the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, x: int, y: int) -> Cell:
        """Get the cell at (x, y), failing fast outside the grid."""
        if not self.in_bounds(x, y):
            raise OutOfBoundsError(
                f"Cell ({x}, {y}) is outside a {self.width}x{self.height} grid"
            )
        return self.cells[y][x]

    def neighbor(self, cell: Cell, direction: Direction) -> Optional[Cell]:
        """Adjacent cell in direction, or None at the border."""
        dx, dy = direction.delta
        nx, ny = cell.x + dx, cell.y + dy
        if not self.in_bounds(nx, ny):
            return None
        return self.cells[ny][nx]

    def remove_wall_between(self, a: Cell, b: Cell) -> None:
        """Clear the pair of walls separating two adjacent cells."""
        dx = b.x - a.x
        dy = b.y - a.y
        for direction in _ORDER:
            if direction.delta == (dx, dy):
                a.walls[direction.index] = False
                b.walls[direction.opposite.index] = False
                return
        raise NotAdjacentError(
            f"Cells ({a.x}, {a.y}) and ({b.x}, {b.y}) are not adjacent"
        )

    def open_boundary(self, x: int, y: int, direction: Direction) -> None:
        """Knock out an outer wall to create an entrance or exit opening."""
        cell = self.cell_at(x, y)
        if self.neighbor(cell, direction) is not None:
            raise NotAdjacentError(
                f"Wall {direction.value} of ({x}, {y}) is not on the boundary"
            )
        cell.walls[direction.index] = False

    def can_move(self, x: int, y: int, direction: Direction) -> bool:
        """A step is legal iff the target is in bounds and no wall blocks it."""
        dx, dy = direction.delta
        if not self.in_bounds(x + dx, y + dy):
            return False
        return not self.cells[y][x].walls[direction.index]

    def open_neighbors(self, cell: Cell) -> Iterator[tuple[Direction, Cell]]:
        """Yield (direction, neighbour) pairs reachable in one legal step."""
        for direction in _ORDER:
            if cell.walls[direction.index]:
                continue
            nxt = self.neighbor(cell, direction)
            if nxt is not None:
                yield direction, nxt

    def count_passages(self) -> int:
        """Number of interior wall pairs that have been removed."""
        passages = 0
        for cell in self:
            # Count each passage once, from its left or upper cell
            if cell.x + 1 < self.width and not cell.walls[Direction.RIGHT.index]:
                passages += 1
            if cell.y + 1 < self.height and not cell.walls[Direction.DOWN.index]:
                passages += 1
        return passages

    def walls_consistent(self) -> bool:
        """Check that every interior wall is either standing or open on both sides."""
        for cell in self:
            for direction in (Direction.RIGHT, Direction.DOWN):
                nxt = self.neighbor(cell, direction)
                if nxt is None:
                    continue
                if cell.walls[direction.index] != nxt.walls[direction.opposite.index]:
                    return False
        return True

    def snapshot_walls(self) -> WallSnapshot:
        """Copy every wall flag, row-major."""
        return [[list(cell.walls) for cell in row] for row in self.cells]

    def restore_walls(self, snapshot: WallSnapshot) -> None:
        """Write a snapshot produced by `snapshot_walls` back verbatim."""
        if len(snapshot) != self.height or any(
            len(row) != self.width for row in snapshot
        ):
            raise ValueError("Wall snapshot does not match grid dimensions")
        for row, saved_row in zip(self.cells, snapshot):
            for cell, walls in zip(row, saved_row):
                if len(walls) != 4:
                    raise ValueError(
                        f"Cell ({cell.x}, {cell.y}) needs 4 wall flags, got {len(walls)}"
                    )
                cell.walls[:] = [bool(w) for w in walls]
                cell.visited = False
