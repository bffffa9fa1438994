"""Depth-first solution search over open passages."""

import logging
from typing import Iterable, Sequence

from .grid import Direction, Grid, MazeError, Position

logger = logging.getLogger(__name__)


class IllegalMoveError(MazeError):
    """Raised when a replayed path walks into a wall."""

    pass


def find_solution(grid: Grid, start: Position, exit_: Position) -> list[Direction]:
    """
    Find a path from start to the exit with backtracking DFS.

    Directions are tried in Up, Right, Down, Left order and the first path
    reaching the exit is returned (on a perfect maze it is the only simple
    path). A cell leaves the visited set again when the search backtracks
    out of it.

    Args:
        grid: Maze to search.
        start: Starting cell.
        exit_: Target cell.

    Returns:
        List of moves, empty when start is the exit or the exit is unreachable.
    """
    grid.cell_at(start.x, start.y)
    grid.cell_at(exit_.x, exit_.y)

    directions = Direction.ordered()
    visited: set[Position] = {start}
    path: list[Direction] = []
    # Each frame is [position, index of the next direction to try]
    stack: list[list] = [[start, 0]]

    while stack:
        frame = stack[-1]
        position, tried = frame
        if position == exit_:
            return list(path)

        if tried == len(directions):
            stack.pop()
            visited.discard(position)
            if path:
                path.pop()
            continue

        frame[1] = tried + 1
        direction = directions[tried]
        if not grid.can_move(position.x, position.y, direction):
            continue
        nxt = position.move(direction)
        if nxt in visited:
            continue
        visited.add(nxt)
        path.append(direction)
        stack.append([nxt, 0])

    logger.warning(
        "No path from %s to exit %s on %dx%d grid",
        start.to_dict(), exit_.to_dict(), grid.width, grid.height,
    )
    return []


def partial_solution(
    grid: Grid, start: Position, exit_: Position, steps: int
) -> list[Direction]:
    """Return the first `min(steps, len(full))` moves of the full solution."""
    if steps < 0:
        raise ValueError(f"steps must be non-negative, got {steps}")
    return find_solution(grid, start, exit_)[:steps]


def replay(grid: Grid, start: Position, moves: Iterable[Direction]) -> Position:
    """Walk a sequence of moves and return where it ends."""
    position = start
    for step, direction in enumerate(moves):
        if not grid.can_move(position.x, position.y, direction):
            raise IllegalMoveError(
                f"Step {step} ({direction.value}) from {position.to_dict()} is blocked"
            )
        position = position.move(direction)
    return position


def path_to_keys(moves: Sequence[Direction]) -> str:
    """Render moves as a compact WASD string."""
    return "".join(direction.key for direction in moves)
