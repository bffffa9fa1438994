"""Reachability checks used to guard maze regeneration."""

from .grid import Grid, Position


def is_reachable(grid: Grid, start: Position, exit_: Position) -> bool:
    """Return True if the exit can be reached from start through open passages."""
    grid.cell_at(exit_.x, exit_.y)
    start_cell = grid.cell_at(start.x, start.y)

    visited = {start}
    stack = [start_cell]
    while stack:
        current = stack.pop()
        if current.position == exit_:
            return True
        for _, nxt in grid.open_neighbors(current):
            if nxt.position not in visited:
                visited.add(nxt.position)
                stack.append(nxt)
    return False


def all_reachable(grid: Grid, starts, exit_: Position) -> bool:
    """Check every start position; an empty collection trivially passes."""
    return all(is_reachable(grid, start, exit_) for start in starts)


def reachable_count(grid: Grid, start: Position) -> int:
    """Number of cells connected to start, start included."""
    start_cell = grid.cell_at(start.x, start.y)
    visited = {start}
    stack = [start_cell]
    while stack:
        current = stack.pop()
        for _, nxt in grid.open_neighbors(current):
            if nxt.position not in visited:
                visited.add(nxt.position)
                stack.append(nxt)
    return len(visited)
