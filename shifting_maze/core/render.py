"""
Draw-command emitter for Shifting Maze.

The engine never draws anything itself. `MazeRenderer` turns the current
game into an ordered list of turtle-style primitives that a rendering
client replays:

    reset, move_to(x, y), line_to(x, y), color(rgb), line_width(w),
    pen_up, pen_down, text(x, y, text)

Coordinates are pixels, origin at the top-left corner of the maze.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Sequence

from .game import MazeGame, format_time
from .grid import Direction, Position

PLAYER_COLOR = 0x0000FF
AI_COLOR = 0xFF0000
WALL_COLOR = 0x000000
ENTRANCE_COLOR = 0x00FF00
EXIT_COLOR = 0xFF0000
HUD_TEXT_COLOR = 0x000000
PATH_COLOR = 0x00FF00

WALL_WIDTH = 2
HUD_OFFSET = 30

DrawOp = Literal[
    "reset", "move_to", "line_to", "color", "line_width", "pen_up", "pen_down", "text"
]


@dataclass(frozen=True)
class DrawCommand:
    """A single drawing primitive."""
    op: DrawOp
    args: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"op": self.op, **self.args}


class MazeRenderer:
    """Translate a game into draw commands."""

    def __init__(self, game: MazeGame):
        self.game = game
        self.cell_size = game.cell_size
        self._commands: list[DrawCommand] = []

    def render(self) -> list[DrawCommand]:
        """Full frame: walls, openings, agents and HUD."""
        self._commands = []
        self._emit("reset")
        self._emit("pen_down")
        self._emit("color", rgb=WALL_COLOR)
        self._emit("line_width", width=WALL_WIDTH)
        self._draw_walls()
        self._draw_openings()
        self._draw_agents()
        self._draw_hud()
        return self._commands

    def render_path(
        self, moves: Sequence[Direction], start: Optional[Position] = None
    ) -> list[DrawCommand]:
        """Full frame with a solution path overlaid from start."""
        self.render()
        position = start or self.game.player.position
        self._emit("color", rgb=PATH_COLOR)
        self._emit("pen_down")
        self._emit("move_to", **self._center(position))
        for direction in moves:
            position = position.move(direction)
            self._emit("line_to", **self._center(position))
        self._emit("pen_up")
        return self._commands

    def _emit(self, op: DrawOp, **args: Any) -> None:
        self._commands.append(DrawCommand(op, args))

    def _line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._emit("move_to", x=x1, y=y1)
        self._emit("line_to", x=x2, y=y2)

    def _center(self, position: Position) -> dict[str, float]:
        half = self.cell_size / 2.0
        return {
            "x": position.x * self.cell_size + half,
            "y": position.y * self.cell_size + half,
        }

    def _draw_walls(self) -> None:
        grid = self.game.maze.grid
        size = self.cell_size
        for cell in grid:
            left = cell.x * size
            top = cell.y * size
            # Interior walls are shared, so only the first cell of a pair draws them
            if cell.has_wall(Direction.UP):
                self._line(left, top, left + size, top)
            if cell.has_wall(Direction.LEFT):
                self._line(left, top, left, top + size)
            if cell.x == grid.width - 1 and cell.has_wall(Direction.RIGHT):
                self._line(left + size, top, left + size, top + size)
            if cell.y == grid.height - 1 and cell.has_wall(Direction.DOWN):
                self._line(left, top + size, left + size, top + size)

    def _draw_openings(self) -> None:
        maze = self.game.maze
        self._emit("color", rgb=ENTRANCE_COLOR)
        self._draw_opening(maze.entrance, maze.opening_directions(maze.entrance)[:1])
        self._emit("color", rgb=EXIT_COLOR)
        self._draw_opening(maze.exit, maze.opening_directions(maze.exit)[-1:])

    def _draw_opening(self, position: Position, directions: Sequence[Direction]) -> None:
        size = self.cell_size
        left = position.x * size
        top = position.y * size
        for direction in directions:
            if direction == Direction.UP:
                self._line(left, top, left + size, top)
            elif direction == Direction.RIGHT:
                self._line(left + size, top, left + size, top + size)
            elif direction == Direction.DOWN:
                self._line(left, top + size, left + size, top + size)
            else:
                self._line(left, top, left, top + size)

    def _draw_agents(self) -> None:
        radius = min(self.cell_size, 20) / 3.0
        self._emit("color", rgb=PLAYER_COLOR)
        self._draw_circle(self.game.player.position, radius)
        ai = self.game.ai
        if ai is not None:
            self._emit("color", rgb=AI_COLOR)
            self._draw_circle(ai.position, radius)

    def _draw_circle(self, position: Position, radius: float) -> None:
        center = self._center(position)
        cx, cy = center["x"], center["y"]
        self._emit("move_to", x=cx + radius, y=cy)
        self._emit("pen_down")
        for degrees in range(0, 361, 10):
            radians = math.radians(degrees)
            self._emit(
                "line_to",
                x=round(cx + radius * math.cos(radians), 3),
                y=round(cy + radius * math.sin(radians), 3),
            )
        self._emit("pen_up")

    def _draw_hud(self) -> None:
        game = self.game
        baseline = game.maze.height * self.cell_size + HUD_OFFSET
        self._emit("color", rgb=HUD_TEXT_COLOR)
        self._emit("text", x=0, y=baseline, text=format_time(game.elapsed_seconds))
        ai = game.ai
        if ai is not None:
            moves = f"Moves: {game.player.moves}/{ai.moves}"
        else:
            moves = f"Moves: {game.player.moves}"
        self._emit("text", x=5 * self.cell_size, y=baseline, text=moves)


def visualize(game: MazeGame) -> str:
    """
    ASCII picture of the maze.

    Markers: @ player, A AI, S entrance, E exit.
    """
    grid = game.maze.grid
    ai = game.ai
    markers: dict[Position, str] = {
        game.maze.entrance: "S",
        game.maze.exit: "E",
    }
    if ai is not None:
        markers[ai.position] = "A"
    markers[game.player.position] = "@"

    lines = []
    for row in grid.cells:
        top = "+"
        middle = " " if not row[0].has_wall(Direction.LEFT) else "|"
        for cell in row:
            top += ("---" if cell.has_wall(Direction.UP) else "   ") + "+"
            middle += f" {markers.get(cell.position, ' ')} "
            middle += "|" if cell.has_wall(Direction.RIGHT) else " "
        lines.append(top)
        lines.append(middle)
    bottom = "+"
    for cell in grid.cells[-1]:
        bottom += ("---" if cell.has_wall(Direction.DOWN) else "   ") + "+"
    lines.append(bottom)
    return "\n".join(lines)
