# Core module
from .grid import (
    Cell,
    Direction,
    Grid,
    MazeError,
    NotAdjacentError,
    OutOfBoundsError,
    Position,
    Side,
)
from .generator import MazeGenerationError, MazeGenerator, Openings
from .maze import Maze, MazeSnapshot
from .solver import IllegalMoveError, find_solution, partial_solution, replay
from .validator import is_reachable
from .regeneration import RegenerationEngine, RegenerationResult
from .game import (
    Agent,
    CompetitiveMode,
    GameOutcome,
    GameStateError,
    GameStatus,
    MazeGame,
    MoveResult,
    SoloMode,
    Turn,
    format_time,
)
from .render import DrawCommand, MazeRenderer, visualize

__all__ = [
    "Cell",
    "Direction",
    "Grid",
    "MazeError",
    "NotAdjacentError",
    "OutOfBoundsError",
    "Position",
    "Side",
    "MazeGenerationError",
    "MazeGenerator",
    "Openings",
    "Maze",
    "MazeSnapshot",
    "IllegalMoveError",
    "find_solution",
    "partial_solution",
    "replay",
    "is_reachable",
    "RegenerationEngine",
    "RegenerationResult",
    "Agent",
    "CompetitiveMode",
    "GameOutcome",
    "GameStateError",
    "GameStatus",
    "MazeGame",
    "MoveResult",
    "SoloMode",
    "Turn",
    "format_time",
    "DrawCommand",
    "MazeRenderer",
    "visualize",
]
