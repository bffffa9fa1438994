"""
Game state machine for Shifting Maze.

A game moves through NOT_STARTED -> RUNNING -> STOPPED. Its mode is fixed
at creation:

- Solo: one human player races the clock to the exit.
- Competitive: the human and an AI take strict turns, human first. The AI
  follows a path planned by the solver and re-planned after every maze
  regeneration. Whoever steps onto the exit first wins.

Example usage:
    game = MazeGame.new(10, 10, competitive=True, generator=MazeGenerator(rng))
    game.start()

    result = game.submit_move(Direction.RIGHT)   # human
    ai_result = game.ai_turn()                   # AI answers
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Mapping, Optional, Union

from .generator import MazeGenerator
from .grid import Direction, Grid, MazeError, Position
from .maze import Maze
from .regeneration import RegenerationEngine, RegenerationResult
from .solver import find_solution, partial_solution

logger = logging.getLogger(__name__)

MIN_CELL_SIZE = 10


class GameStateError(MazeError):
    """Raised when a game is driven through an invalid lifecycle step."""

    pass


class GameStatus(Enum):
    """Lifecycle states."""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


class Turn(Enum):
    """Turn owner in competitive mode."""
    HUMAN = "human"
    AI = "ai"


@dataclass
class Agent:
    """A human or AI player standing on a cell."""
    position: Position
    moves: int = 0


@dataclass
class SoloMode:
    """Single human player."""
    player: Agent

    name = "solo"

    def agents(self) -> list[Agent]:
        return [self.player]


@dataclass
class CompetitiveMode:
    """Human versus AI with alternating turns."""
    player: Agent
    ai: Agent
    turn: Turn = Turn.HUMAN
    planned_moves: deque = field(default_factory=deque)

    name = "competitive"

    def agents(self) -> list[Agent]:
        return [self.player, self.ai]


Mode = Union[SoloMode, CompetitiveMode]


@dataclass
class MoveResult:
    """Result of a move request."""
    status: Literal["moved", "blocked", "waited", "not_your_turn", "inactive", "completed"]
    agent: Literal["human", "ai"]
    position: Position
    moves: int
    direction: Optional[Direction] = None
    message: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.status in ("moved", "completed")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        result = {
            "status": self.status,
            "agent": self.agent,
            "position": self.position.to_dict(),
            "moves": self.moves,
        }
        if self.direction is not None:
            result["direction"] = self.direction.value
        if self.message:
            result["message"] = self.message
        return result


@dataclass
class GameOutcome:
    """Final report once someone reaches the exit."""
    winner: Literal["human", "ai"]
    human_moves: int
    ai_moves: int
    elapsed_seconds: int

    def to_dict(self) -> dict:
        return {
            "winner": self.winner,
            "human_moves": self.human_moves,
            "ai_moves": self.ai_moves,
            "elapsed_seconds": self.elapsed_seconds,
        }


def format_time(seconds: int) -> str:
    """Format seconds as MM:SS."""
    minutes, remaining = divmod(seconds, 60)
    return f"{minutes:02d}:{remaining:02d}"


class MazeGame:
    """
    One play session on one maze.

    All mutation goes through this class: moves, AI turns, clock ticks,
    regeneration and lifecycle changes. It is not thread-safe; callers
    serialize access (see `shifting_maze.services.game_service`).
    """

    def __init__(
        self,
        maze: Maze,
        mode: Mode,
        *,
        generator: Optional[MazeGenerator] = None,
        max_regeneration_attempts: int = 3,
        cell_size: int = 20,
    ):
        self.maze = maze
        self.mode = mode
        self.generator = generator or MazeGenerator()
        self.regeneration = RegenerationEngine(self.generator, max_regeneration_attempts)
        self.cell_size = max(MIN_CELL_SIZE, cell_size)
        self.status = GameStatus.NOT_STARTED
        self._clock = 0.0
        self.outcome: Optional[GameOutcome] = None

        for agent in mode.agents():
            maze.grid.cell_at(agent.position.x, agent.position.y)

    @classmethod
    def new(
        cls,
        width: int,
        height: int,
        *,
        competitive: bool = False,
        generator: Optional[MazeGenerator] = None,
        max_regeneration_attempts: int = 3,
        cell_size: int = 20,
    ) -> "MazeGame":
        """Generate a maze and place the agents on its entrance."""
        generator = generator or MazeGenerator()
        maze = Maze.generate(width, height, generator)
        player = Agent(position=maze.entrance)
        mode: Mode
        if competitive:
            mode = CompetitiveMode(player=player, ai=Agent(position=maze.entrance))
        else:
            mode = SoloMode(player=player)
        return cls(
            maze,
            mode,
            generator=generator,
            max_regeneration_attempts=max_regeneration_attempts,
            cell_size=cell_size,
        )

    # Lifecycle

    @property
    def is_running(self) -> bool:
        return self.status == GameStatus.RUNNING

    @property
    def is_competitive(self) -> bool:
        return isinstance(self.mode, CompetitiveMode)

    @property
    def player(self) -> Agent:
        return self.mode.player

    @property
    def ai(self) -> Optional[Agent]:
        return self.mode.ai if isinstance(self.mode, CompetitiveMode) else None

    @property
    def turn(self) -> Optional[Turn]:
        return self.mode.turn if isinstance(self.mode, CompetitiveMode) else None

    @property
    def planned_moves(self) -> list[Direction]:
        if isinstance(self.mode, CompetitiveMode):
            return list(self.mode.planned_moves)
        return []

    def start(self) -> None:
        """Begin play. Competitive games plan the AI route here."""
        if self.status == GameStatus.STOPPED:
            raise GameStateError("A stopped game cannot be restarted")
        if self.status == GameStatus.RUNNING:
            return
        self.status = GameStatus.RUNNING
        self._plan_ai()
        logger.info(
            "Game started: %s mode on %dx%d maze",
            self.mode.name, self.maze.width, self.maze.height,
        )

    def stop(self) -> None:
        """End the session; counters are frozen and the AI plan is dropped."""
        if self.status != GameStatus.STOPPED:
            logger.info("Game stopped after %s", format_time(self.elapsed_seconds))
        self.status = GameStatus.STOPPED
        if isinstance(self.mode, CompetitiveMode):
            self.mode.planned_moves.clear()

    @property
    def elapsed_seconds(self) -> int:
        """Whole seconds of play so far."""
        return int(self._clock)

    @elapsed_seconds.setter
    def elapsed_seconds(self, value: float) -> None:
        self._clock = float(value)

    def reset(self) -> None:
        """Force STOPPED and zero the clock. Counters and mode are untouched."""
        self.stop()
        self._clock = 0.0

    def tick(self, seconds: float = 1.0) -> None:
        """Advance the clock by one tick interval while running."""
        if self.is_running:
            self._clock += seconds

    # Moves

    def submit_move(self, direction: Direction) -> MoveResult:
        """
        Move the human player one cell.

        Illegal moves (wall, border, wrong turn, game not running) leave the
        state untouched.
        """
        player = self.mode.player
        if not self.is_running:
            return MoveResult(
                status="inactive",
                agent="human",
                position=player.position,
                moves=player.moves,
                message="Game is not running",
            )

        if isinstance(self.mode, CompetitiveMode) and self.mode.turn != Turn.HUMAN:
            return MoveResult(
                status="not_your_turn",
                agent="human",
                position=player.position,
                moves=player.moves,
                message="Waiting for the AI to move",
            )

        if not self.can_move(player.position, direction):
            return MoveResult(
                status="blocked",
                agent="human",
                position=player.position,
                moves=player.moves,
                direction=direction,
                message=f"Cannot move {direction.value} - wall blocking",
            )

        player.position = player.position.move(direction)
        player.moves += 1

        if player.position == self.maze.exit:
            self._finish("human")
            return MoveResult(
                status="completed",
                agent="human",
                position=player.position,
                moves=player.moves,
                direction=direction,
                message=self._win_message("human"),
            )

        if isinstance(self.mode, CompetitiveMode):
            self.mode.turn = Turn.AI

        return MoveResult(
            status="moved",
            agent="human",
            position=player.position,
            moves=player.moves,
            direction=direction,
        )

    def ai_turn(self) -> MoveResult:
        """
        Let the AI take its turn from the planned path.

        With an empty plan the AI waits; the turn goes back to the human
        either way.
        """
        if not isinstance(self.mode, CompetitiveMode):
            raise GameStateError("Solo games have no AI player")

        ai = self.mode.ai
        if not self.is_running:
            return MoveResult(
                status="inactive",
                agent="ai",
                position=ai.position,
                moves=ai.moves,
                message="Game is not running",
            )
        if self.mode.turn != Turn.AI:
            return MoveResult(
                status="not_your_turn",
                agent="ai",
                position=ai.position,
                moves=ai.moves,
            )

        self.mode.turn = Turn.HUMAN

        if not self.mode.planned_moves:
            return MoveResult(
                status="waited",
                agent="ai",
                position=ai.position,
                moves=ai.moves,
                message="AI has no planned moves",
            )

        direction = self.mode.planned_moves.popleft()
        if not self.can_move(ai.position, direction):
            logger.warning(
                "AI plan step %s from %s is blocked, replanning",
                direction.value, ai.position.to_dict(),
            )
            self._plan_ai()
            return MoveResult(
                status="blocked",
                agent="ai",
                position=ai.position,
                moves=ai.moves,
                direction=direction,
            )

        ai.position = ai.position.move(direction)
        ai.moves += 1

        if ai.position == self.maze.exit:
            self._finish("ai")
            return MoveResult(
                status="completed",
                agent="ai",
                position=ai.position,
                moves=ai.moves,
                direction=direction,
                message=self._win_message("ai"),
            )

        return MoveResult(
            status="moved",
            agent="ai",
            position=ai.position,
            moves=ai.moves,
            direction=direction,
        )

    def can_move(self, position: Position, direction: Direction) -> bool:
        return self.maze.grid.can_move(position.x, position.y, direction)

    def _finish(self, winner: Literal["human", "ai"]) -> None:
        ai = self.ai
        self.outcome = GameOutcome(
            winner=winner,
            human_moves=self.mode.player.moves,
            ai_moves=ai.moves if ai is not None else 0,
            elapsed_seconds=self.elapsed_seconds,
        )
        self.stop()
        logger.info("Game over: %s", self._win_message(winner))

    def _win_message(self, winner: str) -> str:
        elapsed = self.elapsed_seconds
        if not self.is_competitive:
            return f"Congratulations! You completed the maze in {elapsed} seconds."
        human_moves = self.mode.player.moves
        ai_moves = self.mode.ai.moves
        if winner == "human":
            return (
                f"Game over! You win in {human_moves} moves! "
                f"AI moves: {ai_moves}. Time elapsed: {elapsed} seconds"
            )
        return (
            f"Game over! AI wins in {ai_moves} moves! "
            f"Your moves: {human_moves}. Time elapsed: {elapsed} seconds"
        )

    # Solutions

    def request_full_solution(self) -> list[Direction]:
        """Path from the human player's cell to the exit."""
        return find_solution(self.maze.grid, self.mode.player.position, self.maze.exit)

    def request_partial_solution(self, steps: int) -> list[Direction]:
        """First `steps` moves of the full solution."""
        return partial_solution(
            self.maze.grid, self.mode.player.position, self.maze.exit, steps
        )

    def _plan_ai(self) -> None:
        if not isinstance(self.mode, CompetitiveMode):
            return
        self.mode.planned_moves = deque(
            find_solution(self.maze.grid, self.mode.ai.position, self.maze.exit)
        )

    # Regeneration hooks

    def regenerate(self) -> RegenerationResult:
        """Re-carve the maze, keeping every agent connected to the exit."""
        return self.regeneration.regenerate(self)

    def agent_positions(self) -> list[Position]:
        return [agent.position for agent in self.mode.agents()]

    def after_regeneration(self) -> None:
        self._plan_ai()

    def seconds_until_regeneration(self, interval: int) -> int:
        """Seconds left until the next scheduled regeneration."""
        return interval - self.elapsed_seconds % interval

    # Persistence

    def serialize_state(self, regeneration_interval: int) -> dict[str, Any]:
        """
        Capture everything needed to resume this game.

        The AI plan is not stored; it is recomputed on restore.
        """
        ai = self.ai
        return {
            "width": self.maze.width,
            "height": self.maze.height,
            "cell_size": self.cell_size,
            "walls": self.maze.grid.snapshot_walls(),
            "player": self.mode.player.position.to_dict(),
            "ai_player": ai.position.to_dict() if ai is not None else None,
            "entrance": self.maze.entrance.to_dict(),
            "exit": self.maze.exit.to_dict(),
            "human_moves": self.mode.player.moves,
            "ai_moves": ai.moves if ai is not None else 0,
            "elapsed_seconds": self.elapsed_seconds,
            "competitive": self.is_competitive,
            "human_turn": self.turn != Turn.AI,
            "seconds_until_regeneration": self.seconds_until_regeneration(
                regeneration_interval
            ),
        }

    @classmethod
    def restore_state(
        cls,
        state: Mapping[str, Any],
        *,
        generator: Optional[MazeGenerator] = None,
        max_regeneration_attempts: int = 3,
    ) -> "MazeGame":
        """
        Rebuild a running game from `serialize_state` output.

        Raises:
            GameStateError: If the state is internally inconsistent.
        """
        competitive = bool(state.get("competitive", False))
        if competitive and state.get("ai_player") is None:
            raise GameStateError("Invalid saved game: competitive save has no AI player")

        try:
            grid = Grid.create(int(state["width"]), int(state["height"]))
            grid.restore_walls(state["walls"])
            maze = Maze(grid, _position(state["entrance"]), _position(state["exit"]))
            player = Agent(_position(state["player"]), int(state["human_moves"]))
            mode: Mode
            if competitive:
                mode = CompetitiveMode(
                    player=player,
                    ai=Agent(_position(state["ai_player"]), int(state.get("ai_moves", 0))),
                    turn=Turn.HUMAN if state.get("human_turn", True) else Turn.AI,
                )
            else:
                mode = SoloMode(player=player)
        except (KeyError, TypeError, ValueError, MazeError) as exc:
            raise GameStateError(f"Invalid saved game: {exc}") from exc

        if not grid.walls_consistent():
            raise GameStateError("Invalid saved game: walls are not paired")

        try:
            game = cls(
                maze,
                mode,
                generator=generator,
                max_regeneration_attempts=max_regeneration_attempts,
                cell_size=int(state.get("cell_size", 20)),
            )
        except MazeError as exc:
            raise GameStateError(f"Invalid saved game: {exc}") from exc

        game.elapsed_seconds = int(state.get("elapsed_seconds", 0))
        game.start()
        return game


def _position(data: Mapping[str, Any]) -> Position:
    return Position(int(data["x"]), int(data["y"]))
