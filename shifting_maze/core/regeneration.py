"""
Periodic maze regeneration with reachability guard and rollback.

A regeneration re-carves the whole layout (new spanning tree, new entrance
and exit) while every agent stays on its cell. An attempt is accepted only
if every agent can reach the new exit and none is standing on it; if no
attempt passes, the previous layout is restored verbatim and kept.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Protocol, Sequence

from .generator import MazeGenerator
from .grid import Position
from .maze import Maze
from .validator import all_reachable

logger = logging.getLogger(__name__)


class RegenerationTarget(Protocol):
    """What the engine needs from a running game."""

    maze: Maze

    @property
    def is_running(self) -> bool: ...

    def agent_positions(self) -> Sequence[Position]: ...

    def after_regeneration(self) -> None: ...


@dataclass
class RegenerationResult:
    """Outcome of a regeneration request."""
    status: Literal["regenerated", "rolled_back", "skipped"]
    attempts: int = 0
    message: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        result = {"status": self.status, "attempts": self.attempts}
        if self.message:
            result["message"] = self.message
        return result


RegenerationListener = Callable[[RegenerationResult], None]


class RegenerationEngine:
    """Re-carve a maze in place without stranding any agent."""

    def __init__(self, generator: MazeGenerator, max_attempts: int = 3):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.generator = generator
        self.max_attempts = max_attempts
        self._in_progress = False
        self._listeners: list[RegenerationListener] = []

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def add_listener(self, listener: RegenerationListener) -> None:
        """Register a callback fired after every non-skipped regeneration."""
        self._listeners.append(listener)

    def regenerate(self, target: RegenerationTarget) -> RegenerationResult:
        """
        Regenerate the target's maze.

        Returns:
            RegenerationResult. "skipped" when a regeneration is already
            running or the session is not running.
        """
        if self._in_progress:
            return RegenerationResult(status="skipped", message="Regeneration already in progress")
        if not target.is_running:
            return RegenerationResult(status="skipped", message="Session is not running")

        self._in_progress = True
        try:
            result = self._regenerate(target)
        finally:
            self._in_progress = False

        for listener in self._listeners:
            listener(result)
        return result

    def _regenerate(self, target: RegenerationTarget) -> RegenerationResult:
        maze = target.maze
        agents = [Position(p.x, p.y) for p in target.agent_positions()]
        snapshot = maze.snapshot()

        for attempt in range(1, self.max_attempts + 1):
            maze.regenerate(self.generator)
            if self._acceptable(maze, agents):
                target.after_regeneration()
                logger.info(
                    "Maze regenerated on attempt %d, new exit at %s",
                    attempt, maze.exit.to_dict(),
                )
                return RegenerationResult(
                    status="regenerated",
                    attempts=attempt,
                    message="Maze regenerated! Keep going!",
                )
            logger.warning(
                "Regeneration attempt %d/%d rejected", attempt, self.max_attempts
            )

        maze.restore(snapshot)
        target.after_regeneration()
        logger.error(
            "Regeneration failed after %d attempts, previous layout restored",
            self.max_attempts,
        )
        return RegenerationResult(
            status="rolled_back",
            attempts=self.max_attempts,
            message="Maze layout kept",
        )

    @staticmethod
    def _acceptable(maze: Maze, agents: Sequence[Position]) -> bool:
        """Every agent must reach the new exit without already standing on it."""
        if maze.exit in agents:
            logger.debug("New exit %s lies under an agent", maze.exit.to_dict())
            return False
        return all_reachable(maze.grid, agents, maze.exit)
