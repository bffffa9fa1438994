"""Game service: owns the active game, its lock, timers and save store."""

import asyncio
import logging
import random
from typing import Optional

from shifting_maze.config import DIFFICULTY_SIZES, Settings, get_settings
from shifting_maze.core import (
    Direction,
    GameStateError,
    MazeGame,
    MazeGenerator,
    MoveResult,
    RegenerationResult,
)
from shifting_maze.schemas.game import SavedGame
from shifting_maze.services.persistence_service import (
    CorruptSaveError,
    SaveStore,
    get_save_store,
)
from shifting_maze.services.scheduler import GameEvent, GameEventType, GameScheduler

logger = logging.getLogger(__name__)


class NoActiveGameError(Exception):
    """Exception raised when a command needs a game and none exists."""

    pass


class GameService:
    """
    Serialize every access to the active game.

    Commands from the HTTP layer and timer events from the scheduler all
    take `self._lock` before touching the game, so moves, clock ticks and
    regenerations never interleave.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[SaveStore] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store or get_save_store(self.settings)
        self.scheduler = GameScheduler(
            self._handle_event,
            tick_interval=self.settings.tick_interval_seconds,
            regeneration_interval=self.settings.regeneration_interval_seconds,
        )
        self._game: Optional[MazeGame] = None
        self._game_id = 0
        self._lock = asyncio.Lock()

    @property
    def game(self) -> MazeGame:
        """The active game, finished or not."""
        if self._game is None:
            raise NoActiveGameError("No game has been started")
        return self._game

    @property
    def has_game(self) -> bool:
        return self._game is not None

    def _generator(self, seed: Optional[int]) -> MazeGenerator:
        if seed is None:
            seed = self.settings.seed
        return MazeGenerator(random.Random(seed))

    async def new_game(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        *,
        difficulty: Optional[str] = None,
        competitive: bool = False,
        seed: Optional[int] = None,
    ) -> MazeGame:
        """Stop any current game and start a fresh one."""
        if difficulty is not None:
            size = DIFFICULTY_SIZES[difficulty]
            width = width or size
            height = height or size
        width = width or self.settings.default_width
        height = height or self.settings.default_height

        async with self._lock:
            await self._shutdown_current()
            game = MazeGame.new(
                width,
                height,
                competitive=competitive,
                generator=self._generator(seed),
                max_regeneration_attempts=self.settings.regeneration_max_attempts,
                cell_size=self.settings.cell_size,
            )
            game.start()
            self._activate(game)
            return game

    async def submit_move(self, direction: Direction) -> tuple[MoveResult, Optional[MoveResult]]:
        """
        Play one human move, followed by the AI reply in competitive mode.

        Returns:
            Tuple of (human_result, ai_result). ai_result is None in solo
            games or when the human move was not accepted.
        """
        async with self._lock:
            game = self.game
            human = game.submit_move(direction)
            ai = None
            if game.is_competitive and human.status == "moved":
                ai = game.ai_turn()
            if not game.is_running:
                await self.scheduler.stop()

        if ai is not None and game.is_running and self.settings.ai_move_delay_seconds > 0:
            # Pacing only; the lock is already released
            await asyncio.sleep(self.settings.ai_move_delay_seconds)
        return human, ai

    async def request_full_solution(self) -> list[Direction]:
        async with self._lock:
            return self.game.request_full_solution()

    async def request_partial_solution(self, steps: Optional[int] = None) -> list[Direction]:
        if steps is None:
            steps = self.settings.partial_solution_steps
        async with self._lock:
            return self.game.request_partial_solution(steps)

    async def regenerate(self) -> RegenerationResult:
        """Regenerate now, with the same guard the timer uses."""
        async with self._lock:
            return self.game.regenerate()

    async def stop(self) -> MazeGame:
        """Stop the active game and its timers."""
        async with self._lock:
            game = self.game
            game.stop()
            await self.scheduler.stop()
            return game

    async def reset(self) -> MazeGame:
        """Stop the active game and zero its clock."""
        async with self._lock:
            game = self.game
            game.reset()
            await self.scheduler.stop()
            return game

    async def save(self) -> SavedGame:
        """Persist the running game."""
        async with self._lock:
            game = self.game
            if not game.is_running:
                raise GameStateError("Only a running game can be saved")
            saved = SavedGame.model_validate(
                game.serialize_state(self.settings.regeneration_interval_seconds)
            )
            await self.store.save(saved)
            return saved

    async def load(self) -> MazeGame:
        """
        Replace the active game with the saved one.

        Nothing changes when the save is missing or corrupt.
        """
        async with self._lock:
            saved = await self.store.load()
            try:
                game = MazeGame.restore_state(
                    saved.model_dump(),
                    generator=self._generator(None),
                    max_regeneration_attempts=self.settings.regeneration_max_attempts,
                )
            except GameStateError as e:
                raise CorruptSaveError(str(e)) from e

            await self._shutdown_current()
            if game.is_competitive and not saved.human_turn:
                game.ai_turn()
            self._activate(game, regeneration_delay=saved.seconds_until_regeneration)
            logger.info(
                f"Restored {game.mode.name} game at {game.elapsed_seconds}s, "
                f"next regeneration in {saved.seconds_until_regeneration}s"
            )
            return game

    async def shutdown(self) -> None:
        """Stop timers on application shutdown."""
        async with self._lock:
            await self._shutdown_current()

    def seconds_until_regeneration(self) -> int:
        return self.game.seconds_until_regeneration(
            self.settings.regeneration_interval_seconds
        )

    def _activate(self, game: MazeGame, regeneration_delay: Optional[float] = None) -> None:
        self._game = game
        self._game_id += 1
        if game.is_running:
            self.scheduler.start(self._game_id, regeneration_delay=regeneration_delay)

    async def _shutdown_current(self) -> None:
        await self.scheduler.stop()
        if self._game is not None and self._game.is_running:
            self._game.stop()

    async def _handle_event(self, event: GameEvent) -> None:
        async with self._lock:
            game = self._game
            if game is None or event.game_id != self._game_id or not game.is_running:
                return
            if event.type == GameEventType.TICK:
                game.tick(self.settings.tick_interval_seconds)
            elif event.type == GameEventType.REGENERATE:
                result = game.regenerate()
                logger.info(f"Scheduled regeneration: {result.status}")


# Singleton instance
_game_service: Optional[GameService] = None


def get_game_service() -> GameService:
    """Get singleton game service."""
    global _game_service
    if _game_service is None:
        _game_service = GameService()
    return _game_service
