"""Periodic clock and regeneration triggers for a running game."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class GameEventType(Enum):
    """Kinds of timer events."""
    TICK = "tick"
    REGENERATE = "regenerate"


@dataclass(frozen=True)
class GameEvent:
    """A timer firing, tagged with the game it was scheduled for."""
    type: GameEventType
    game_id: int


EventHandler = Callable[[GameEvent], Awaitable[None]]


class EventQueue:
    """In-memory queue of pending timer events."""

    def __init__(self):
        self._queue: asyncio.Queue[GameEvent] = asyncio.Queue()

    async def put(self, event: GameEvent) -> None:
        """Add event to queue."""
        await self._queue.put(event)

    async def get(self) -> GameEvent:
        """Get next event from queue."""
        return await self._queue.get()

    def done(self) -> None:
        self._queue.task_done()

    def drain(self) -> int:
        """Drop every pending event, returning how many were dropped."""
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return dropped
            self._queue.task_done()
            dropped += 1

    @property
    def pending_count(self) -> int:
        """Number of pending events."""
        return self._queue.qsize()


class GameScheduler:
    """
    Post TICK and REGENERATE events for one game at a time.

    Two trigger tasks sleep and enqueue events; a single worker task hands
    them to the handler, which applies them under the game lock. `stop`
    cancels all three tasks and drops anything still queued, so nothing
    fires for a game once it has been stopped.
    """

    def __init__(
        self,
        handler: EventHandler,
        tick_interval: float,
        regeneration_interval: float,
    ):
        self.handler = handler
        self.tick_interval = tick_interval
        self.regeneration_interval = regeneration_interval
        self.queue = EventQueue()
        self._tasks: list[asyncio.Task] = []
        self._game_id: Optional[int] = None

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def game_id(self) -> Optional[int]:
        return self._game_id

    def start(self, game_id: int, regeneration_delay: Optional[float] = None) -> None:
        """
        Start the triggers for a game.

        Args:
            game_id: Identifier stamped on every event.
            regeneration_delay: Seconds before the first regeneration;
                defaults to the regular interval.
        """
        if self._tasks:
            raise RuntimeError("Scheduler already running; stop it first")
        self._game_id = game_id
        first_regeneration = (
            self.regeneration_interval if regeneration_delay is None else regeneration_delay
        )
        self._tasks = [
            asyncio.create_task(
                self._trigger(GameEventType.TICK, self.tick_interval, self.tick_interval),
                name=f"game-{game_id}-tick",
            ),
            asyncio.create_task(
                self._trigger(
                    GameEventType.REGENERATE, first_regeneration, self.regeneration_interval
                ),
                name=f"game-{game_id}-regenerate",
            ),
            asyncio.create_task(self._worker(), name=f"game-{game_id}-events"),
        ]
        logger.info(
            f"Scheduler started for game {game_id} "
            f"(tick {self.tick_interval}s, regeneration in {first_regeneration}s)"
        )

    async def stop(self) -> None:
        """Cancel all triggers and discard queued events."""
        tasks, self._tasks = self._tasks, []
        current = asyncio.current_task()
        for task in tasks:
            task.cancel()
        for task in tasks:
            if task is current:
                continue
            try:
                await task
            except asyncio.CancelledError:
                pass
        dropped = self.queue.drain()
        if tasks:
            logger.info(f"Scheduler stopped for game {self._game_id} ({dropped} event(s) dropped)")
        self._game_id = None

    async def _trigger(self, event_type: GameEventType, first_delay: float, interval: float) -> None:
        game_id = self._game_id
        await asyncio.sleep(first_delay)
        while True:
            await self.queue.put(GameEvent(event_type, game_id))
            await asyncio.sleep(interval)

    async def _worker(self) -> None:
        while True:
            event = await self.queue.get()
            try:
                await self.handler(event)
            except asyncio.CancelledError:
                raise
            except Exception:
                # Log error but keep serving timer events
                logger.exception(f"Error handling {event.type.value} event")
            finally:
                self.queue.done()
