"""Save-game storage backends (JSON file or Redis)."""

import logging
from pathlib import Path
from typing import Optional

import redis.asyncio as redis
from pydantic import ValidationError

from shifting_maze.config import Settings, get_settings
from shifting_maze.db.redis import get_redis
from shifting_maze.schemas.game import SavedGame

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Exception raised when a save cannot be written or read."""

    pass


class SaveNotFoundError(PersistenceError):
    """Exception raised when there is no saved game to load."""

    pass


class CorruptSaveError(PersistenceError):
    """Exception raised when saved data cannot be parsed."""

    pass


def parse_saved_game(raw: str | bytes) -> SavedGame:
    """Parse and validate a serialized save."""
    try:
        return SavedGame.model_validate_json(raw)
    except ValidationError as e:
        raise CorruptSaveError(f"Saved game is corrupt: {e.error_count()} error(s)") from e


class SaveStore:
    """Base class for save-game backends."""

    async def save(self, game: SavedGame) -> None:
        raise NotImplementedError

    async def load(self) -> SavedGame:
        raise NotImplementedError


class FileSaveStore(SaveStore):
    """Store the save as a JSON file on disk."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    async def save(self, game: SavedGame) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(game.model_dump_json(), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to write save file {self.path}: {e}") from e
        logger.info(f"Game saved to {self.path}")

    async def load(self) -> SavedGame:
        if not self.path.exists():
            raise SaveNotFoundError(f"No saved game at {self.path}")
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to read save file {self.path}: {e}") from e
        saved = parse_saved_game(raw)
        logger.info(f"Game loaded from {self.path}")
        return saved


class RedisSaveStore(SaveStore):
    """Store the save under a single Redis key."""

    def __init__(self, key: str):
        self.key = key
        self._redis: Optional[redis.Redis] = None

    async def _get_redis(self) -> redis.Redis:
        """Get Redis client."""
        if self._redis is None:
            self._redis = await get_redis()
        return self._redis

    async def save(self, game: SavedGame) -> None:
        r = await self._get_redis()
        try:
            await r.set(self.key, game.model_dump_json())
        except redis.RedisError as e:
            raise PersistenceError(f"Failed to save game to Redis: {e}") from e
        logger.info(f"Game saved to Redis key {self.key}")

    async def load(self) -> SavedGame:
        r = await self._get_redis()
        try:
            raw = await r.get(self.key)
        except redis.RedisError as e:
            raise PersistenceError(f"Failed to load game from Redis: {e}") from e
        if raw is None:
            raise SaveNotFoundError(f"No saved game under Redis key {self.key}")
        saved = parse_saved_game(raw)
        logger.info(f"Game loaded from Redis key {self.key}")
        return saved


def get_save_store(settings: Optional[Settings] = None) -> SaveStore:
    """Build the configured save backend."""
    settings = settings or get_settings()
    if settings.save_backend == "redis":
        return RedisSaveStore(settings.redis_save_key)
    return FileSaveStore(settings.save_path)
