"""Application configuration using Pydantic settings."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root directory
BASE_DIR = Path(__file__).resolve().parent.parent

DIFFICULTY_SIZES = {
    "easy": 10,
    "medium": 20,
    "hard": 30,
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, ".env"),
        env_file_encoding="utf-8",
        env_prefix="MAZE_",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Shifting Maze"
    app_version: str = "1.0.0"
    debug: bool = False

    # Maze defaults
    default_width: int = 10
    default_height: int = 10
    cell_size: int = 20
    seed: Optional[int] = None

    # Timers (seconds)
    tick_interval_seconds: float = 1.0
    regeneration_interval_seconds: int = 180
    regeneration_max_attempts: int = 3
    ai_move_delay_seconds: float = 0.5

    # Hints
    partial_solution_steps: int = 10

    # Persistence
    save_backend: Literal["file", "redis"] = "file"
    save_path: str = "savegame.json"
    redis_url: str = "redis://localhost:6379/0"
    redis_save_key: str = "shifting_maze:savegame"

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:3000,http://localhost:8080,http://127.0.0.1:5500"

    # Rate limiting
    rate_limit_requests: int = 100  # requests per minute for game endpoints

    @field_validator("tick_interval_seconds", "regeneration_interval_seconds")
    @classmethod
    def validate_positive_interval(cls, v: float) -> float:
        """Timer intervals must be strictly positive."""
        if v <= 0:
            raise ValueError("Timer intervals must be greater than 0")
        return v

    @field_validator("ai_move_delay_seconds")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("AI move delay cannot be negative")
        return v

    @field_validator("cell_size")
    @classmethod
    def validate_cell_size(cls, v: int) -> int:
        """Cells smaller than 10px are bumped up to 10px."""
        return max(10, v)

    @field_validator("regeneration_max_attempts", "default_width", "default_height")
    @classmethod
    def validate_at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.debug:
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def rate_limit(self) -> str:
        """Rate limit string in slowapi format."""
        return f"{self.rate_limit_requests}/minute"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
