"""Pytest configuration and fixtures."""

import random
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from shifting_maze.api.deps import limiter
from shifting_maze.config import Settings
from shifting_maze.core import Direction, Grid, Maze, MazeGenerator, Position
from shifting_maze.main import app
from shifting_maze.services.game_service import GameService, get_game_service


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings with no pacing delay, slow timers and a temp save file."""
    return Settings(
        save_backend="file",
        save_path=str(tmp_path / "savegame.json"),
        ai_move_delay_seconds=0,
        tick_interval_seconds=3600,
        regeneration_interval_seconds=180,
        seed=42,
    )


@pytest_asyncio.fixture(scope="function")
async def game_service(test_settings) -> AsyncGenerator[GameService, None]:
    """A fresh game service that is shut down after the test."""
    service = GameService(settings=test_settings)
    yield service
    await service.shutdown()


@pytest_asyncio.fixture(scope="function")
async def client(game_service) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client bound to the test game service."""
    app.dependency_overrides[get_game_service] = lambda: game_service
    limiter.enabled = False

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_generator() -> MazeGenerator:
    """Generator with a fixed seed."""
    return MazeGenerator(random.Random(1234))


@pytest.fixture
def make_corridor() -> Callable[[int], Maze]:
    """Build a 1-row corridor maze, entrance on the left, exit on the right.

    Every interior wall along the row is open, so the only path is
    RIGHT * (length - 1).
    """

    def _make(length: int) -> Maze:
        grid = Grid.create(length, 1)
        for x in range(length - 1):
            grid.remove_wall_between(grid.cell_at(x, 0), grid.cell_at(x + 1, 0))
        grid.open_boundary(0, 0, Direction.LEFT)
        grid.open_boundary(length - 1, 0, Direction.RIGHT)
        return Maze(grid, Position(0, 0), Position(length - 1, 0))

    return _make
