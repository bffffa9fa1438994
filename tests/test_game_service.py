"""Tests for the game service."""

import json

import pytest

from shifting_maze.core import Direction, GameStateError, GameStatus, Turn
from shifting_maze.services.game_service import GameService, NoActiveGameError
from shifting_maze.services.persistence_service import (
    CorruptSaveError,
    SaveNotFoundError,
)
from shifting_maze.services.scheduler import GameEvent, GameEventType


class TestNewGame:
    """Tests for starting games."""

    @pytest.mark.asyncio
    async def test_no_game_yet(self, game_service):
        """Commands before the first game fail clearly."""
        assert not game_service.has_game
        with pytest.raises(NoActiveGameError):
            await game_service.submit_move(Direction.UP)

    @pytest.mark.asyncio
    async def test_new_game_starts_timers(self, game_service):
        """A new game is running with its scheduler started."""
        game = await game_service.new_game(8, 6)

        assert game.is_running
        assert game.maze.width == 8
        assert game.maze.height == 6
        assert game_service.scheduler.running

    @pytest.mark.asyncio
    async def test_difficulty_sets_size(self, game_service):
        """Difficulty presets pick the maze size."""
        game = await game_service.new_game(difficulty="medium")
        assert (game.maze.width, game.maze.height) == (20, 20)

    @pytest.mark.asyncio
    async def test_default_size(self, game_service):
        """Without a size the configured default is used."""
        game = await game_service.new_game()
        assert (game.maze.width, game.maze.height) == (10, 10)

    @pytest.mark.asyncio
    async def test_new_game_replaces_old(self, game_service):
        """Starting again stops the previous game."""
        first = await game_service.new_game(5, 5)
        second = await game_service.new_game(5, 5)

        assert first.status == GameStatus.STOPPED
        assert second.is_running
        assert game_service.game is second

    @pytest.mark.asyncio
    async def test_seed_is_deterministic(self, game_service):
        """The same seed produces the same maze."""
        a = await game_service.new_game(9, 9, seed=5)
        b = await game_service.new_game(9, 9, seed=5)
        assert a.maze.grid.snapshot_walls() == b.maze.grid.snapshot_walls()


class TestMoves:
    """Tests for moves through the service."""

    @pytest.mark.asyncio
    async def test_competitive_ai_replies(self, game_service):
        """An accepted human move is answered by the AI."""
        game = await game_service.new_game(10, 10, competitive=True)
        direction = game.request_full_solution()[0]

        human, ai = await game_service.submit_move(direction)

        assert human.status in ("moved", "completed")
        if human.status == "moved":
            assert ai is not None
            assert ai.agent == "ai"
            assert game.turn == Turn.HUMAN

    @pytest.mark.asyncio
    async def test_solo_has_no_ai_reply(self, game_service):
        """Solo games never produce an AI result."""
        game = await game_service.new_game(10, 10)
        direction = game.request_full_solution()[0]

        _, ai = await game_service.submit_move(direction)
        assert ai is None

    @pytest.mark.asyncio
    async def test_win_stops_timers(self, game_service):
        """Finishing the maze stops the scheduler."""
        game = await game_service.new_game(6, 6)
        for direction in game.request_full_solution():
            human, _ = await game_service.submit_move(direction)

        assert human.status == "completed"
        assert not game.is_running
        assert not game_service.scheduler.running

    @pytest.mark.asyncio
    async def test_partial_solution_default_steps(self, game_service):
        """Hints default to the configured number of steps."""
        game = await game_service.new_game(30, 30)
        full = game.request_full_solution()

        hint = await game_service.request_partial_solution()
        assert hint == full[:10]


class TestTimerEvents:
    """Tests for scheduler event handling."""

    @pytest.mark.asyncio
    async def test_tick_event(self, game_service, test_settings):
        """Tick events advance the clock by the tick interval."""
        game = await game_service.new_game(5, 5)
        await game_service._handle_event(GameEvent(GameEventType.TICK, game_service._game_id))
        assert game.elapsed_seconds == int(test_settings.tick_interval_seconds)

    @pytest.mark.asyncio
    async def test_fractional_tick_interval(self, test_settings):
        """Fractional tick intervals accumulate before rounding down."""
        service = GameService(
            settings=test_settings.model_copy(update={"tick_interval_seconds": 2.5})
        )
        game = await service.new_game(5, 5)
        try:
            await service._handle_event(GameEvent(GameEventType.TICK, service._game_id))
            assert game.elapsed_seconds == 2

            await service._handle_event(GameEvent(GameEventType.TICK, service._game_id))
            assert game.elapsed_seconds == 5
        finally:
            await service.shutdown()

    @pytest.mark.asyncio
    async def test_stale_events_ignored(self, game_service):
        """Events scheduled for a previous game are dropped."""
        await game_service.new_game(5, 5)
        stale_id = game_service._game_id
        game = await game_service.new_game(5, 5)

        await game_service._handle_event(GameEvent(GameEventType.TICK, stale_id))
        assert game.elapsed_seconds == 0

    @pytest.mark.asyncio
    async def test_events_ignored_after_stop(self, game_service):
        """A stopped game no longer ticks or regenerates."""
        game = await game_service.new_game(5, 5)
        walls = game.maze.grid.snapshot_walls()
        await game_service.stop()

        await game_service._handle_event(GameEvent(GameEventType.TICK, game_service._game_id))
        await game_service._handle_event(
            GameEvent(GameEventType.REGENERATE, game_service._game_id)
        )

        assert game.elapsed_seconds == 0
        assert game.maze.grid.snapshot_walls() == walls
        assert not game_service.scheduler.running

    @pytest.mark.asyncio
    async def test_regenerate_event(self, game_service):
        """Regeneration events re-carve the maze."""
        game = await game_service.new_game(8, 8)
        await game_service._handle_event(
            GameEvent(GameEventType.REGENERATE, game_service._game_id)
        )
        assert game.maze.grid.count_passages() == 63

    @pytest.mark.asyncio
    async def test_reset(self, game_service):
        """Reset stops the game and zeroes its clock."""
        game = await game_service.new_game(5, 5)
        game.tick()
        await game_service.reset()

        assert game.status == GameStatus.STOPPED
        assert game.elapsed_seconds == 0
        assert not game_service.scheduler.running


class TestSaveLoad:
    """Tests for persistence through the service."""

    @pytest.mark.asyncio
    async def test_save_and_load(self, game_service):
        """Loading brings back the saved position, counters and clock."""
        game = await game_service.new_game(10, 10, competitive=True)
        for _ in range(200):
            game.tick()
        await game_service.save()

        restored = await game_service.load()

        assert restored is not game
        assert restored.is_running
        assert restored.elapsed_seconds == 200
        assert restored.maze.grid.snapshot_walls() == game.maze.grid.snapshot_walls()
        assert restored.player.position == game.player.position
        assert game_service.seconds_until_regeneration() == 160
        assert game.status == GameStatus.STOPPED

    @pytest.mark.asyncio
    async def test_save_requires_running_game(self, game_service):
        """Finished games cannot be saved."""
        await game_service.new_game(5, 5)
        await game_service.stop()

        with pytest.raises(GameStateError):
            await game_service.save()

    @pytest.mark.asyncio
    async def test_load_missing(self, game_service):
        """Loading with no save keeps the current game."""
        game = await game_service.new_game(5, 5)

        with pytest.raises(SaveNotFoundError):
            await game_service.load()

        assert game_service.game is game
        assert game.is_running

    @pytest.mark.asyncio
    async def test_load_inconsistent_walls(self, game_service, test_settings):
        """A save with unpaired walls is refused and the game kept."""
        game = await game_service.new_game(4, 4)
        saved = await game_service.save()

        data = saved.model_dump()
        data["walls"] = [[[True, False, True, True] for _ in row] for row in data["walls"]]
        with open(test_settings.save_path, "w", encoding="utf-8") as f:
            json.dump(data, f)

        with pytest.raises(CorruptSaveError):
            await game_service.load()

        assert game_service.game is game
        assert game.is_running

    @pytest.mark.asyncio
    async def test_load_plays_pending_ai_turn(self, game_service):
        """A save taken on the AI's turn resumes with the AI moving first."""
        game = await game_service.new_game(10, 10, competitive=True)
        saved = await game_service.save()

        data = saved.model_dump()
        data["human_turn"] = False
        game_service.store.path.write_text(json.dumps(data), encoding="utf-8")

        restored = await game_service.load()

        assert restored.turn == Turn.HUMAN
        assert restored.ai.moves == 1

    @pytest.mark.asyncio
    async def test_shutdown_without_game(self):
        """Shutdown with no game is harmless."""
        service = GameService()
        await service.shutdown()
        assert not service.has_game
