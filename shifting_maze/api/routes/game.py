"""Game routes: the command surface for one maze session."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse

from shifting_maze.api.deps import GameServiceDep, limiter
from shifting_maze.config import get_settings
from shifting_maze.core import (
    Direction,
    GameStateError,
    MazeGame,
    MazeRenderer,
    MoveResult as EngineMoveResult,
    format_time,
    visualize,
)
from shifting_maze.core.solver import path_to_keys
from shifting_maze.schemas.game import (
    DrawCommandSchema,
    FrameResponse,
    GameOutcome,
    GameState,
    MoveRequest,
    MoveResponse,
    MoveResult,
    NewGameRequest,
    Point,
    RegenerationResponse,
    SaveResponse,
    SolutionResponse,
)
from shifting_maze.services.game_service import GameService, NoActiveGameError
from shifting_maze.services.persistence_service import (
    CorruptSaveError,
    PersistenceError,
    SaveNotFoundError,
)

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/game", tags=["Game"])


def _point(position) -> Point:
    return Point(x=position.x, y=position.y)


def _game_state(service: GameService) -> GameState:
    """Build the state response for the active game."""
    game = service.game
    ai = game.ai
    return GameState(
        status=game.status.value,
        mode=game.mode.name,
        width=game.maze.width,
        height=game.maze.height,
        entrance=_point(game.maze.entrance),
        exit=_point(game.maze.exit),
        player=_point(game.player.position),
        ai_player=_point(ai.position) if ai is not None else None,
        human_moves=game.player.moves,
        ai_moves=ai.moves if ai is not None else 0,
        turn=game.turn.value if game.turn is not None else None,
        elapsed_seconds=game.elapsed_seconds,
        elapsed=format_time(game.elapsed_seconds),
        seconds_until_regeneration=service.seconds_until_regeneration(),
        outcome=GameOutcome(**game.outcome.to_dict()) if game.outcome else None,
    )


def _move_result(result: EngineMoveResult) -> MoveResult:
    return MoveResult(
        status=result.status,
        agent=result.agent,
        position=_point(result.position),
        moves=result.moves,
        direction=result.direction.value if result.direction else None,
        message=result.message,
    )


def _require_game(service: GameService) -> MazeGame:
    try:
        return service.game
    except NoActiveGameError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.post(
    "",
    response_model=GameState,
    status_code=status.HTTP_201_CREATED,
)
async def new_game(
    request: NewGameRequest,
    service: GameServiceDep,
) -> GameState:
    """Start a new game, replacing any game in progress.

    The player (and the AI in competitive mode) starts on the entrance.
    """
    await service.new_game(
        request.width,
        request.height,
        difficulty=request.difficulty,
        competitive=request.mode == "competitive",
        seed=request.seed,
    )
    return _game_state(service)


@router.get(
    "",
    response_model=GameState,
)
async def get_game(service: GameServiceDep) -> GameState:
    """Get the current game state."""
    _require_game(service)
    return _game_state(service)


@router.post(
    "/move",
    response_model=MoveResponse,
)
@limiter.limit(settings.rate_limit)
async def move(
    request: Request,
    move_request: MoveRequest,
    service: GameServiceDep,
) -> MoveResponse:
    """Move the player one cell.

    Blocked moves and moves out of turn change nothing. In competitive mode
    an accepted move is answered by the AI before the response is sent.
    """
    _require_game(service)
    direction = Direction.from_key(move_request.direction)
    human, ai = await service.submit_move(direction)

    if human.status == "completed" or (ai is not None and ai.status == "completed"):
        outcome = service.game.outcome
        logger.info(f"Game won by {outcome.winner if outcome else 'unknown'}")

    return MoveResponse(
        human=_move_result(human),
        ai=_move_result(ai) if ai is not None else None,
        game=_game_state(service),
    )


def _solution_response(
    service: GameService, moves: list[Direction], full: list[Direction]
) -> SolutionResponse:
    """`found` reflects the whole path even when only a prefix is returned."""
    game = service.game
    return SolutionResponse(
        found=bool(full) or game.player.position == game.maze.exit,
        length=len(moves),
        moves=[m.value for m in moves],
        keys=path_to_keys(moves),
        start=_point(game.player.position),
    )


@router.get(
    "/solution",
    response_model=SolutionResponse,
)
async def full_solution(service: GameServiceDep) -> SolutionResponse:
    """Full path from the player's position to the exit."""
    _require_game(service)
    moves = await service.request_full_solution()
    return _solution_response(service, moves, moves)


@router.get(
    "/solution/next",
    response_model=SolutionResponse,
)
async def next_steps(
    service: GameServiceDep,
    steps: Optional[int] = Query(
        None, ge=0, le=10000, description="Number of steps (default from settings)"
    ),
) -> SolutionResponse:
    """The next few steps of the solution."""
    _require_game(service)
    moves = await service.request_partial_solution(steps)
    full = await service.request_full_solution()
    return _solution_response(service, moves, full)


@router.post(
    "/regenerate",
    response_model=RegenerationResponse,
)
async def regenerate(service: GameServiceDep) -> RegenerationResponse:
    """Regenerate the maze now. Skipped when the game is not running."""
    _require_game(service)
    result = await service.regenerate()
    return RegenerationResponse(
        status=result.status,
        attempts=result.attempts,
        message=result.message,
        game=_game_state(service),
    )


@router.post(
    "/stop",
    response_model=GameState,
)
async def stop(service: GameServiceDep) -> GameState:
    """Stop the game and its timers."""
    _require_game(service)
    await service.stop()
    return _game_state(service)


@router.post(
    "/reset",
    response_model=GameState,
)
async def reset(service: GameServiceDep) -> GameState:
    """Stop the game and zero its clock."""
    _require_game(service)
    await service.reset()
    return _game_state(service)


@router.post(
    "/save",
    response_model=SaveResponse,
)
async def save(service: GameServiceDep) -> SaveResponse:
    """Save the running game."""
    _require_game(service)
    try:
        await service.save()
    except GameStateError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except PersistenceError as e:
        logger.error(f"Save failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    return SaveResponse(message="Game saved successfully.", game=_game_state(service))


@router.post(
    "/load",
    response_model=SaveResponse,
)
async def load(service: GameServiceDep) -> SaveResponse:
    """Load the saved game, replacing the current one."""
    try:
        await service.load()
    except SaveNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except CorruptSaveError as e:
        logger.warning(f"Refusing corrupt save: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    except PersistenceError as e:
        logger.error(f"Load failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    return SaveResponse(message="Game loaded successfully.", game=_game_state(service))


@router.get(
    "/frame",
    response_model=FrameResponse,
)
async def frame(
    service: GameServiceDep,
    path: Optional[str] = Query(
        None,
        pattern="^(solution|next)$",
        description="Overlay the full solution or the next steps",
    ),
) -> FrameResponse:
    """Drawing primitives for the current frame."""
    game = _require_game(service)
    renderer = MazeRenderer(game)
    if path == "solution":
        commands = renderer.render_path(await service.request_full_solution())
    elif path == "next":
        commands = renderer.render_path(await service.request_partial_solution())
    else:
        commands = renderer.render()
    return FrameResponse(
        commands=[DrawCommandSchema(op=c.op, args=c.args) for c in commands]
    )


@router.get(
    "/ascii",
    response_class=PlainTextResponse,
)
async def ascii_view(service: GameServiceDep) -> str:
    """ASCII picture of the maze (@ player, A AI, S entrance, E exit)."""
    game = _require_game(service)
    return visualize(game)
