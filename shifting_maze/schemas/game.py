"""Game schemas for request/response validation and save files."""

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class Point(BaseModel):
    """Schema for a cell position."""

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)


class NewGameRequest(BaseModel):
    """Schema for starting a new game.

    Either give a difficulty preset (easy 10x10, medium 20x20, hard 30x30)
    or explicit dimensions; dimensions win when both are present.
    """

    width: Optional[int] = Field(None, gt=0, le=100)
    height: Optional[int] = Field(None, gt=0, le=100)
    difficulty: Optional[str] = Field(None, pattern="^(easy|medium|hard)$")
    mode: str = Field("solo", pattern="^(solo|competitive)$")
    seed: Optional[int] = None


class MoveRequest(BaseModel):
    """Schema for move request."""

    direction: str = Field(..., pattern="^(up|right|down|left|w|a|s|d)$")


class MoveResult(BaseModel):
    """Schema for one agent's move outcome."""

    status: str  # moved, blocked, waited, not_your_turn, inactive, completed
    agent: str  # human, ai
    position: Point
    moves: int
    direction: Optional[str] = None
    message: Optional[str] = None


class GameOutcome(BaseModel):
    """Schema for the final result of a game."""

    winner: str
    human_moves: int
    ai_moves: int
    elapsed_seconds: int


class GameState(BaseModel):
    """Schema for the current game state."""

    status: str  # not_started, running, stopped
    mode: str  # solo, competitive
    width: int
    height: int
    entrance: Point
    exit: Point
    player: Point
    ai_player: Optional[Point] = None
    human_moves: int
    ai_moves: int
    turn: Optional[str] = None
    elapsed_seconds: int
    elapsed: str  # MM:SS
    seconds_until_regeneration: int
    outcome: Optional[GameOutcome] = None


class MoveResponse(BaseModel):
    """Schema for a full move round: the human move and the AI reply."""

    human: MoveResult
    ai: Optional[MoveResult] = None
    game: GameState


class SolutionResponse(BaseModel):
    """Schema for a solution path from the player's position."""

    found: bool
    length: int
    moves: list[str]
    keys: str
    start: Point


class RegenerationResponse(BaseModel):
    """Schema for a regeneration request outcome."""

    status: str  # regenerated, rolled_back, skipped
    attempts: int
    message: Optional[str] = None
    game: GameState


class DrawCommandSchema(BaseModel):
    """Schema for one drawing primitive."""

    op: str
    args: dict[str, Any] = Field(default_factory=dict)


class FrameResponse(BaseModel):
    """Schema for a full frame of drawing primitives."""

    commands: list[DrawCommandSchema]


class SaveResponse(BaseModel):
    """Schema for save/load acknowledgements."""

    message: str
    game: GameState


class SavedGame(BaseModel):
    """Everything persisted for a game in progress.

    The AI's planned path is never stored; it is recomputed on load.
    """

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    cell_size: int = Field(20, ge=10)
    walls: list[list[list[bool]]]
    player: Point
    ai_player: Optional[Point] = None
    entrance: Point
    exit: Point
    human_moves: int = Field(0, ge=0)
    ai_moves: int = Field(0, ge=0)
    elapsed_seconds: int = Field(0, ge=0)
    competitive: bool = False
    human_turn: bool = True
    seconds_until_regeneration: int = Field(..., gt=0)

    @model_validator(mode="after")
    def check_layout(self) -> "SavedGame":
        """Walls must cover the grid and every position must be inside it."""
        if len(self.walls) != self.height:
            raise ValueError(f"Expected {self.height} wall rows, got {len(self.walls)}")
        for y, row in enumerate(self.walls):
            if len(row) != self.width:
                raise ValueError(f"Wall row {y} has {len(row)} cells, expected {self.width}")
            for x, flags in enumerate(row):
                if len(flags) != 4:
                    raise ValueError(f"Cell ({x}, {y}) needs 4 wall flags")

        points = {
            "player": self.player,
            "entrance": self.entrance,
            "exit": self.exit,
        }
        if self.ai_player is not None:
            points["ai_player"] = self.ai_player
        for name, point in points.items():
            if point.x >= self.width or point.y >= self.height:
                raise ValueError(f"{name} ({point.x}, {point.y}) is outside the maze")

        if self.competitive and self.ai_player is None:
            raise ValueError("Competitive games need an AI player position")
        return self
