"""API dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends
from slowapi import Limiter
from slowapi.util import get_remote_address

from shifting_maze.services.game_service import GameService, get_game_service

# Rate limiter shared by the app and the routers
limiter = Limiter(key_func=get_remote_address)

# Type aliases for cleaner route signatures
GameServiceDep = Annotated[GameService, Depends(get_game_service)]
