from .health import router as health_router
from .players import router as players_router
from .teams import router as teams_router

__all__ = [
    "health_router",
    "teams_router",
    "players_router",
]
