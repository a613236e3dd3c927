"""API routers module."""

from .auth import router as auth_router
from .cards import router as cards_router
from .session import router as session_router
from .dashboard import router as dashboard_router
from .leaderboard import router as leaderboard_router
from .seed import router as seed_router

__all__ = [
    "auth_router",
    "cards_router",
    "session_router",
    "dashboard_router",
    "leaderboard_router",
    "seed_router",
]
