"""Route handlers for Web API."""

from mathsolve.web.routes.health import router as health_router
from mathsolve.web.routes.auth import router as auth_router
from mathsolve.web.routes.problems import router as problems_router
from mathsolve.web.routes.solve import router as solve_router
from mathsolve.web.routes.leaderboard import router as leaderboard_router

__all__ = [
    "health_router",
    "auth_router",
    "problems_router",
    "solve_router",
    "leaderboard_router",
]
