"""FastAPI application factory.

Main entry point for the mathsolve Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mathsolve import __version__
from mathsolve.config.app_config import load_app_config
from mathsolve.store.base import RecordStore
from mathsolve.web.routes import (
    auth_router,
    health_router,
    leaderboard_router,
    problems_router,
    solve_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config = load_app_config()
    logger.info(
        "api_startup",
        store_backend=config.store.backend,
        store_injected=app.state.store is not None,
    )
    yield


def create_app(store: RecordStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Record store to use; built from config on first request if None

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="mathsolve API",
        description="Random math problems, answer checking, scores and ranks",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=load_app_config().web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(problems_router)
    app.include_router(solve_router)
    app.include_router(leaderboard_router)

    return app


# Default app instance for uvicorn
app = create_app()
