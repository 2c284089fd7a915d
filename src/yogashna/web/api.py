"""FastAPI application factory.

Main entry point for the Yogashna Web API.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from yogashna import __version__
from yogashna.config.app_config import load_app_config
from yogashna.db.database import init_db
from yogashna.web.errors import register_error_handlers
from yogashna.web.routes import (
    health_router,
    profile_router,
    me_router,
    abhyasa_cycle_router,
    videos_router,
    video_assets_router,
    program_templates_router,
    practice_router,
    progress_router,
    library_state_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config = load_app_config()
    init_db(Path(config.database.path))
    logger.info(
        "api.startup",
        database=config.database.path,
        api_prefix=config.server.api_prefix,
        auth_disabled=config.auth.disabled,
    )
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    config = load_app_config()

    app = FastAPI(
        title="Yogashna API",
        description="Backend API for guided yoga practice",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(health_router)
    prefix = config.server.api_prefix
    for router in (
        profile_router,
        me_router,
        abhyasa_cycle_router,
        videos_router,
        video_assets_router,
        program_templates_router,
        practice_router,
        progress_router,
        library_state_router,
    ):
        app.include_router(router, prefix=prefix)

    return app


# Default app instance for uvicorn
app = create_app()
