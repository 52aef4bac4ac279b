"""FastAPI application factory for Content Review.

Example usage:
    >>> from contentreview.config import ContentReviewConfig
    >>> from contentreview.web.app import create_app
    >>>
    >>> app = create_app(ContentReviewConfig())
    >>>
    >>> import uvicorn
    >>> uvicorn.run(app, host="0.0.0.0", port=8000)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contentreview import __version__
from contentreview.config import ContentReviewConfig
from contentreview.database.connection import get_engine, get_session_factory
from contentreview.logging import get_logger
from contentreview.review.service import ContentReviewService
from contentreview.web.middleware import RequestLoggingMiddleware
from contentreview.web.routes.health import create_health_router
from contentreview.web.routes.reviews import create_reviews_router

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database pool and review service for the app's lifetime.

    The engine, session factory and ``ContentReviewService`` are stored on
    ``app.state`` for the route dependencies.
    """
    config: ContentReviewConfig = app.state.config

    logger.info("app_startup_begin", host=config.web.host, port=config.web.port)

    engine = get_engine(config.database)
    session_factory = get_session_factory(engine)

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.service = ContentReviewService(session_factory, config)

    logger.info(
        "database_pool_initialized",
        pool_size=config.database.pool_size,
        max_overflow=config.database.max_overflow,
    )

    yield

    logger.info("app_shutdown_begin")
    await engine.dispose()
    logger.info("database_pool_disposed")


def create_app(config: ContentReviewConfig | None = None) -> FastAPI:
    """Create and configure the Content Review API.

    Args:
        config: Optional ContentReviewConfig. If None, creates default config.

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = ContentReviewConfig()

    app = FastAPI(
        title="Content Review",
        version=__version__,
        description="Scheduled content review for CMS pages",
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(create_health_router())
    app.include_router(create_reviews_router())

    logger.info("app_created", cors_origins=config.web.cors_origins, version=__version__)

    return app
