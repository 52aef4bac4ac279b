"""Health check endpoints for Content Review.

``/health/`` answers liveness checks. ``/health/ready`` also runs a
trivial query so load balancers stop routing to an instance whose
database is unreachable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from contentreview.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Liveness response.

    Attributes:
        status: "ok" while the process is serving requests
    """

    status: str


class ReadinessResponse(BaseModel):
    """Readiness response.

    Attributes:
        status: "ok" or "unhealthy"
        database: "connected" or "disconnected"
    """

    status: str
    database: str


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Dependency returning the session factory stored on app state."""
    return request.app.state.session_factory  # type: ignore[no-any-return]


def create_health_router() -> APIRouter:
    """Create the health check router.

    Routes:
        GET /health/ - Liveness check
        GET /health/ready - Readiness check with a database round trip
    """
    router = APIRouter(prefix="/health", tags=["health"])

    @router.get("/", response_model=HealthResponse)
    async def health() -> dict[str, Any]:
        return {"status": "ok"}

    @router.get("/ready", response_model=ReadinessResponse)
    async def readiness(
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> dict[str, Any]:
        try:
            async with session_factory() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("readiness_check_failed", database="disconnected", error=str(exc))
            return {"status": "unhealthy", "database": "disconnected"}

        logger.debug("readiness_check_passed", database="connected")
        return {"status": "ok", "database": "connected"}

    return router
