"""API route factories for Content Review."""

from contentreview.web.routes.health import create_health_router
from contentreview.web.routes.reviews import create_reviews_router

__all__ = ["create_health_router", "create_reviews_router"]
