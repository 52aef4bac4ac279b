"""Web API for Content Review.

Public API:
    create_app: Build the FastAPI application.
"""

from contentreview.web.app import create_app

__all__ = ["create_app"]
