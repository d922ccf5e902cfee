"""Routes package initialization.

This module assembles the route collection for the application.
"""

from fastapi import APIRouter

from shortlink.api.routes import health, redirect, shortener
from shortlink.core.config import Settings


def create_api_router(app_settings: Settings) -> APIRouter:
    """Build the root router with the prefixes from ``app_settings``."""
    api_router = APIRouter()

    # Shortener and health routes live under the API prefix
    api_router.include_router(shortener.router, prefix=app_settings.API_PREFIX)
    api_router.include_router(health.router, prefix=app_settings.API_PREFIX)

    # Short URLs are served at {REDIRECT_PREFIX}/{short_id}
    api_router.include_router(redirect.router, prefix=app_settings.REDIRECT_PREFIX)

    return api_router


__all__ = ["create_api_router"]
