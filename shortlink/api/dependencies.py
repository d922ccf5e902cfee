"""API dependencies for FastAPI.

This module provides dependency injection functions for FastAPI endpoints
to access the settings, repositories and service instances held by the
application.
"""

from fastapi import Depends, Request

from shortlink.core.config import Settings
from shortlink.repositories.url_repository import UrlRepository
from shortlink.services.shortener import ShortenerService


def get_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


async def get_url_repository():
    """Get an instance of the URL repository."""
    return UrlRepository()


async def get_shortener_service(
    url_repo: UrlRepository = Depends(get_url_repository),
    app_settings: Settings = Depends(get_settings),
) -> ShortenerService:
    """Get an instance of the URL shortening service."""
    return ShortenerService(
        url_repository=url_repo,
        short_id_length=app_settings.SHORT_ID_LENGTH,
        alphabet=app_settings.SHORT_ID_ALPHABET,
        max_attempts=app_settings.SHORT_ID_MAX_ATTEMPTS,
        max_url_length=app_settings.URL_MAX_LENGTH,
    )


def get_short_url_prefix(app_settings: Settings = Depends(get_settings)) -> str:
    """Get the prefix short identifiers are appended to, e.g. ``https://sho.rt/short``."""
    return f"{app_settings.BASE_URL.rstrip('/')}{app_settings.REDIRECT_PREFIX}"
