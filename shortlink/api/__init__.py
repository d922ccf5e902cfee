"""API package for the shortlink application.

This package contains the API layer components including routes,
request/response schemas, and dependency providers.
"""

from shortlink.api.routes import create_api_router

__all__ = ["create_api_router"]
