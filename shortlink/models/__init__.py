"""
Data models for the shortlink service.

This module imports and exports all SQLModel models used in the application.
"""

from sqlmodel import SQLModel

from shortlink.models.url import (
    ShortenResult,
    UrlMapping,
    UrlMappingBase,
    UrlMappingCreate,
    UrlMappingRead,
)

__all__ = [
    "SQLModel",
    "ShortenResult",
    "UrlMapping",
    "UrlMappingBase",
    "UrlMappingCreate",
    "UrlMappingRead",
]
