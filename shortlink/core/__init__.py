"""Core module for the shortlink service."""

from shortlink.core.config import Settings, settings

__all__ = ["Settings", "settings"]
