"""shortlink: a URL shortening service with deduplicated short identifiers."""

__version__ = "0.1.0"
