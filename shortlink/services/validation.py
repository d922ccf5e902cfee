"""Input validation for URLs and short identifiers.

Validators return a ValidationResult instead of raising, so callers decide
how a failure is reported. Sanitization is kept separate and must be applied
the same way before the dedup lookup and before the write.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit

MAX_URL_LENGTH = 2048
ALLOWED_SCHEMES = frozenset({"http", "https"})
SHORT_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{6,12}")

_WHITESPACE = re.compile(r"\s")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation: ``value`` on success, ``error`` on failure."""

    value: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: str) -> "ValidationResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "ValidationResult":
        return cls(error=error)


def sanitize_url(raw: str) -> str:
    """Trim surrounding whitespace. Nothing else is normalized."""
    return raw.strip()


def validate_url(raw: Any, max_length: int = MAX_URL_LENGTH) -> ValidationResult:
    """
    Check that ``raw`` is an absolute http or https URL of acceptable length.

    The length limit applies to the value as received. Surrounding whitespace
    is tolerated, as URL parsers strip it.

    Returns:
        ValidationResult holding the sanitized URL on success
    """
    if not raw or not isinstance(raw, str):
        return ValidationResult.failure("URL is required and must be a string")

    url = sanitize_url(raw)
    if not url:
        return ValidationResult.failure("URL cannot be empty")

    if len(raw) > max_length:
        return ValidationResult.failure(f"URL is too long (maximum {max_length} characters)")

    try:
        parts = urlsplit(url)
        # Raises ValueError for a malformed port
        parts.port
    except ValueError:
        return ValidationResult.failure("Invalid URL format. Must be a valid HTTP or HTTPS URL")

    if not parts.scheme:
        return ValidationResult.failure("Invalid URL format. Must be a valid HTTP or HTTPS URL")

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return ValidationResult.failure(
            f"Invalid URL protocol '{parts.scheme}:'. Must be a valid HTTP or HTTPS URL"
        )

    if not parts.hostname or _WHITESPACE.search(parts.hostname):
        return ValidationResult.failure("Invalid URL format. Must be a valid HTTP or HTTPS URL")

    return ValidationResult.success(url)


def validate_short_id(candidate: Any) -> ValidationResult:
    """Check that ``candidate`` matches ``[A-Za-z0-9_-]{6,12}`` exactly."""
    if not candidate or not isinstance(candidate, str):
        return ValidationResult.failure("Short ID is required")

    if not candidate.strip():
        return ValidationResult.failure("Short ID cannot be empty")

    if not SHORT_ID_PATTERN.fullmatch(candidate):
        return ValidationResult.failure("Invalid short ID format")

    return ValidationResult.success(candidate)
