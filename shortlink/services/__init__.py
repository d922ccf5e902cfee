"""Service layer for the shortlink application.

This package contains the shortener service, the input validators and the
service error taxonomy. Services orchestrate repository calls and never
expose store details to callers.
"""

from shortlink.services.shortener import ShortenerService
from shortlink.services.validation import ValidationResult, validate_short_id, validate_url

__all__ = ["ShortenerService", "ValidationResult", "validate_short_id", "validate_url"]
