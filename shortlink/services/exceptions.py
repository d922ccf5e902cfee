"""Exceptions for the shortlink service layer.

This module contains the exception hierarchy for the service layer. Every
failure an operation reports is one of these kinds; the API layer maps
them to HTTP responses without looking at store details.
"""


class ServiceError(Exception):
    """Base exception for all service-level errors."""
    retryable = False


class InvalidInputError(ServiceError):
    """Caller-supplied data fails shape or content rules."""
    pass


class InvalidURLError(InvalidInputError):
    """The URL to shorten is missing, too long or not an http(s) URL."""
    pass


class InvalidShortIdError(InvalidInputError):
    """The short identifier does not have a valid shape."""
    pass


class URLNotFoundError(ServiceError):
    """No mapping exists for a well-formed short identifier."""
    pass


class DataIntegrityError(ServiceError):
    """A stored mapping is structurally invalid."""
    pass


class ServiceUnavailableError(ServiceError):
    """The store is not provisioned or not reachable."""
    retryable = True


class CapacityExceededError(ServiceError):
    """The store is throttling or out of capacity."""
    retryable = True


class InternalServiceError(ServiceError):
    """Any other failure. The message is safe to show to callers."""
    pass


class ShortIdGenerationError(InternalServiceError):
    """Every generated short identifier collided with an existing one."""
    pass
