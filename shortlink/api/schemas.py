"""API request and response schemas.

This module contains Pydantic models for API request validation
and response serialization. Field names are exposed in camelCase.
"""

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base schema that serializes field names in camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class URLCreateRequest(BaseModel):
    """Request schema for creating a short URL.

    ``url`` is left untyped so that the validator, not the request parser,
    reports a missing or non-string value.
    """
    url: Any = None


class URLResponse(CamelModel):
    """Response schema for a URL mapping."""
    short_url: str  # Full URL including base domain and redirect prefix
    short_id: str
    original_url: str
    created_at: datetime
    created: Optional[bool] = None
    message: Optional[str] = None


class SuccessResponse(BaseModel, Generic[DataT]):
    """Envelope for successful responses."""
    success: bool = True
    data: DataT


class ErrorResponse(BaseModel):
    """Envelope for error responses."""
    success: bool = False
    error: str


def error_body(message: str) -> dict:
    return ErrorResponse(error=message).model_dump()
