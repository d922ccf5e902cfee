"""URL mapping data models.

This module defines the UrlMapping table that stores one short identifier
per normalized original URL, plus the read models returned by the service.
"""
import hashlib
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, Index, String
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def url_digest(url: str) -> str:
    """SHA-256 hex digest of a URL, the fixed-size key its uniqueness is enforced on."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


def _url_hash_default(context) -> str:
    return url_digest(context.get_current_parameters()["original_url"])


class UrlMappingBase(SQLModel):
    """Base model for URL mapping data."""

    short_id: str = Field(
        primary_key=True,
        max_length=12,
        description="Public short identifier, [A-Za-z0-9_-]{6,12}",
    )
    original_url: str = Field(
        max_length=2048,
        description="The sanitized original URL to redirect to",
    )


class UrlMapping(UrlMappingBase, table=True):
    """
    URL mapping stored in the database.

    Rows are written once by the allocator and never updated or deleted.
    The short_id primary key guarantees identifier uniqueness and the unique
    index on url_hash guarantees at most one mapping per URL, which is what
    turns the allocator's insert into a conditional insert. The digest keeps
    the index entries small whatever the URL length or encoding.
    """

    __tablename__ = "url_mappings"

    url_hash: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=False, default=_url_hash_default),
        description="SHA-256 of original_url, filled in on insert",
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Timestamp when this mapping was created",
    )

    __table_args__ = (
        Index("ix_url_mappings_url_hash", "url_hash", unique=True),
        Index("ix_url_mappings_created_at", "created_at"),
    )


class UrlMappingCreate(UrlMappingBase):
    """Schema for inserting a new mapping."""
    pass


class UrlMappingRead(UrlMappingBase):
    """Schema for reading a mapping."""
    created_at: datetime


class ShortenResult(UrlMappingRead):
    """Outcome of a create-or-get call.

    ``created`` is False when the URL already had a mapping, either from an
    earlier request or from a concurrent one that won the insert.
    """
    created: bool

    @classmethod
    def from_mapping(cls, mapping: UrlMapping, created: bool) -> "ShortenResult":
        return cls(
            short_id=mapping.short_id,
            original_url=mapping.original_url,
            created_at=mapping.created_at,
            created=created,
        )
