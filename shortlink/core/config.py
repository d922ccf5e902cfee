"""Application configuration module.

This module contains settings for the shortlink service,
loaded from environment variables with appropriate defaults.
"""

from __future__ import annotations

import logging
import string
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with defaults.

    Settings are loaded from environment variables, with fallback to
    values in .env file if present, and finally to the default values
    specified here.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT

    # App Information
    APP_NAME: str = "shortlink"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "URL shortening service with deduplicated short identifiers"

    # API Configuration
    BASE_URL: str = "http://localhost:8000"  # Used for generating short URLs
    API_PREFIX: str = "/api"
    REDIRECT_PREFIX: str = "/short"
    REDIRECT_STATUS_CODE: int = 301
    DEBUG: bool = False

    CORS_ORIGINS: Union[List[str], str] = ["*"]

    # Short identifier generation
    SHORT_ID_LENGTH: int = 8
    SHORT_ID_ALPHABET: str = string.ascii_letters + string.digits + "_-"
    SHORT_ID_MAX_ATTEMPTS: int = 3  # Fresh identifiers tried after a primary key collision

    URL_MAX_LENGTH: int = 2048

    # PostgreSQL settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "shortlink"

    # Full URL override, e.g. sqlite+aiosqlite:///./shortlink.db
    DATABASE_URL: Optional[str] = None

    # PostgreSQL pool settings
    POSTGRES_POOL_SIZE: int = 20
    POSTGRES_POOL_MAX_OVERFLOW: int = 10
    POSTGRES_POOL_TIMEOUT: int = 30
    POSTGRES_POOL_RECYCLE: int = 300
    DB_ECHO: bool = False

    # Schema management on startup
    DB_CREATE_TABLES: bool = True
    DB_AUTO_MIGRATE: bool = False

    # Logging configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILENAME: str = "app.log"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"
    LOG_FORMAT: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {message}"
    LOG_JSON: bool = True
    LOG_TO_FILE: bool = True
    REQUEST_LOGGING_ENABLED: bool = True

    # OpenTelemetry configuration
    OTEL_ENABLED: bool = False
    OTEL_SERVICE_NAME: str = "shortlink"
    OTEL_RESOURCE_ATTRIBUTES: str = "service.namespace=shortlink"
    OTEL_EXPORTER_OTLP_ENDPOINT: str = "http://localhost:4317"
    OTEL_EXPORTER_OTLP_METRICS_ENDPOINT: str = "http://localhost:4317"
    OTEL_EXPORTER_OTLP_PROTOCOL: str = "grpc"  # grpc or http/protobuf
    OTEL_TRACES_SAMPLER: str = "parentbased_traceidratio"
    OTEL_TRACES_SAMPLER_ARG: float = 1.0
    OTEL_METRICS_EXPORT_INTERVAL_MILLIS: int = 60000

    @field_validator("CORS_ORIGINS")
    def validate_list_or_string(cls, v: Union[List[str], str]) -> List[str]:
        """Convert comma-separated string to list if needed."""
        if isinstance(v, str):
            if not v.strip():
                return []
            if v == "*":
                return ["*"]
            return [item.strip() for item in v.split(",")]
        return v

    @field_validator("SHORT_ID_LENGTH")
    def validate_short_id_length(cls, v: int) -> int:
        # Generated identifiers must pass the lookup-side shape check
        if not 6 <= v <= 12:
            raise ValueError("SHORT_ID_LENGTH must be between 6 and 12")
        return v

    @field_validator("SHORT_ID_ALPHABET")
    def validate_short_id_alphabet(cls, v: str) -> str:
        # Same character class the lookup side accepts
        if not v:
            raise ValueError("SHORT_ID_ALPHABET must not be empty")
        invalid = sorted(set(v) - set(string.ascii_letters + string.digits + "_-"))
        if invalid:
            raise ValueError(f"SHORT_ID_ALPHABET contains characters outside [A-Za-z0-9_-]: {''.join(invalid)!r}")
        return v

    @field_validator("DATABASE_URL", mode="before")
    def empty_database_url(cls, v: Any) -> Optional[str]:
        if v == "":
            return None
        return v

    @computed_field
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Construct the SQLAlchemy database URI from settings or use override."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


# Create a singleton instance of the settings
settings = Settings()
