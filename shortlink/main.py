"""Main application module.

This module builds the FastAPI application: it creates the database engine
and session factory, includes routes, and configures middleware and
exception handlers.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlink.api import create_api_router
from shortlink.api.schemas import error_body
from shortlink.core.alembic import run_migrations
from shortlink.core.config import Settings, settings
from shortlink.core.logging import setup_logging
from shortlink.core.telemetry import instrument_app, setup_telemetry
from shortlink.db.base import create_engine, create_session_factory, create_tables
from shortlink.middleware.logging import add_logging_middleware
from shortlink.services.exceptions import (
    CapacityExceededError,
    InvalidInputError,
    ServiceError,
    ServiceUnavailableError,
    URLNotFoundError,
)

RETRY_AFTER_SECONDS = "1"


def status_code_for(exc: ServiceError) -> int:
    """HTTP status for a service error kind."""
    if isinstance(exc, InvalidInputError):
        return 400
    if isinstance(exc, URLNotFoundError):
        return 404
    if isinstance(exc, (ServiceUnavailableError, CapacityExceededError)):
        return 503
    # DataIntegrityError and InternalServiceError
    return 500


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Create the FastAPI application.

    The engine and session factory are created here and stored on
    ``app.state``; the engine is disposed of on shutdown.
    """
    app_settings = app_settings or settings
    setup_logging(app_settings)

    engine = create_engine(app_settings)
    session_factory = create_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {app_settings.APP_NAME} v{app_settings.APP_VERSION}")
        logger.info(f"Environment: {app_settings.ENVIRONMENT.value}")
        logger.info(f"Debug mode: {app_settings.DEBUG}")

        if app_settings.DB_AUTO_MIGRATE:
            logger.info("Running database migrations")
            await asyncio.to_thread(run_migrations, app_settings.SQLALCHEMY_DATABASE_URI)
        elif app_settings.DB_CREATE_TABLES:
            await create_tables(engine)

        yield

        logger.info(f"Shutting down {app_settings.APP_NAME}")
        await engine.dispose()

    app = FastAPI(
        title=app_settings.APP_NAME,
        description=app_settings.APP_DESCRIPTION,
        version=app_settings.APP_VERSION,
        docs_url="/docs" if app_settings.DEBUG else None,
        redoc_url="/redoc" if app_settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    if app_settings.REQUEST_LOGGING_ENABLED:
        add_logging_middleware(app)

    setup_telemetry(app_settings)
    instrument_app(app, app_settings, db_engine=engine)

    app.include_router(create_api_router(app_settings))

    register_exception_handlers(app, app_settings)

    return app


def register_exception_handlers(app: FastAPI, app_settings: Settings) -> None:
    """Map every failure to a ``{"success": false, "error": ...}`` response."""

    @app.exception_handler(ServiceError)
    async def service_exception_handler(request: Request, exc: ServiceError):
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.warning(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc}")

        headers = {"Retry-After": RETRY_AFTER_SECONDS} if exc.retryable else None
        return JSONResponse(status_code=status_code, content=error_body(str(exc)), headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request parsing errors as 400 responses."""
        errors = exc.errors()
        logger.info(f"Request validation error: {errors}")

        if any(error.get("type") == "json_invalid" for error in errors):
            message = "Invalid JSON in request body"
        else:
            message = "Invalid request body"
        return JSONResponse(status_code=400, content=error_body(message))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler to catch and log all unhandled exceptions."""
        logger.opt(exception=exc).error(f"Unhandled exception in {request.method} {request.url.path}")
        message = str(exc) if app_settings.DEBUG else "Internal server error"
        return JSONResponse(status_code=500, content=error_body(message))


def run() -> None:
    """Run the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "shortlink.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
