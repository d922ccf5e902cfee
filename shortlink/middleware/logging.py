"""
Request logging middleware for FastAPI using Loguru.

Every request gets an ID, returned in the X-Request-ID header, and one
REQUEST-level log line with its method, path, status and latency.
"""

import time
import uuid
from contextvars import ContextVar

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from shortlink.core.logging import REQUEST_LEVEL

# Context variable to store request ID across async context
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and tag the response with its request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        # Reuse an upstream request ID when a proxy already assigned one
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_var.set(request_id)

        start_time = time.perf_counter()
        try:
            with logger.contextualize(request_id=request_id):
                response = await call_next(request)
                process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)

                response.headers[REQUEST_ID_HEADER] = request_id

                client_ip = request.client.host if request.client else "unknown"
                if "X-Forwarded-For" in request.headers:
                    forwarded_ips = request.headers["X-Forwarded-For"].split(",")
                    if forwarded_ips:
                        client_ip = forwarded_ips[0].strip()

                logger.log(
                    REQUEST_LEVEL,
                    "{method} {path} {status_code} {process_time_ms}ms",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    process_time_ms=process_time_ms,
                    client_ip=client_ip,
                )
                return response
        finally:
            request_id_var.reset(token)


def add_logging_middleware(app) -> None:
    """Add the request logging middleware to the FastAPI application."""
    app.add_middleware(RequestLoggingMiddleware)
