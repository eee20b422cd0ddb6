# WORKFLOW: Structured logging middleware for request/response monitoring.
# Used by: All API endpoints, operational monitoring, debugging
# Functions:
# 1. _log_request() - Log incoming request details (method, path, query, size)
# 2. _log_response() - Log response details (status, timing, content type)
# 3. _log_error() - Log error details with context
#
# Logging flow: Request -> Log request -> Process -> Log response/error
# Upload bodies are archives, so only their declared size is logged.

import time
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for structured request/response logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log details."""
        start_time = time.perf_counter()

        self._log_request(request)

        try:
            response = await call_next(request)
        except Exception as e:
            self._log_error(request, e, time.perf_counter() - start_time)
            raise

        self._log_response(request, response, time.perf_counter() - start_time)
        return response

    def _log_request(self, request: Request) -> None:
        """Log incoming request details."""
        logger.info(
            "Incoming request",
            method=request.method,
            path=request.url.path,
            query_params=dict(request.query_params),
            content_length=request.headers.get("content-length"),
            content_type=request.headers.get("content-type"),
            client_ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )

    def _log_response(self, request: Request, response: Response, process_time: float) -> None:
        """Log response details."""
        logger.info(
            "Response sent",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=round(process_time * 1000, 2),
            content_length=response.headers.get("content-length"),
            content_type=response.headers.get("content-type"),
        )

    def _log_error(self, request: Request, error: Exception, process_time: float) -> None:
        """Log error details."""
        logger.error(
            "Request failed",
            method=request.method,
            path=request.url.path,
            error_type=type(error).__name__,
            error_message=str(error),
            process_time_ms=round(process_time * 1000, 2),
        )
