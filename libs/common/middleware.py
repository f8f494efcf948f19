"""Observability middleware for the club API.

Provides:
- Request ID generation and propagation (X-Request-ID)
- Request/response timing
- Structured request lifecycle logging

Usage:
    from libs.common.middleware import add_observability_middleware

    app = FastAPI()
    add_observability_middleware(app)
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

_QUIET_PATHS = {"/health", "/api/v1/health"}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request context for log records and log each request once it completes."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed with unhandled exception",
                extra={"extra_fields": {
                    "error": str(e),
                    "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                }},
            )
            clear_request_context()
            raise

        if request.url.path not in _QUIET_PATHS:
            log = logger.warning if response.status_code >= 400 else logger.info
            log(
                "%s %s -> %d",
                request.method,
                request.url.path,
                response.status_code,
                extra={"extra_fields": {
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                }},
            )

        response.headers["X-Request-ID"] = request_id
        clear_request_context()
        return response


def add_observability_middleware(app: FastAPI) -> None:
    """
    Configure logging and attach the request context middleware.
    """
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
