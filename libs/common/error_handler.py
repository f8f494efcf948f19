"""Global exception handlers giving every failure the same ``{"error": ...}`` shape."""

import re

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, ProgrammingError
from starlette.exceptions import HTTPException

from libs.common.config import get_settings
from libs.common.errors import ClubError, InfrastructureError
from libs.common.logging import get_logger

logger = get_logger(__name__)

_MISSING_TABLE = re.compile(r"no such table|does not exist|undefined table", re.IGNORECASE)


def _error_body(message: str, kind: str) -> dict:
    body = {"error": message}
    if get_settings().ENVIRONMENT != "production":
        body["kind"] = kind
    return body


def _storage_error(exc: Exception) -> InfrastructureError:
    """Translate a driver error into an actionable infrastructure error."""
    raw = str(exc)
    if _MISSING_TABLE.search(raw):
        return InfrastructureError(
            "Database schema is missing a table or index. "
            "Run `alembic upgrade head` and retry."
        )
    return InfrastructureError("Database is unavailable. Please retry shortly.")


async def club_error_handler(request: Request, exc: ClubError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s: %s",
            exc.kind,
            exc.message,
            extra={"extra_fields": {"path": request.url.path, **exc.details}},
        )
    return JSONResponse(
        status_code=exc.status_code, content=_error_body(exc.message, exc.kind)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), "HTTPException"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content=_error_body(message, "ValidationError"))


async def storage_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Database failure on %s", request.url.path)
    error = _storage_error(exc)
    return JSONResponse(
        status_code=error.status_code, content=_error_body(error.message, error.kind)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500, content=_error_body("Internal server error", type(exc).__name__)
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Register the shared handlers on an app."""
    app.add_exception_handler(ClubError, club_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(OperationalError, storage_exception_handler)
    app.add_exception_handler(ProgrammingError, storage_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
