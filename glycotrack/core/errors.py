"""Domain error taxonomy and its HTTP mapping.

Services raise these typed errors; a single set of exception handlers
turns them into JSON responses so routers never string-match messages.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from glycotrack.logging_config import get_logger

logger = get_logger(__name__)

GENERIC_SERVER_ERROR = "Internal server error"


class GlycoTrackError(Exception):
    """Base class for errors the API knows how to report."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "error"

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(GlycoTrackError):
    """Malformed or out-of-range input detected by a service."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class AuthenticationError(GlycoTrackError):
    """Wrong credentials supplied for a login or a password-gated action."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_error"


class ConflictError(GlycoTrackError):
    """A record already exists for the same (user, date, period)."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class NotFoundError(GlycoTrackError):
    """Absent, or owned by another user. The two are never distinguished."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class PersistenceError(GlycoTrackError):
    """Storage failure. The message is always generic."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "persistence_error"

    def __init__(self, message: str = GENERIC_SERVER_ERROR):
        super().__init__(message)


class ProvenanceError(GlycoTrackError):
    """A backup document was exported by a different user."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "provenance_error"


def _error_body(exc: GlycoTrackError) -> dict[str, Any]:
    body: dict[str, Any] = {"detail": exc.message, "code": exc.code}
    if exc.details:
        body["details"] = exc.details
    return body


async def glycotrack_error_handler(
    request: Request, exc: GlycoTrackError
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed with server error",
            path=request.url.path,
            code=exc.code,
        )
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc))


async def sqlalchemy_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    logger.error(
        "Unhandled database error",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(PersistenceError()),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain error handlers to the application."""
    app.add_exception_handler(GlycoTrackError, glycotrack_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
