"""Domain errors and their HTTP mapping.

Services and the authorization policy raise these; the handlers
registered by register_error_handlers() turn them into JSON responses
of the form {"message": ...}. Nothing below the API layer knows
about HTTPException.

A constraint violation that slips past the service checks (a row
deleted between check and commit, say) surfaces as IntegrityError and
is reported as 409, never as a 500. The request session is discarded
afterwards, which rolls the transaction back.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = structlog.get_logger()


class DevTasksError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(DevTasksError):
    """Malformed or missing field, bad enum value, dangling reference."""

    status_code = 400
    default_message = "Validation failed"


class AuthFailure(DevTasksError):
    """Bad credentials at login."""

    status_code = 401
    default_message = "Invalid email or password"


class Unauthenticated(DevTasksError):
    """Missing, malformed, tampered or expired bearer token."""

    status_code = 401
    default_message = "Authentication required"


class Forbidden(DevTasksError):
    """Authenticated, but not allowed to touch this resource."""

    status_code = 403
    default_message = "Forbidden"


class NotFound(DevTasksError):
    status_code = 404
    default_message = "Not found"


class Conflict(DevTasksError):
    status_code = 409
    default_message = "Conflict"


async def _domain_error_handler(request: Request, exc: DevTasksError) -> JSONResponse:
    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error("request.failed", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=headers,
    )


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "errors": errors},
    )


async def _integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    # Driver text can carry table and column names; keep it in the log only
    logger.warning("db.integrity_error", path=request.url.path, error=str(exc.orig))
    return JSONResponse(
        status_code=Conflict.status_code,
        content={"message": "Request conflicts with existing data"},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain -> HTTP status mapping on an app."""
    app.add_exception_handler(DevTasksError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)
