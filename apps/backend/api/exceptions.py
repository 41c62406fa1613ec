"""
Custom exceptions and error handlers for the API.
"""

from typing import Any, Dict, Optional

from bson.errors import InvalidId
from fastapi import HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.logging_config import current_request_id, logger
from moviedb.approval import TransitionResult
from moviedb.identity import IdentityProviderError


class APIError(HTTPException):
    """Base API error with structured error response."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.error = error
        self.message = message
        self.details = details
        super().__init__(status_code=status_code, detail=message)


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            status_code=404,
            error="not_found",
            message=f"{resource} with ID {identifier} not found",
            details={"resource": resource, "id": str(identifier)},
        )


class ValidationError(APIError):
    """Request validation error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=422,
            error="validation_error",
            message=message,
            details=details,
        )


class ForbiddenError(APIError):
    """The requester does not own the resource."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            status_code=403,
            error="forbidden",
            message=f"{resource} with ID {identifier} belongs to another user",
            details={"resource": resource, "id": str(identifier)},
        )


class ConflictError(APIError):
    """The resource is not in a state that allows the operation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=409,
            error="conflict",
            message=message,
            details=details,
        )


class DatabaseError(APIError):
    """Database connection/operation error."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(
            status_code=503,
            error="database_unavailable",
            message=message,
        )


def raise_for_transition(result: TransitionResult, identifier: Any) -> None:
    """Translate a failed request transition into an APIError."""
    if result is TransitionResult.ok:
        return
    if result is TransitionResult.not_found:
        raise NotFoundError("Movie request", identifier)
    if result is TransitionResult.not_owner:
        raise ForbiddenError("Movie request", identifier)
    if result is TransitionResult.movie_not_found:
        raise APIError(
            status_code=404,
            error="not_found",
            message="Accepted movie not found; add the movie before accepting the request",
            details={"request_id": str(identifier)},
        )
    raise ConflictError(
        f"Movie request with ID {identifier} is no longer pending",
        details={"id": str(identifier)},
    )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions and return structured JSON response."""
    content = {
        "error": exc.error,
        "message": exc.message,
    }
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def route_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes answer {"error": "not found"}; other HTTP errors keep the default body."""
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "not found"})
    return await http_exception_handler(request, exc)


async def invalid_id_handler(request: Request, exc: InvalidId) -> JSONResponse:
    """Handle malformed document ids."""
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_id", "message": f"Invalid ID: {exc}"},
    )


async def identity_provider_error_handler(request: Request, exc: IdentityProviderError) -> JSONResponse:
    """Handle identity provider failures."""
    logger.error(f"Identity provider error on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=502,
        content={"error": "identity_provider_error", "message": exc.message},
    )


async def database_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    """Handle document store failures."""
    logger.error(f"Database error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"error": "database_unavailable", "message": "Database operation failed"},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "request_id": current_request_id(),
        },
    )
