import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from recipebox.errors import (
    AuthError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, UnavailableError):
        status_code = 503
        error_type = "service_unavailable"
    elif isinstance(exc, AuthError):
        status_code = 401
        error_type = "authentication_error"
    elif isinstance(exc, ForbiddenError):
        status_code = 403
        error_type = "forbidden"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, ConflictError):
        status_code = 409
        error_type = "conflict"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        # Default for any other UserError subclass
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def request_validation_handler(_: Request, exc: Exception) -> Response:
    """Report malformed request bodies (missing or wrongly typed fields) as 400."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    details = []
    for error in errors:
        field = ".".join(str(part) for part in error["loc"][1:]) or "body"
        details.append(f"{field}: {error['msg']}")
    message = "; ".join(details) or "Invalid request"
    return create_json_error_response(status_code=400, message=message, error_type="validation_error")


async def store_error_handler(_: Request, exc: Exception) -> Response:
    """Handle pymongo connection failures raised mid-request (503)."""
    logger.warning("Store connection failure: %s", exc)
    return create_json_error_response(status_code=503, message=str(UnavailableError()), error_type="service_unavailable")


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500); details stay in the server log."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(status_code=500, message=str(InternalError()), error_type="internal_server_error")
