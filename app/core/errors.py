"""
Application errors and the handlers that turn them into the JSON error envelope.

Every failure leaves the API as {"message": str, "details": ...}; "details" is
present only for request validation failures.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.schemas.errors import ErrorResponse, ValidationDetails

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong"
VALIDATION_ERROR_MESSAGE = "Validation failed"
INVALID_JSON_MESSAGE = "Invalid JSON format in request body"
# Detail Starlette attaches when no route matches the path.
ROUTE_MISS_DETAIL = "Not Found"


class AppError(Exception):
    """Expected failure with its own status code and client-safe message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: ValidationDetails | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        self.headers = headers
        super().__init__(message)


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str) -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class InvalidTokenError(UnauthorizedError):
    """Token failed signature, format or expiry checks. The cause is not exposed."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


def error_response(
    status_code: int,
    message: str,
    details: ValidationDetails | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the uniform error envelope; 'details' is dropped when empty."""
    body = ErrorResponse(message=message, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


def validation_details(errors: list[dict]) -> ValidationDetails:
    """
    Group pydantic errors by field name.

    The location prefix (body/query/path) is dropped; errors without a field
    (e.g. a non-object body) go to form_errors.
    """
    field_errors: dict[str, list[str]] = {}
    form_errors: list[str] = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header", "cookie"):
            loc = loc[1:]
        message = err.get("msg", "Invalid value")
        if loc:
            field_errors.setdefault(".".join(loc), []).append(message)
        else:
            form_errors.append(message)
    return ValidationDetails(field_errors=field_errors, form_errors=form_errors)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return error_response(exc.status_code, exc.message, exc.details, exc.headers)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = list(exc.errors())
    if any(err.get("type") == "json_invalid" for err in errors):
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_JSON_MESSAGE)
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        VALIDATION_ERROR_MESSAGE,
        validation_details(errors),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Starlette/FastAPI HTTP errors. Only the router's own miss (detail 'Not Found')
    becomes 'Route <path> not found'; any other detail is passed through.
    """
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == ROUTE_MISS_DETAIL:
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        message = f"Route {path} not found"
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception on %s %s", request.method, request.url.path
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error envelope handlers on the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
