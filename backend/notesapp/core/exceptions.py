"""
Custom exception classes for unified error handling.
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppBaseError(Exception):
    """Base exception for all application errors."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class ValidationError(AppBaseError):
    """Raised when required input is missing or malformed."""
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppBaseError):
    """Raised on bad credentials or an unknown caller."""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized", detail: str | None = None):
        super().__init__(message=message, detail=detail)


class InvalidTokenError(UnauthorizedError):
    """Raised when JWT token is missing, invalid or expired."""
    def __init__(self, detail: str | None = None):
        super().__init__(
            message="Invalid or expired token",
            detail=detail or "Please log in again.",
        )


class ForbiddenError(AppBaseError):
    """Raised when the caller is authenticated but does not own the resource."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppBaseError):
    """Raised when the requested resource does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppBaseError):
    """Raised when a unique field (e.g. email) is already taken."""
    status_code = status.HTTP_409_CONFLICT


class CacheUnavailableError(AppBaseError):
    """Raised by cache backends when the cache server cannot be reached."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, operation: str, original_error: str):
        super().__init__(
            message=f"Cache '{operation}' failed",
            detail=original_error,
        )


# ── Utility: convert to HTTPException ────────────────────

def app_error_to_http(error: AppBaseError, status_code: int | None = None) -> HTTPException:
    """Convert an AppBaseError to an HTTPException with consistent JSON body."""
    headers = None
    if isinstance(error, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(
        status_code=status_code or error.status_code,
        detail={
            "error": error.message,
            "detail": error.detail,
            "type": type(error).__name__,
        },
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map AppBaseError subclasses and body validation failures to JSON responses."""

    @app.exception_handler(AppBaseError)
    async def _app_error_handler(request: Request, exc: AppBaseError):
        http_exc = app_error_to_http(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
            headers=http_exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": f"{field}: {message}" if field else message,
                "detail": None,
                "type": ValidationError.__name__,
            },
        )
