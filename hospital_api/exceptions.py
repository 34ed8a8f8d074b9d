"""
Global exception handlers and custom exception classes.

Every error leaves the API as ``{"success": false, "message": ...}``.
"""
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from .config import get_settings

# Set up logging
logger = logging.getLogger(__name__)

class AppException(Exception):
    """
    Base exception class for application-specific exceptions.

    Args:
        status_code: HTTP status to answer with
        detail: Message shown to the client
        error: Underlying error text, only exposed in development
        headers: Extra response headers
    """
    def __init__(
        self,
        status_code: int,
        detail: str,
        error: Optional[str] = None,
        headers: Optional[dict] = None
    ):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.error = error
        self.headers = headers


class ValidationException(AppException):
    """Exception raised when request input is missing or unusable."""
    def __init__(self, detail: str = "Validation error", error: Optional[str] = None):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail, error=error)

class ConflictException(AppException):
    """Exception raised when a write collides with an existing record."""
    def __init__(self, detail: str = "Resource already exists", status_code: int = status.HTTP_409_CONFLICT):
        super().__init__(status_code=status_code, detail=detail)

class ResourceNotFoundException(AppException):
    """Exception raised when a requested record does not exist."""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class InternalServerException(AppException):
    """Exception raised when the store or runtime fails unexpectedly."""
    def __init__(self, detail: str = "Server error", error: Optional[str] = None):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail, error=error)


def error_body(message: str, error: Optional[str] = None, **extra) -> dict:
    """
    Build the JSON body shared by all error responses.

    Args:
        message: Client-facing message
        error: Underlying error text, dropped outside development
        **extra: Additional keys to include

    Returns:
        dict: Response body
    """
    body = {"success": False, "message": message}
    body.update(extra)
    if error and get_settings().is_development:
        body["error"] = error
    return body


def request_id_of(request: Request) -> str:
    """Request id assigned by RequestLoggingMiddleware, or "-" outside it."""
    return getattr(request.state, "request_id", "-")


async def app_exception_handler(request: Request, exc: AppException):
    """
    Handler for application-specific exceptions.

    Args:
        request: The request that caused the exception
        exc: The exception instance

    Returns:
        JSONResponse: Standardized error response
    """
    if exc.status_code >= 500:
        logger.error(f"Request {request_id_of(request)} failed: {exc.detail} ({exc.error})")
    else:
        logger.info(f"Request {request_id_of(request)} rejected with {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail, exc.error),
        headers=exc.headers
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for request validation exceptions.

    Args:
        request: The request that caused the exception
        exc: The validation exception instance

    Returns:
        JSONResponse: Standardized error response with validation details
    """
    logger.info(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation error", errors=jsonable_encoder(exc.errors()))
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for framework-level HTTP errors such as unknown routes.

    Args:
        request: The request that caused the exception
        exc: The HTTP exception instance

    Returns:
        JSONResponse: Standardized error response
    """
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = "Route not found"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None)
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Handler for anything the routes did not anticipate.

    Args:
        request: The request that caused the exception
        exc: The exception instance

    Returns:
        JSONResponse: Generic 500 response
    """
    logger.exception(f"Request {request_id_of(request)} unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Something went wrong!", str(exc))
    )


# Register exception handlers with FastAPI app
def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
