"""
Application exceptions and error handling.

Defines custom exceptions and error handlers for consistent error responses.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder

from .logging import get_logger

logger = get_logger(__name__)


# Custom Exceptions

class EigenLabError(Exception):
    """Base exception for Eigen Explorer errors"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class CalculationError(EigenLabError):
    """Raised when the eigendecomposition fails"""

    def __init__(self, error: str, size: Optional[int] = None):
        super().__init__(
            message=error,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"size": size, "error": error}
        )


class InvalidMatrixError(EigenLabError):
    """Raised when the submitted matrix is not a supported square matrix"""

    def __init__(self, error: str):
        super().__init__(
            message=f"Invalid matrix: {error}",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"error": error}
        )


class SessionNotFoundError(EigenLabError):
    """Raised when a calculator session is not found"""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session '{session_id}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"session_id": session_id}
        )


class ValidationError(EigenLabError):
    """Raised for validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details
        )


# Error Response Models

def create_error_response(
    error: Exception,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    include_details: bool = True
) -> JSONResponse:
    """Create standardized error response"""

    error_data = {
        "error": {
            "type": error.__class__.__name__,
            "message": str(error),
        }
    }

    # Add details for application errors
    if isinstance(error, EigenLabError) and include_details:
        error_data["error"]["details"] = error.details

    # Client errors are expected; only server errors carry a traceback
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"Error occurred: {error}",
        extra_data={
            "error_type": error.__class__.__name__,
            "status_code": status_code,
            **(error.details if isinstance(error, EigenLabError) else {})
        },
        exc_info=status_code >= 500
    )

    return JSONResponse(
        status_code=status_code,
        content=error_data
    )


# Exception Handlers

async def eigenlab_error_handler(request: Request, exc: EigenLabError) -> JSONResponse:
    """Handle EigenLabError exceptions"""
    return create_error_response(exc, exc.status_code)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTPException exceptions"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "type": "HTTPException",
                "message": exc.detail,
            }
        }
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors"""
    errors = jsonable_encoder(exc.errors())
    logger.warning(
        "Validation error",
        extra_data={"errors": errors}
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "type": "ValidationError",
                "message": "Request validation failed",
                "details": errors
            }
        }
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors"""
    logger.exception(
        "Unexpected error occurred",
        extra_data={"path": request.url.path}
    )

    # Don't expose internal errors in production
    from .config import settings
    include_details = settings.DEBUG

    message = str(exc) if include_details else "An internal error occurred"

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "type": "InternalServerError",
                "message": message,
            }
        }
    )


# Register all error handlers
def register_error_handlers(app):
    """Register error handlers with FastAPI app"""
    app.add_exception_handler(EigenLabError, eigenlab_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)
