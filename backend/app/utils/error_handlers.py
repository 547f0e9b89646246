"""
Centralized error handling and user-friendly error messages.
"""
import logging
from fastapi import HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Validation error. `errors` is a list of {field, message} dicts."""
    def __init__(self, message: str, errors: list[dict] | None = None, details: dict | None = None):
        details = dict(details or {})
        if errors:
            details["errors"] = errors
        super().__init__(message, status_code=400, details=details)
        self.errors = errors or []


class NotFoundError(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, status_code=404, details=details)


class UnauthorizedError(AppError):
    """Unauthorized access error, tagged with a machine-readable reason."""
    def __init__(self, message: str = "Unauthorized access", reason: str = "unauthorized", details: dict | None = None):
        details = dict(details or {})
        details["reason"] = reason
        super().__init__(message, status_code=401, details=details)
        self.reason = reason


class AIServiceError(AppError):
    """AI provider failed and no fallback exists for the operation."""
    def __init__(self, message: str = "AI service temporarily unavailable", details: dict | None = None):
        super().__init__(message, status_code=500, details=details)


class DatabaseError(AppError):
    """Database error."""
    def __init__(self, message: str = "Database operation failed", details: dict | None = None):
        super().__init__(message, status_code=500, details=details)


# User-friendly error messages
ERROR_MESSAGES = {
    # Authentication
    "invalid_credentials": "Invalid email or password. Please try again.",
    "email_exists": "An account with this email already exists. Please login instead.",
    "missing_token": "No authentication token, authorization denied.",
    "token_expired": "Your session has expired. Please login again.",
    "invalid_token": "Invalid authentication token.",
    "user_not_found": "User not found.",
    "invalid_reset_token": "Invalid or expired reset token.",
    "image_too_large": "Image too large. Please upload an image smaller than 1MB.",

    # Resumes
    "resume_not_found": "Resume not found.",
    "invalid_resume": "Resume data is invalid. Please check the highlighted fields.",

    # AI services
    "invalid_section": "Invalid section.",
    "cover_letter_failed": "Error generating cover letter.",

    # General
    "server_error": "Something went wrong on our end. Please try again later.",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def handle_database_error(error: Exception, operation: str = "") -> HTTPException:
    """Handle database errors with user-friendly messages."""
    logger.error("Database error during %s: %s", operation, error)

    error_str = str(error).lower()

    if "duplicate" in error_str or "unique" in error_str:
        return HTTPException(
            status_code=409,
            detail="This record already exists. Please check your input."
        )

    if "foreign key" in error_str:
        return HTTPException(
            status_code=400,
            detail="Invalid reference. The related record may have been deleted."
        )

    if "connection" in error_str or "operational" in error_str:
        return HTTPException(
            status_code=503,
            detail=get_error_message("database_error")
        )

    return HTTPException(
        status_code=500,
        detail=get_error_message("server_error")
    )


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
    }

    if details:
        content.update(details)

    return JSONResponse(
        status_code=status_code,
        content=content
    )
