from typing import Dict, Any, Optional, List
from datetime import datetime
from fastapi import status
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)


class BaseCustomException(Exception):
    """
    Base class for application errors.

    Subclasses set ``status_code``, ``error_code`` and ``default_message``;
    the exception handlers in ``emhr.main`` turn them into the JSON envelope.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message or self.default_message
        self.details = details or {}
        if error_code:
            self.error_code = error_code
        super().__init__(self.message)


class ValidationError(BaseCustomException):
    """Invalid or missing request input"""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class BusinessLogicError(BaseCustomException):
    """A workflow rule refused the operation (e.g. signing an unapproved note)"""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BUSINESS_LOGIC_ERROR"
    default_message = "Business logic error"


class AuthenticationError(BaseCustomException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "AUTHENTICATION_ERROR"
    default_message = "Not authenticated"


class AuthorizationError(BaseCustomException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "AUTHORIZATION_ERROR"
    default_message = "Access denied"


class LockedResourceError(AuthorizationError):
    """Raised when a signed/locked record is modified"""
    error_code = "RESOURCE_LOCKED"
    default_message = "Resource is locked"


class NotFoundError(BaseCustomException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND_ERROR"
    default_message = "Resource not found"


class ConflictError(BaseCustomException):
    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT_ERROR"
    default_message = "Resource conflict"


class DatabaseError(BaseCustomException):
    error_code = "DATABASE_ERROR"
    default_message = "Database operation failed"


class EncryptionError(BaseCustomException):
    error_code = "ENCRYPTION_ERROR"
    default_message = "Encryption operation failed"


# Response models for errors
class ErrorResponse(BaseModel):
    """Standard error response model"""
    error: str
    message: str
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None
    request_id: Optional[str] = None


class ValidationErrorResponse(BaseModel):
    """Validation error response model"""
    error: str = "Validation Error"
    message: str
    error_code: Optional[str] = None
    validation_errors: Optional[List[Dict[str, Any]]] = None
    timestamp: Optional[str] = None
    request_id: Optional[str] = None


_STATUS_LABELS = {
    400: "Bad Request",
    401: "Authentication Error",
    403: "Authorization Error",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    413: "Payload Too Large",
    500: "Internal Server Error",
}


def create_error_response(
    exception: BaseCustomException,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create standardized error response"""
    response = {
        "error": exception.__class__.__name__.replace("Error", " Error"),
        "message": exception.message,
        "error_code": exception.error_code,
        "timestamp": datetime.utcnow().isoformat(),
        "request_id": request_id
    }

    if exception.details:
        response["details"] = exception.details

    return response


def create_http_error_response(
    status_code: int,
    message: str,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create error response for framework-raised HTTP errors"""
    return {
        "error": _STATUS_LABELS.get(status_code, "HTTP Error"),
        "message": message,
        "error_code": f"HTTP_{status_code}",
        "timestamp": datetime.utcnow().isoformat(),
        "request_id": request_id
    }


def create_validation_error_response(
    validation_errors: List[Dict[str, Any]],
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create validation error response"""
    fields = [".".join(str(p) for p in err.get("loc", []) if p != "body") for err in validation_errors]
    message = "Invalid request"
    if fields:
        message = f"Invalid or missing fields: {', '.join(f for f in fields if f)}"

    return {
        "error": "Validation Error",
        "message": message,
        "error_code": "VALIDATION_ERROR",
        "validation_errors": [
            {"field": field, "message": err.get("msg", "")}
            for field, err in zip(fields, validation_errors)
        ],
        "timestamp": datetime.utcnow().isoformat(),
        "request_id": request_id
    }


def handle_database_error(error: Exception, operation: str = "database operation") -> BaseCustomException:
    """Convert a SQLAlchemy error into a custom exception"""
    logger.error(f"Database error during {operation}: {error}")

    if "constraint" in str(error).lower() or "unique" in str(error).lower():
        return ConflictError(
            message="Database constraint violation",
            details={"operation": operation},
            error_code="DATABASE_CONSTRAINT_ERROR"
        )

    error_message = "Database operation failed"
    if "connection" in str(error).lower():
        error_message = "Database connection failed"
    elif "timeout" in str(error).lower():
        error_message = "Database operation timed out"

    return DatabaseError(
        message=error_message,
        details={"operation": operation},
        error_code="DATABASE_OPERATION_ERROR"
    )
