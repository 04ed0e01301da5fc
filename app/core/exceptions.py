"""
Application exception hierarchy.

Every domain outcome the contribution workflow can report maps to one class
here; `app.core.error_handlers` renders them into the shared error envelope.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class AppException(HTTPException):
    """
    Base class for exceptions rendered by the application error handlers.

    `error_code` is the stable machine-readable code clients branch on;
    `message` is the human-readable explanation.
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(
            status_code=status_code,
            detail={
                "error_code": error_code,
                "message": message,
                "details": self.details,
            },
            headers=headers,
        )


# ==================== Identity ====================


class AuthenticationException(AppException):
    """No acting user could be resolved for the request."""

    def __init__(
        self,
        error_code: str = "not_authenticated",
        message: str = "Not authenticated",
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=error_code,
            message=message,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidTokenException(AuthenticationException):
    """The bearer token cannot be decoded or names no user."""

    def __init__(self):
        super().__init__(
            error_code="invalid_token",
            message="Invalid authentication token",
        )


# ==================== Access ====================


class PermissionDeniedException(AppException):
    """The actor is known but the access policy refuses the operation."""

    def __init__(
        self, message: str = "You don't have permission to perform this action"
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="permission_denied",
            message=message,
        )


# ==================== Records and state ====================


class ResourceNotFoundException(AppException):
    """An idea, user or contribution request does not exist (or is not visible)."""

    def __init__(self, resource: str, identifier: Optional[Any] = None):
        details = {} if identifier is None else {"identifier": str(identifier)}
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="resource_not_found",
            message=f"{resource} not found",
            details=details,
        )


class ResourceConflictException(AppException):
    """The record is no longer in the state the operation requires."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="resource_conflict",
            message=message,
            details=details,
        )


class DuplicateRequestException(AppException):
    """The (idea, user) pair already holds a pending or accepted request."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="duplicate_request",
            message=message,
            details=details,
        )


class ValidationException(AppException):
    """Input failed a domain rule (blank message, unknown decision, bad limit)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="validation_error",
            message=message,
            details={"field": field} if field else {},
        )


# ==================== Backing services ====================


class DependencyFailureException(AppException):
    """The record store or another backing service is unavailable."""

    def __init__(self, service_name: str, message: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="dependency_failure",
            message=message or f"{service_name} is currently unavailable",
            details={"service": service_name},
        )


__all__ = [
    "AppException",
    "AuthenticationException",
    "DependencyFailureException",
    "DuplicateRequestException",
    "InvalidTokenException",
    "PermissionDeniedException",
    "ResourceConflictException",
    "ResourceNotFoundException",
    "ValidationException",
]
