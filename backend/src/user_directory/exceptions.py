"""Custom exception classes for the user directory.

Every error raised by a resolver carries an HTTP-like status code and a
human-readable message. The dispatcher only exposes the message.
"""

from __future__ import annotations

from typing import Optional


class AppError(Exception):
    """Base exception for application errors.

    All application-specific exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code (default 500).
        detail: Optional additional context.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class ValidationError(AppError):
    """Raised when resolver arguments are missing or malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        detail = f"Field: {field}" if field else None
        super().__init__(message, status_code=400, detail=detail)
        self.field = field


class NotFoundError(AppError):
    """Raised when a user record lookup by id fails."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f"{resource} not found: {identifier}",
            status_code=404,
        )
        self.resource = resource
        self.identifier = identifier


class AuthorizationError(AppError):
    """Raised when the caller is authenticated but not an admin."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, status_code=403)


class AuthenticationError(AppError):
    """Raised when the caller identity is missing."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=401)


class ConflictError(AppError):
    """Raised when an account already exists in the user pool."""

    def __init__(self, message: str):
        super().__init__(message, status_code=409)


class ConfigurationError(AppError):
    """Raised when required configuration is missing.

    Use when environment variables are not properly configured.
    """

    def __init__(self, config_name: str):
        super().__init__(
            f"Missing required configuration: {config_name}",
            status_code=500,
        )
        self.config_name = config_name


class IdentityProviderError(AppError):
    """Raised when a Cognito call fails.

    Conflicts, throttling and missing users are not distinguished beyond
    the error code kept for logging.
    """

    def __init__(
        self,
        operation: str,
        code: Optional[str] = None,
        message: Optional[str] = None,
    ):
        super().__init__(
            message or f"Identity provider error during {operation}",
            status_code=502,
            detail=code,
        )
        self.operation = operation
        self.code = code


class StoreError(AppError):
    """Raised when a DynamoDB operation fails."""

    def __init__(
        self,
        operation: str,
        code: Optional[str] = None,
        message: Optional[str] = None,
    ):
        super().__init__(
            message or f"Data store error during {operation}",
            status_code=500,
            detail=code,
        )
        self.operation = operation
        self.code = code
