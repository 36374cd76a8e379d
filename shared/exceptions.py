"""
Shared exception classes for the Farm Supply back office.
Every failure raised by the business rules and the repository is one of these
typed exceptions, so the API layer can report it without guessing.
"""

from typing import Optional, Dict, Any


class PlatformException(Exception):
    """Base exception class for all platform-specific exceptions."""

    status_code: int = 500

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class AuthException(PlatformException):
    """Exception raised for authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", error_code: str = "AUTH_ERROR", details: Dict[str, Any] = None):
        super().__init__(message, error_code, details)


class AuthorizationException(PlatformException):
    """Exception raised for authorization-related errors."""

    status_code = 403

    def __init__(self, message: str = "Access denied", error_code: str = "AUTHZ_ERROR", details: Dict[str, Any] = None):
        super().__init__(message, error_code, details)


class ValidationError(PlatformException):
    """A field constraint or a bulk-pricing rule was violated; nothing was written."""

    status_code = 422

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        error_code: str = "VALIDATION_ERROR",
        details: Dict[str, Any] = None
    ):
        details = dict(details or {})
        if field:
            details.setdefault("field", field)
        self.field = field
        super().__init__(message, error_code, details)


class DuplicateError(PlatformException):
    """A uniqueness key (SKU, email, supplier+inventory pair) is already taken."""

    status_code = 409

    def __init__(self, message: str = "Record already exists", error_code: str = "DUPLICATE_ERROR", details: Dict[str, Any] = None):
        super().__init__(message, error_code, details)


class NotFoundError(PlatformException):
    """The record, or a record it references, does not exist."""

    status_code = 404

    def __init__(self, message: str = "Record not found", error_code: str = "NOT_FOUND", details: Dict[str, Any] = None):
        super().__init__(message, error_code, details)


class StorageError(PlatformException):
    """The store is unreachable or rejected the operation for another reason."""

    status_code = 500

    def __init__(self, message: str = "Storage error", error_code: str = "STORAGE_ERROR", details: Dict[str, Any] = None):
        super().__init__(message, error_code, details)
