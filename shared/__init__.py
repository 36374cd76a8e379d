"""
Shared utilities and models for the Farm Supply back office.
"""

from .exceptions import (
    PlatformException,
    AuthException,
    AuthorizationException,
    ValidationError,
    DuplicateError,
    NotFoundError,
    StorageError
)

__all__ = [
    "PlatformException",
    "AuthException",
    "AuthorizationException",
    "ValidationError",
    "DuplicateError",
    "NotFoundError",
    "StorageError"
]
