"""Core utilities and security modules."""

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    InvalidBookingStatus,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from app.core.security import (
    create_access_token,
    create_user_token,
    get_password_hash,
    verify_password,
    verify_token,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "InvalidBookingStatus",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
    "create_access_token",
    "create_user_token",
    "get_password_hash",
    "verify_password",
    "verify_token",
]
