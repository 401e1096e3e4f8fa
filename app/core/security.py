"""Security utilities for authentication."""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.core.exceptions import AuthenticationError

# Password hashing context using Argon2
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using Argon2."""
    return pwd_context.hash(password)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_user_token(user_id: str, email: str, role: str) -> str:
    """Access token carrying the claims the API reads back."""
    return create_access_token({"sub": user_id, "email": email, "role": role})


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT access token.

    Tokens minted by older clients carry the user id as ``id`` or
    ``userId`` instead of ``sub``; all three are accepted.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise AuthenticationError("Invalid or expired token")

    if payload.get("type", "access") != "access":
        raise AuthenticationError("Invalid token type")

    user_id = payload.get("sub") or payload.get("id") or payload.get("userId")
    if not user_id:
        raise AuthenticationError("Invalid token format")
    payload["sub"] = str(user_id)
    return payload
