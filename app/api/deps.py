"""API dependencies for authentication and common operations."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from app.core.security import verify_token
from app.database import get_db
from app.models.booking import Booking
from app.models.registry import get_booking_model, get_user_model
from app.models.user import User

logger = logging.getLogger(__name__)

# Security scheme (the web client sends the token as a cookie instead)
security = HTTPBearer(auto_error=False)

__all__ = [
    "get_db",
    "get_token",
    "get_current_user",
    "get_optional_token",
    "load_booking",
    "load_guide",
    "BookingAccessChecker",
    "require_booking_access",
]


async def get_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token: Annotated[str | None, Cookie(alias=settings.token_cookie_name)] = None,
) -> str:
    """Read the access token from the Authorization header or cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    if token:
        return token
    raise AuthenticationError("Authentication required")


async def get_current_user(
    token: Annotated[str, Depends(get_token)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    payload = verify_token(token)
    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError("Invalid token format")

    UserModel = get_user_model()
    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise AuthenticationError("User not found")
    return user


async def get_optional_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token: Annotated[str | None, Cookie(alias=settings.token_cookie_name)] = None,
) -> str | None:
    """Like ``get_token`` for public routes; ``None`` when no token was sent."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return token or None


def parse_id(value: str | UUID, resource: str) -> UUID:
    """Parse a path/body identifier; malformed ids behave like missing ones."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise NotFoundError(detail=f"{resource} not found")


async def load_booking(db: AsyncSession, booking_id: str | UUID) -> Booking:
    """Fetch a booking or raise ``NotFoundError``."""
    BookingModel = get_booking_model()
    result = await db.execute(
        select(BookingModel).where(BookingModel.id == parse_id(booking_id, "Booking"))
    )
    booking = result.scalar_one_or_none()
    if not booking:
        raise NotFoundError(detail="Booking not found")
    return booking


async def load_guide(db: AsyncSession, guide_id: str | UUID) -> User:
    """Fetch a guide account or raise ``NotFoundError``."""
    guide = await db.get(get_user_model(), parse_id(guide_id, "Guide"))
    if not guide or guide.role != "guide":
        raise NotFoundError(detail="Guide not found")
    return guide


class BookingAccessChecker:
    """Check that the current user may see a booking."""

    def __init__(self, allow_traveler: bool = True, allow_guide: bool = True):
        self.allow_traveler = allow_traveler
        self.allow_guide = allow_guide

    async def __call__(
        self,
        booking_id: str,
        current_user: Annotated[User, Depends(get_current_user)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> Booking:
        booking = await load_booking(db, booking_id)

        # Admin always has access
        if current_user.role == "admin":
            return booking
        if self.allow_traveler and booking.traveler_id == current_user.id:
            return booking
        if self.allow_guide and booking.guide_id == current_user.id:
            return booking

        logger.info(f"User {current_user.id} denied access to booking {booking.id}")
        raise AuthorizationError("You are not authorized to view this booking")


require_booking_access = BookingAccessChecker(allow_traveler=True, allow_guide=True)
require_traveler_booking_access = BookingAccessChecker(allow_traveler=True, allow_guide=False)
