"""Role-based access control and permissions."""

from enum import Enum
from typing import Any, Callable

from fastapi import Depends

from app.api.deps import get_current_user
from app.core.exceptions import AuthorizationError
from app.models.user import User


class UserRole(str, Enum):
    """User roles in the system."""

    TRAVELER = "traveler"
    GUIDE = "guide"
    ADMIN = "admin"


class Permission(str, Enum):
    """System permissions."""

    # Travelers
    SAVE_GUIDES = "save_guides"

    # Tours
    CREATE_TOUR = "create_tour"
    VIEW_OWN_TOURS = "view_own_tours"

    # Bookings
    CREATE_BOOKING = "create_booking"
    CANCEL_BOOKING = "cancel_booking"
    REVIEW_BOOKING = "review_booking"
    UPDATE_BOOKING_STATUS = "update_booking_status"
    VIEW_GUIDE_BOOKINGS = "view_guide_bookings"

    # Admin
    VIEW_PLATFORM_STATS = "view_platform_stats"
    VIEW_ALL_BOOKINGS = "view_all_bookings"
    VIEW_ALL_GUIDES = "view_all_guides"
    VIEW_ALL_TOURS = "view_all_tours"


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.TRAVELER: {
        Permission.SAVE_GUIDES,
        Permission.CREATE_BOOKING,
        Permission.CANCEL_BOOKING,
        Permission.REVIEW_BOOKING,
    },
    UserRole.GUIDE: {
        Permission.CREATE_TOUR,
        Permission.VIEW_OWN_TOURS,
        Permission.UPDATE_BOOKING_STATUS,
        Permission.VIEW_GUIDE_BOOKINGS,
    },
    UserRole.ADMIN: {
        # Admins see everything but do not act on behalf of travelers or guides
        Permission.VIEW_PLATFORM_STATS,
        Permission.VIEW_ALL_BOOKINGS,
        Permission.VIEW_ALL_GUIDES,
        Permission.VIEW_ALL_TOURS,
    },
}


def _role_of(user: User) -> UserRole | None:
    try:
        return UserRole(user.role)
    except ValueError:
        return None


def has_permission(role: UserRole | None, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    if role is None:
        return False
    return permission in ROLE_PERMISSIONS.get(role, set())


def require_role(*allowed_roles: UserRole, detail: str | None = None) -> Callable[..., Any]:
    """Dependency to require specific roles."""

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if _role_of(current_user) not in allowed_roles:
            raise AuthorizationError(detail or "Unauthorized access")
        return current_user

    return role_checker


def require_permission(permission: Permission, detail: str | None = None) -> Callable[..., Any]:
    """Dependency to require a specific permission."""

    async def permission_checker(current_user: User = Depends(get_current_user)) -> User:
        if not has_permission(_role_of(current_user), permission):
            raise AuthorizationError(detail or "Unauthorized access")
        return current_user

    return permission_checker


# Convenience dependencies
ADMIN_DENIED = "Unauthorized access: Admin privileges required"

require_guide = require_role(UserRole.GUIDE)

require_view_platform_stats = require_permission(Permission.VIEW_PLATFORM_STATS, detail=ADMIN_DENIED)
require_view_all_bookings = require_permission(Permission.VIEW_ALL_BOOKINGS, detail=ADMIN_DENIED)
require_view_all_guides = require_permission(Permission.VIEW_ALL_GUIDES, detail=ADMIN_DENIED)
require_view_all_tours = require_permission(Permission.VIEW_ALL_TOURS, detail=ADMIN_DENIED)

require_create_booking = require_permission(
    Permission.CREATE_BOOKING, detail="Only travelers can create bookings"
)
require_cancel_booking = require_permission(Permission.CANCEL_BOOKING)
require_review_booking = require_permission(Permission.REVIEW_BOOKING)
require_update_booking_status = require_permission(Permission.UPDATE_BOOKING_STATUS)
require_save_guides = require_permission(Permission.SAVE_GUIDES)
require_view_guide_bookings = require_permission(Permission.VIEW_GUIDE_BOOKINGS)
require_view_own_tours = require_permission(Permission.VIEW_OWN_TOURS)
require_create_tour = require_permission(Permission.CREATE_TOUR, detail="Only guides can create tours")
