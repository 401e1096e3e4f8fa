"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import (
    admin,
    auth,
    bookings,
    dashboard,
    guides,
    notifications,
    tours,
    users,
)

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Users
api_router.include_router(users.router, prefix="/users", tags=["Users"])

# Tours
api_router.include_router(tours.router, prefix="/tours", tags=["Tours"])

# Guides
api_router.include_router(guides.router, prefix="/guides", tags=["Guides"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Dashboard
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])

# Notifications
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
