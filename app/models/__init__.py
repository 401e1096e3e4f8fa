"""Database models."""

from app.models.booking import Booking
from app.models.notification import Notification
from app.models.review import Review
from app.models.tour import Tour
from app.models.user import User, saved_guides

__all__ = [
    "User",
    "saved_guides",
    "Tour",
    "Booking",
    "Review",
    "Notification",
]
