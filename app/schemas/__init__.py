"""Pydantic schemas for API validation."""

from app.schemas.base import CamelModel, MessageResponse
from app.schemas.booking import (
    BookingCancelRequest,
    BookingCreate,
    BookingDetailResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from app.schemas.review import ReviewCreate, ReviewResponse
from app.schemas.tour import TourCreate, TourResponse
from app.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "CamelModel",
    "MessageResponse",
    # Booking
    "BookingCreate",
    "BookingResponse",
    "BookingDetailResponse",
    "BookingStatusUpdate",
    "BookingCancelRequest",
    # Review
    "ReviewCreate",
    "ReviewResponse",
    # Tour
    "TourCreate",
    "TourResponse",
    # User
    "UserCreate",
    "UserUpdate",
    "UserResponse",
]
