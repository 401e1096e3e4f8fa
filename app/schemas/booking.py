"""Booking-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import Field, computed_field, field_validator

from app.core.exceptions import ValidationError
from app.domain.booking_state import INITIAL_STATUS, can_write_review, parse_status
from app.schemas.base import CamelModel


class BookingCreate(CamelModel):
    """Schema for a traveler's booking request.

    ``total_price`` is the client's ``tour.price * participants`` and is
    stored exactly as sent.
    """

    guide_id: UUID
    guide_name: str = Field(..., min_length=1, max_length=100)
    guide_email: str | None = None
    guide_phone: str | None = None
    tour_id: UUID
    tour_name: str = Field(..., min_length=1, max_length=200)
    date: str = Field(..., min_length=1, max_length=50)
    time: str | None = Field(None, max_length=20)
    participants: int = Field(..., ge=1, le=100, strict=True)
    total_price: float = Field(..., ge=0)
    status: str = INITIAL_STATUS.value

    @field_validator("date", "guide_name", "tour_name")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def initial_status(cls, v: object) -> str:
        try:
            status = parse_status(v)
        except ValidationError as exc:
            raise ValueError(exc.detail) from exc
        if status is not INITIAL_STATUS:
            raise ValueError(f"New bookings must be {INITIAL_STATUS.value}")
        return status.value


class BookingResponse(CamelModel):
    """Schema for booking response."""

    id: UUID
    traveler_id: UUID
    traveler_name: str
    traveler_email: str
    guide_id: UUID
    guide_name: str
    tour_id: UUID
    tour_name: str
    date: str
    time: str | None
    participants: int
    total_price: float
    status: str
    has_reviewed: bool
    created_at: datetime

    @computed_field(alias="canReview")
    @property
    def can_review(self) -> bool:
        return can_write_review(self.status, self.has_reviewed)


class TravelerInfo(CamelModel):
    id: UUID
    name: str
    email: str


class GuideInfo(CamelModel):
    id: UUID
    name: str
    email: str
    phone: str | None = None
    avatar: str | None = None
    bio: str | None = None
    languages: list[str] = []
    specialty: str | None = None


class TourInfo(CamelModel):
    id: UUID
    title: str
    price: float
    duration: str
    description: str
    images: list[str] = []
    location: str


class BookingDetailResponse(BookingResponse):
    """Booking with the related traveler, guide and tour.

    The nested objects reflect current records; the flat ``*_name`` fields
    are the values captured when the booking was made.
    """

    traveler: TravelerInfo
    guide: GuideInfo | None = None
    tour: TourInfo | None = None


class BookingEnvelope(CamelModel):
    success: bool = True
    booking: BookingResponse


class BookingDetailEnvelope(CamelModel):
    success: bool = True
    booking: BookingDetailResponse


class BookingListEnvelope(CamelModel):
    success: bool = True
    bookings: list[BookingResponse]


class BookingStatusUpdate(CamelModel):
    """Guide-side status change; validated against ``BookingStatus``."""

    status: str


class BookingStatusInfo(CamelModel):
    id: UUID
    status: str


class BookingStatusEnvelope(CamelModel):
    success: bool = True
    message: str
    booking: BookingStatusInfo


class BookingCancelRequest(CamelModel):
    """Traveler cancellation from the dashboard."""

    booking_id: str = Field(..., min_length=1)
