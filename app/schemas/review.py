"""Review-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from app.schemas.base import CamelModel
from app.schemas.booking import BookingResponse


class ReviewCreate(CamelModel):
    """Schema for reviewing a completed booking."""

    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)

    @field_validator("comment")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class ReviewResponse(CamelModel):
    """Schema for review response."""

    id: UUID
    booking_id: UUID
    traveler_id: UUID
    guide_id: UUID
    tour_id: UUID
    rating: int
    comment: str | None
    created_at: datetime


class ReviewEnvelope(CamelModel):
    success: bool = True
    review: ReviewResponse
    booking: BookingResponse
