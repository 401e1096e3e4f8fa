"""Tour-related Pydantic schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field, model_validator

from app.schemas.base import CamelModel


class TourCreate(CamelModel):
    """Schema for a guide creating a tour."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    duration: str = Field(default="2 hours", max_length=50)
    location: str = Field(..., min_length=1, max_length=200)
    images: list[str] | None = None
    date: datetime
    start_time: str | None = Field(default="09:00 AM", max_length=20)
    max_participants: int = Field(default=10, ge=1)
    available_spots: int | None = Field(default=None, ge=0)
    status: Literal["draft", "active", "inactive"] = "active"

    @model_validator(mode="after")
    def default_available_spots(self) -> "TourCreate":
        if self.available_spots is None:
            self.available_spots = self.max_participants
        return self


class TourResponse(CamelModel):
    """Schema for tour response."""

    id: UUID
    guide_id: UUID
    title: str
    description: str
    price: float
    duration: str
    location: str
    images: list[str]
    date: datetime
    start_time: str | None
    max_participants: int
    available_spots: int
    status: str
    created_at: datetime


class TourEnvelope(CamelModel):
    success: bool = True
    tour: TourResponse


class TourListEnvelope(CamelModel):
    success: bool = True
    tours: list[TourResponse]


class RecommendedTour(TourResponse):
    guide_name: str | None


class RecommendedTourListEnvelope(CamelModel):
    success: bool = True
    tours: list[RecommendedTour]
    count: int
