"""User-related Pydantic schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from app.models.user import EMAIL_PATTERN
from app.schemas.base import CamelModel
from app.schemas.tour import TourResponse


class Preferences(CamelModel):
    tour_types: list[str] = []
    languages: list[str] = []


class UserCreate(CamelModel):
    """Schema for user registration."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: Literal["traveler", "guide"] = "traveler"

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        v = v.strip().lower()
        # Stricter than EmailStr; the same rule the model enforces on write
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please enter a valid email")
        return v


class UserUpdate(CamelModel):
    """Schema for updating user profile."""

    name: str | None = Field(None, min_length=1, max_length=100)
    avatar: str | None = None
    phone: str | None = Field(None, max_length=30)
    location: str | None = Field(None, max_length=200)
    bio: str | None = Field(None, max_length=2000)
    languages: list[str] | None = None
    specialty: str | None = Field(None, max_length=200)
    preferences: Preferences | None = None
    password: str | None = Field(None, min_length=8, max_length=128)


class UserResponse(CamelModel):
    """Schema for user response."""

    id: UUID
    email: str
    name: str
    role: str
    avatar: str | None
    phone: str | None
    location: str | None
    bio: str | None
    languages: list[str] | None
    specialty: str | None
    preferences: Preferences | None
    profile_completed: bool
    rating: float
    created_at: datetime


class UserEnvelope(CamelModel):
    success: bool = True
    user: UserResponse


class GuideSummary(CamelModel):
    """Public view of a guide."""

    id: UUID
    name: str
    avatar: str | None
    location: str | None
    bio: str | None
    languages: list[str] | None
    specialty: str | None
    rating: float


class GuideListEnvelope(CamelModel):
    success: bool = True
    guides: list[GuideSummary]


class SavedGuideRequest(CamelModel):
    guide_id: str = Field(..., min_length=1)


class GuideProfile(CamelModel):
    """Public guide page: profile plus every tour the guide offers."""

    id: UUID
    name: str
    location: str
    languages: list[str]
    specialties: list[str]
    rating: float
    reviews: int
    bio: str
    profile_image: str
    slug: str
    tours: list[TourResponse]


class GuideProfileEnvelope(CamelModel):
    success: bool = True
    guide: GuideProfile
