"""User-related database models."""

from __future__ import annotations

import re
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.core.security import get_password_hash, verify_password
from app.database import Base

if TYPE_CHECKING:
    from app.models.booking import Booking
    from app.models.tour import Tour

EMAIL_PATTERN = re.compile(r"^\w+([.+-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,})+$")


def utcnow() -> datetime:
    return datetime.now(UTC)


def default_avatar(name: str) -> str:
    """Generated avatar URL used when a user has not uploaded one."""
    return f"https://ui-avatars.com/api/?name={quote(name or '')}&background=random"


def _avatar_from_context(context: Any) -> str:
    return default_avatar(context.get_current_parameters().get("name", ""))


# Traveler -> guide bookmarks
saved_guides = Table(
    "saved_guides",
    Base.metadata,
    Column("traveler_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("guide_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), default=utcnow),
)


class User(Base):
    """Traveler, guide or admin account."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="traveler", index=True
    )  # traveler, guide, admin
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active", index=True
    )  # active, inactive, suspended

    # Profile
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar: Mapped[str] = mapped_column(Text, default=_avatar_from_context)
    phone: Mapped[str | None] = mapped_column(String(30))
    location: Mapped[str | None] = mapped_column(String(200))
    bio: Mapped[str | None] = mapped_column(Text)
    languages: Mapped[list[str]] = mapped_column(JSON, default=list)
    specialty: Mapped[str | None] = mapped_column(String(200))  # guides only
    preferences: Mapped[dict[str, list[str]]] = mapped_column(
        JSON, default=dict
    )  # {"tourTypes": [...], "languages": [...]}
    profile_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    rating: Mapped[float] = mapped_column(Float, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    tours: Mapped[list["Tour"]] = relationship("Tour", back_populates="guide")
    bookings_as_traveler: Mapped[list["Booking"]] = relationship(
        "Booking", back_populates="traveler", foreign_keys="[Booking.traveler_id]"
    )
    bookings_as_guide: Mapped[list["Booking"]] = relationship(
        "Booking", back_populates="guide", foreign_keys="[Booking.guide_id]"
    )

    @validates("email")
    def normalize_email(self, key: str, value: str) -> str:
        value = (value or "").strip().lower()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Please enter a valid email")
        return value

    def set_password(self, password: str) -> None:
        """Hash and store a new password."""
        self.password_hash = get_password_hash(password)

    def check_password(self, password: str) -> bool:
        return verify_password(password, self.password_hash)
