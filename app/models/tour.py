"""Tour database model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import utcnow

if TYPE_CHECKING:
    from app.models.booking import Booking
    from app.models.user import User

DEFAULT_TOUR_IMAGE = "/images/default-tour.jpg"


def _default_images() -> list[str]:
    return [DEFAULT_TOUR_IMAGE]


class Tour(Base):
    """A bookable offering created by a guide."""

    __tablename__ = "tours"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    guide_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    duration: Mapped[str] = mapped_column(String(50), nullable=False, default="2 hours")
    location: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    images: Mapped[list[str]] = mapped_column(JSON, default=_default_images)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    start_time: Mapped[str | None] = mapped_column(String(20), default="09:00 AM")

    # Capacity
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    available_spots: Mapped[int] = mapped_column(Integer, nullable=False, default=10)

    status: Mapped[str] = mapped_column(
        String(20), default="active"
    )  # draft, active, inactive

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    guide: Mapped["User"] = relationship("User", back_populates="tours")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="tour")
