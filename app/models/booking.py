"""Booking database model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import utcnow

if TYPE_CHECKING:
    from app.models.review import Review
    from app.models.tour import Tour
    from app.models.user import User


class Booking(Base):
    """A traveler's reservation of a guide's tour on a given date.

    Traveler, guide and tour names are copied onto the booking when it is
    created and are not refreshed when the source records change.
    """

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Traveler
    traveler_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    traveler_name: Mapped[str] = mapped_column(String(100), nullable=False)
    traveler_email: Mapped[str] = mapped_column(String(255), nullable=False)

    # Guide
    guide_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    guide_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Tour
    tour_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tours.id"), nullable=False)
    tour_name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Schedule (date is kept as the string the client submitted)
    date: Mapped[str] = mapped_column(String(50), nullable=False)
    time: Mapped[str | None] = mapped_column(String(20), default="09:00 AM")

    participants: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[float] = mapped_column(Float, nullable=False)  # tour.price * participants

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )  # pending, confirmed, cancelled, completed
    has_reviewed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relationships
    traveler: Mapped["User"] = relationship(
        "User", back_populates="bookings_as_traveler", foreign_keys=[traveler_id]
    )
    guide: Mapped["User"] = relationship(
        "User", back_populates="bookings_as_guide", foreign_keys=[guide_id]
    )
    tour: Mapped["Tour"] = relationship("Tour", back_populates="bookings")
    review: Mapped["Review | None"] = relationship(
        "Review", back_populates="booking", uselist=False
    )


Index("ix_bookings_traveler_recent", Booking.traveler_id, Booking.created_at.desc())
Index("ix_bookings_guide_recent", Booking.guide_id, Booking.created_at.desc())
Index("ix_bookings_date", Booking.date)
