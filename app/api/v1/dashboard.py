"""Traveler and guide dashboard endpoints."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from dateutil import parser as date_parser
from fastapi import APIRouter, Depends
from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, load_booking, load_guide, parse_id
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.permissions import UserRole, require_cancel_booking, require_guide, require_save_guides
from app.domain.booking_state import BookingStatus, assert_traveler_cancellation, can_write_review
from app.models.booking import Booking
from app.models.registry import get_booking_model, get_tour_model, get_user_model
from app.models.tour import DEFAULT_TOUR_IMAGE
from app.models.user import User, default_avatar, saved_guides
from app.schemas.base import MessageResponse
from app.schemas.booking import BookingCancelRequest, BookingResponse
from app.schemas.dashboard import (
    DashboardBooking,
    GuideAnalytics,
    GuideDashboardEnvelope,
    GuideProfileSummary,
    GuideUpcomingTour,
    SavedGuide,
    UserDashboardData,
    UserDashboardEnvelope,
)
from app.schemas.user import Preferences, SavedGuideRequest
from app.services.notification_service import notification_service
from app.services.reporting_service import as_utc, reporting_service

logger = logging.getLogger(__name__)

router = APIRouter()

CLOSED_STATUSES = {BookingStatus.CANCELLED.value, BookingStatus.COMPLETED.value}


def _parse_booking_date(value: str) -> datetime | None:
    """Best-effort parse of the free-form booking date."""
    try:
        return as_utc(date_parser.parse(value))
    except (ValueError, OverflowError):
        return None


def is_upcoming(booking: Booking, now: datetime) -> bool:
    """Open bookings are upcoming whatever their date; closed ones only if still ahead."""
    if booking.status not in CLOSED_STATUSES:
        return True
    booking_date = _parse_booking_date(booking.date)
    return booking_date is not None and booking_date >= now


@router.post("/cancel-booking", response_model=MessageResponse)
async def cancel_booking(
    request: BookingCancelRequest,
    current_user: Annotated[User, Depends(require_cancel_booking)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Cancel one of the current traveler's bookings."""
    booking = await load_booking(db, request.booking_id)
    if booking.traveler_id != current_user.id:
        raise AuthorizationError("You are not authorized to cancel this booking")

    assert_traveler_cancellation(booking.status)

    booking.status = BookingStatus.CANCELLED.value
    notification_service.notify_booking_cancelled(db, booking)
    await db.flush()

    logger.info(f"Booking {booking.id} cancelled by traveler {current_user.id}")
    return MessageResponse(message="Booking canceled successfully")


@router.get("/user-dashboard", response_model=UserDashboardEnvelope)
async def get_user_dashboard(
    current_user: Annotated[User, Depends(require_save_guides)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserDashboardEnvelope:
    """Profile, upcoming and past bookings and saved guides of the traveler."""
    BookingModel = get_booking_model()
    Tour = get_tour_model()
    UserModel = get_user_model()

    result = await db.execute(
        select(BookingModel, Tour)
        .outerjoin(Tour, Tour.id == BookingModel.tour_id)
        .where(BookingModel.traveler_id == current_user.id)
        .order_by(BookingModel.created_at.desc())
    )

    now = datetime.now(UTC)
    upcoming: list[DashboardBooking] = []
    past: list[DashboardBooking] = []
    for booking, tour in result.all():
        card = DashboardBooking(
            id=booking.id,
            tour_name=booking.tour_name,
            guide_name=booking.guide_name,
            location=tour.location if tour else "Unknown location",
            date=booking.date,
            time=booking.time or "09:00 AM",
            status=booking.status,
            image=tour.images[0] if tour and tour.images else DEFAULT_TOUR_IMAGE,
            has_reviewed=booking.has_reviewed,
            can_review=can_write_review(booking.status, booking.has_reviewed),
        )
        (upcoming if is_upcoming(booking, now) else past).append(card)

    guides_result = await db.execute(
        select(UserModel)
        .join(saved_guides, saved_guides.c.guide_id == UserModel.id)
        .where(saved_guides.c.traveler_id == current_user.id, UserModel.role == UserRole.GUIDE.value)
        .order_by(saved_guides.c.created_at.desc())
    )
    saved = [
        SavedGuide(
            id=guide.id,
            name=guide.name,
            location=guide.location or "Location not specified",
            rating=guide.rating or 0,
            specialty=guide.specialty or "Local Guide",
            image=guide.avatar or default_avatar(guide.name),
        )
        for guide in guides_result.scalars().all()
    ]

    preferences = current_user.preferences or {}
    return UserDashboardEnvelope(
        user_data=UserDashboardData(
            name=current_user.name,
            email=current_user.email,
            avatar=current_user.avatar or default_avatar(current_user.name),
            phone=current_user.phone or "",
            location=current_user.location or "",
            bio=current_user.bio or "",
            preferences=Preferences(
                tour_types=preferences.get("tourTypes", []),
                languages=preferences.get("languages", []),
            ),
            profile_completed=current_user.profile_completed,
            upcoming_bookings=upcoming,
            past_bookings=past,
            saved_guides=saved,
        )
    )


@router.get("/guide-dashboard", response_model=GuideDashboardEnvelope)
async def get_guide_dashboard(
    current_user: Annotated[User, Depends(require_guide)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> GuideDashboardEnvelope:
    """Tours, recent bookings and monthly analytics of the current guide."""
    data = await reporting_service.get_guide_dashboard(db, current_user)
    return GuideDashboardEnvelope(
        guide=GuideProfileSummary.model_validate(data["guide"]),
        upcoming_tours=[GuideUpcomingTour(**tour) for tour in data["upcoming_tours"]],
        recent_bookings=[BookingResponse.model_validate(b) for b in data["recent_bookings"]],
        analytics=GuideAnalytics(**data["analytics"]),
    )


@router.post("/save-guide", response_model=MessageResponse)
async def save_guide(
    request: SavedGuideRequest,
    current_user: Annotated[User, Depends(require_save_guides)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Add a guide to the traveler's saved collection."""
    guide = await load_guide(db, request.guide_id)

    existing = await db.execute(
        select(saved_guides.c.guide_id).where(
            saved_guides.c.traveler_id == current_user.id,
            saved_guides.c.guide_id == guide.id,
        )
    )
    if existing.first():
        raise ValidationError("Guide is already saved")

    await db.execute(
        insert(saved_guides).values(
            traveler_id=current_user.id,
            guide_id=guide.id,
            created_at=datetime.now(UTC),
        )
    )
    return MessageResponse(message="Guide added to saved collection")


@router.delete("/remove-saved-guide", response_model=MessageResponse)
async def remove_saved_guide(
    request: SavedGuideRequest,
    current_user: Annotated[User, Depends(require_save_guides)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Remove a guide from the traveler's saved collection."""
    result = await db.execute(
        delete(saved_guides).where(
            saved_guides.c.traveler_id == current_user.id,
            saved_guides.c.guide_id == parse_id(request.guide_id, "Guide"),
        )
    )
    if result.rowcount == 0:
        raise NotFoundError(detail="Guide is not in your saved collection")
    return MessageResponse(message="Guide removed from saved collection")
