"""Guide-facing booking management and the public guide directory."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_optional_token, load_guide, parse_id
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.permissions import UserRole, require_update_booking_status, require_view_guide_bookings
from app.domain.booking_state import BookingStatus, assert_guide_transition, parse_status
from app.models.registry import get_booking_model, get_user_model
from app.models.user import User
from app.schemas.booking import (
    BookingListEnvelope,
    BookingResponse,
    BookingStatusEnvelope,
    BookingStatusInfo,
    BookingStatusUpdate,
)
from app.schemas.tour import TourResponse
from app.schemas.user import GuideListEnvelope, GuideProfile, GuideProfileEnvelope, GuideSummary
from app.services.notification_service import notification_service
from app.services.reporting_service import reporting_service

logger = logging.getLogger(__name__)

router = APIRouter()

GUIDE_LIST_LIMIT = 50


@router.get("", response_model=GuideListEnvelope)
async def list_guides(
    db: Annotated[AsyncSession, Depends(get_db)],
    location: str | None = Query(default=None),
    language: str | None = Query(default=None),
    specialty: str | None = Query(default=None),
    rating: float = Query(default=0, ge=0, le=5),
) -> GuideListEnvelope:
    """List guides, optionally filtered by simple field matches."""
    UserModel = get_user_model()

    query = select(UserModel).where(UserModel.role == UserRole.GUIDE.value)
    if location:
        query = query.where(UserModel.location.ilike(f"%{location}%"))
    if specialty:
        query = query.where(UserModel.specialty.ilike(f"%{specialty}%"))
    if rating > 0:
        query = query.where(UserModel.rating >= rating)

    result = await db.execute(query.order_by(UserModel.rating.desc(), UserModel.name))
    guides = list(result.scalars().all())

    # Languages are a JSON list, matched in Python to stay backend-neutral
    if language:
        needle = language.lower()
        guides = [g for g in guides if any(needle in lang.lower() for lang in g.languages or [])]

    return GuideListEnvelope(
        guides=[GuideSummary.model_validate(g) for g in guides[:GUIDE_LIST_LIMIT]]
    )


@router.get("/profile", response_model=GuideProfileEnvelope)
async def get_guide_profile(
    db: Annotated[AsyncSession, Depends(get_db)],
    token: Annotated[str | None, Depends(get_optional_token)],
    slug: str | None = Query(default=None),
) -> GuideProfileEnvelope:
    """Public profile of the guide named by ``slug``, or of the signed-in guide."""
    if slug:
        guide = await load_guide(db, slug)
    elif token:
        guide = await get_current_user(token, db)
        if guide.role != UserRole.GUIDE.value:
            raise AuthorizationError("Unauthorized access")
    else:
        raise ValidationError("Either slug or valid authentication required")

    data = await reporting_service.get_guide_profile(db, guide)
    tours = [TourResponse.model_validate(t) for t in data.pop("tours")]
    logger.debug(f"Found {len(tours)} tours for guide {guide.id}")
    return GuideProfileEnvelope(guide=GuideProfile(**data, tours=tours))


@router.get("/bookings", response_model=BookingListEnvelope)
async def get_guide_bookings(
    current_user: Annotated[User, Depends(require_view_guide_bookings)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(default=None, alias="status"),
) -> BookingListEnvelope:
    """Bookings received by the current guide, newest first."""
    BookingModel = get_booking_model()

    query = select(BookingModel).where(BookingModel.guide_id == current_user.id)
    if status_filter:
        query = query.where(BookingModel.status == parse_status(status_filter).value)

    result = await db.execute(query.order_by(BookingModel.created_at.desc()))
    return BookingListEnvelope(
        bookings=[BookingResponse.model_validate(b) for b in result.scalars().all()]
    )


@router.patch("/bookings/{booking_id}", response_model=BookingStatusEnvelope)
async def update_booking_status(
    booking_id: str,
    update: BookingStatusUpdate,
    current_user: Annotated[User, Depends(require_update_booking_status)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingStatusEnvelope:
    """Move one of the guide's bookings to any status.

    The traveler is notified only when the status actually changes.
    """
    target = parse_status(update.status)
    BookingModel = get_booking_model()

    result = await db.execute(
        select(BookingModel).where(
            BookingModel.id == parse_id(booking_id, "Booking"),
            BookingModel.guide_id == current_user.id,
        )
    )
    booking = result.scalar_one_or_none()
    if not booking:
        raise NotFoundError(detail="Booking not found or not authorized")

    previous = booking.status
    target = assert_guide_transition(previous, target)
    booking.status = target.value

    if previous != target.value:
        guide_contact = None
        if target == BookingStatus.CONFIRMED:
            guide_contact = {
                "email": current_user.email,
                "phone": current_user.phone or "Not provided",
            }
        await notification_service.notify_booking_status_change(db, booking, target, guide_contact)

    await db.flush()
    logger.info(
        f"Booking {booking.id} moved from {previous} to {target.value} by guide {current_user.id}"
    )
    return BookingStatusEnvelope(
        message="Booking status updated successfully",
        booking=BookingStatusInfo(id=booking.id, status=booking.status),
    )
