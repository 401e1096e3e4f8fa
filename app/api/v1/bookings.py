"""Booking endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, require_booking_access, require_traveler_booking_access
from app.core.exceptions import AuthorizationError, NotFoundError
from app.core.middleware import booking_limiter
from app.core.permissions import UserRole, require_create_booking, require_review_booking
from app.domain.booking_state import INITIAL_STATUS, assert_can_review, expected_total_price, price_matches
from app.models.booking import Booking
from app.models.registry import get_booking_model, get_tour_model, get_user_model
from app.models.review import Review
from app.models.user import User
from app.schemas.booking import (
    BookingCreate,
    BookingDetailEnvelope,
    BookingDetailResponse,
    BookingEnvelope,
    BookingListEnvelope,
    BookingResponse,
    GuideInfo,
    TourInfo,
    TravelerInfo,
)
from app.schemas.review import ReviewCreate, ReviewEnvelope, ReviewResponse
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=BookingEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
async def create_booking(
    booking_data: BookingCreate,
    current_user: Annotated[User, Depends(require_create_booking)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingEnvelope:
    """Create a pending booking for the current traveler.

    The total price is stored exactly as submitted; a mismatch with the
    tour price is only logged.
    """
    BookingModel = get_booking_model()
    Tour = get_tour_model()
    UserModel = get_user_model()

    tour = await db.get(Tour, booking_data.tour_id)
    if not tour:
        raise NotFoundError(detail="Tour not found")

    guide = await db.get(UserModel, booking_data.guide_id)
    if not guide or guide.role != UserRole.GUIDE.value:
        raise NotFoundError(detail="Guide not found")

    if not price_matches(booking_data.total_price, tour.price, booking_data.participants):
        logger.warning(
            f"Booking total {booking_data.total_price} for tour {tour.id} does not match "
            f"expected {expected_total_price(tour.price, booking_data.participants)}"
        )

    booking = BookingModel(
        traveler_id=current_user.id,
        traveler_name=current_user.name,
        traveler_email=current_user.email,
        guide_id=guide.id,
        guide_name=booking_data.guide_name,
        tour_id=tour.id,
        tour_name=booking_data.tour_name,
        date=booking_data.date,
        time=booking_data.time or "09:00 AM",
        participants=booking_data.participants,
        total_price=booking_data.total_price,
        status=INITIAL_STATUS.value,
        has_reviewed=False,
    )
    db.add(booking)
    await db.flush()

    await notification_service.notify_booking_created(db, booking)
    logger.info(f"Booking {booking.id} created by traveler {current_user.id} for tour {tour.id}")
    return BookingEnvelope(booking=BookingResponse.model_validate(booking))


@router.get("", response_model=BookingListEnvelope)
async def get_my_bookings(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingListEnvelope:
    """Bookings made by the current traveler, or received by the current guide."""
    BookingModel = get_booking_model()
    if current_user.role == UserRole.GUIDE.value:
        query = select(BookingModel).where(BookingModel.guide_id == current_user.id)
    else:
        query = select(BookingModel).where(BookingModel.traveler_id == current_user.id)

    result = await db.execute(query.order_by(BookingModel.created_at.desc()))
    return BookingListEnvelope(
        bookings=[BookingResponse.model_validate(b) for b in result.scalars().all()]
    )


@router.get("/{booking_id}", response_model=BookingDetailEnvelope)
async def get_booking(
    booking: Annotated[Booking, Depends(require_booking_access)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingDetailEnvelope:
    """Get a booking with its traveler, guide and tour."""
    Tour = get_tour_model()
    UserModel = get_user_model()

    traveler = await db.get(UserModel, booking.traveler_id)
    guide = await db.get(UserModel, booking.guide_id)
    tour = await db.get(Tour, booking.tour_id)

    detail = BookingDetailResponse(
        **BookingResponse.model_validate(booking).model_dump(exclude={"can_review"}),
        traveler=TravelerInfo(
            id=booking.traveler_id,
            name=traveler.name if traveler else booking.traveler_name,
            email=traveler.email if traveler else booking.traveler_email,
        ),
        guide=GuideInfo.model_validate(guide) if guide else None,
        tour=TourInfo.model_validate(tour) if tour else None,
    )
    return BookingDetailEnvelope(booking=detail)


@router.post("/{booking_id}/review", response_model=ReviewEnvelope, status_code=status.HTTP_201_CREATED)
async def review_booking(
    review_data: ReviewCreate,
    booking: Annotated[Booking, Depends(require_traveler_booking_access)],
    current_user: Annotated[User, Depends(require_review_booking)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReviewEnvelope:
    """Review a completed booking (traveler only, once)."""
    if booking.traveler_id != current_user.id:
        raise AuthorizationError("You are not authorized to review this booking")

    assert_can_review(booking.status, booking.has_reviewed)

    review = Review(
        booking_id=booking.id,
        traveler_id=booking.traveler_id,
        guide_id=booking.guide_id,
        tour_id=booking.tour_id,
        rating=review_data.rating,
        comment=review_data.comment,
    )
    db.add(review)
    booking.has_reviewed = True
    await db.flush()

    # Guide rating is the mean of all their reviews
    average = (
        await db.execute(select(func.avg(Review.rating)).where(Review.guide_id == booking.guide_id))
    ).scalar()
    guide = await db.get(get_user_model(), booking.guide_id)
    if guide and average is not None:
        guide.rating = round(float(average), 2)

    notification_service.notify_review_received(db, booking, review.rating)
    await db.flush()
    logger.info(f"Booking {booking.id} reviewed by traveler {current_user.id}")

    return ReviewEnvelope(
        review=ReviewResponse.model_validate(review),
        booking=BookingResponse.model_validate(booking),
    )
