"""Admin panel endpoints."""

import math
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_db
from app.core.permissions import (
    UserRole,
    require_view_all_bookings,
    require_view_all_guides,
    require_view_all_tours,
    require_view_platform_stats,
)
from app.domain.booking_state import parse_status
from app.models.registry import get_booking_model, get_tour_model, get_user_model
from app.models.user import User, default_avatar
from app.schemas.booking import BookingResponse
from app.schemas.dashboard import (
    AdminBookingListEnvelope,
    AdminDashboardEnvelope,
    AdminGuide,
    AdminGuideListEnvelope,
    AdminStats,
    AdminTour,
    AdminTourListEnvelope,
    MonthlyRevenue,
    Pagination,
    PopularTour,
)
from app.services.reporting_service import reporting_service

router = APIRouter()

# Accepted sortBy values (camelCase from the web client) -> Booking column
BOOKING_SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "created_at",
    "date": "date",
    "totalPrice": "total_price",
    "participants": "participants",
    "status": "status",
    "tourName": "tour_name",
    "travelerName": "traveler_name",
    "guideName": "guide_name",
}

# Accepted sortBy values for the guide list -> User column
GUIDE_SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "name": "name",
    "email": "email",
    "location": "location",
    "rating": "rating",
    "status": "status",
}

# Accepted sortBy values for the tour list -> Tour column
ADMIN_TOUR_SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "date": "date",
    "price": "price",
    "title": "title",
    "location": "location",
}


def _pagination(page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit)
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_more=page < total_pages,
    )


# ============ DASHBOARD ============


@router.get("/dashboard", response_model=AdminDashboardEnvelope)
async def get_dashboard(
    admin: Annotated[User, Depends(require_view_platform_stats)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AdminDashboardEnvelope:
    """Platform rollups: counts, recent bookings, popular tours, revenue."""
    data = await reporting_service.get_admin_dashboard(db)
    return AdminDashboardEnvelope(
        stats=AdminStats(**data["stats"]),
        recent_bookings=[BookingResponse.model_validate(b) for b in data["recent_bookings"]],
        popular_tours=[PopularTour(**t) for t in data["popular_tours"]],
        monthly_revenue=[MonthlyRevenue(**m) for m in data["monthly_revenue"]],
    )


# ============ BOOKINGS ============


@router.get("/bookings", response_model=AdminBookingListEnvelope)
async def get_bookings(
    admin: Annotated[User, Depends(require_view_all_bookings)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str = Query(default=""),
    sort_by: str = Query(default="createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
    min_price: float | None = Query(default=None, ge=0, alias="minPrice"),
    max_price: float | None = Query(default=None, ge=0, alias="maxPrice"),
    status_filter: str | None = Query(default=None, alias="status"),
) -> AdminBookingListEnvelope:
    """Paginated list of all bookings with search, price filter and sorting."""
    BookingModel = get_booking_model()
    query = select(BookingModel)

    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                BookingModel.tour_name.ilike(pattern),
                BookingModel.traveler_name.ilike(pattern),
                BookingModel.traveler_email.ilike(pattern),
                BookingModel.guide_name.ilike(pattern),
            )
        )
    if min_price is not None:
        query = query.where(BookingModel.total_price >= min_price)
    if max_price is not None:
        query = query.where(BookingModel.total_price <= max_price)
    if status_filter:
        query = query.where(BookingModel.status == parse_status(status_filter).value)

    # Count total
    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    sort_column = getattr(BookingModel, BOOKING_SORT_FIELDS.get(sort_by, "created_at"))
    query = query.order_by(sort_column.desc() if sort_order == "desc" else sort_column.asc())

    # Pagination
    offset = (page - 1) * limit
    result = await db.execute(query.offset(offset).limit(limit))
    bookings = list(result.scalars().all())

    return AdminBookingListEnvelope(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        pagination=_pagination(page, limit, total),
    )


# ============ GUIDES ============


@router.get("/guides", response_model=AdminGuideListEnvelope)
async def get_guides(
    admin: Annotated[User, Depends(require_view_all_guides)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str = Query(default=""),
    status_filter: str = Query(default="All", alias="status"),
    sort_by: str = Query(default="updatedAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
) -> AdminGuideListEnvelope:
    """Paginated guide accounts with per-guide booking, revenue and rating stats."""
    UserModel = get_user_model()
    query = select(UserModel).where(UserModel.role == UserRole.GUIDE.value)

    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                UserModel.name.ilike(pattern),
                UserModel.email.ilike(pattern),
                UserModel.location.ilike(pattern),
                UserModel.specialty.ilike(pattern),
            )
        )
    if status_filter and status_filter.lower() != "all":
        query = query.where(func.lower(UserModel.status) == status_filter.strip().lower())

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    sort_column = getattr(UserModel, GUIDE_SORT_FIELDS.get(sort_by, "updated_at"))
    query = query.order_by(sort_column.desc() if sort_order == "desc" else sort_column.asc())

    offset = (page - 1) * limit
    result = await db.execute(query.offset(offset).limit(limit))
    guides = list(result.scalars().all())
    stats = await reporting_service.get_guide_stats(db, [g.id for g in guides])

    return AdminGuideListEnvelope(
        guides=[
            AdminGuide(
                id=guide.id,
                name=guide.name,
                email=guide.email,
                phone=guide.phone or "",
                location=guide.location or "Unknown",
                profile_image=guide.avatar or default_avatar(guide.name),
                languages=guide.languages or ["English"],
                specialties=[guide.specialty] if guide.specialty else ["Tours"],
                status=guide.status,
                created_at=guide.created_at,
                updated_at=guide.updated_at or guide.created_at,
                **stats[guide.id],
            )
            for guide in guides
        ],
        pagination=_pagination(page, limit, total),
    )


# ============ TOURS ============


@router.get("/tours", response_model=AdminTourListEnvelope)
async def get_tours(
    admin: Annotated[User, Depends(require_view_all_tours)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str = Query(default=""),
    sort_by: str = Query(default="updatedAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
    min_price: float | None = Query(default=None, ge=0, alias="minPrice"),
    max_price: float | None = Query(default=None, ge=0, alias="maxPrice"),
) -> AdminTourListEnvelope:
    """Paginated list of every tour with its guide."""
    Tour = get_tour_model()
    query = select(Tour)

    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Tour.title.ilike(pattern),
                Tour.location.ilike(pattern),
                Tour.description.ilike(pattern),
            )
        )
    if min_price is not None:
        query = query.where(Tour.price >= min_price)
    if max_price is not None:
        query = query.where(Tour.price <= max_price)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    sort_column = getattr(Tour, ADMIN_TOUR_SORT_FIELDS.get(sort_by, "updated_at"))
    query = query.order_by(sort_column.desc() if sort_order == "desc" else sort_column.asc())

    offset = (page - 1) * limit
    result = await db.execute(
        query.options(selectinload(Tour.guide)).offset(offset).limit(limit)
    )

    return AdminTourListEnvelope(
        tours=[AdminTour.model_validate(tour) for tour in result.scalars().all()],
        pagination=_pagination(page, limit, total),
    )
