"""Tour endpoints."""

import logging
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.core.permissions import require_create_tour, require_view_own_tours
from app.models.registry import get_tour_model
from app.models.tour import DEFAULT_TOUR_IMAGE
from app.models.user import User
from app.schemas.tour import (
    RecommendedTour,
    RecommendedTourListEnvelope,
    TourCreate,
    TourEnvelope,
    TourListEnvelope,
    TourResponse,
)
from app.services.reporting_service import reporting_service

logger = logging.getLogger(__name__)

router = APIRouter()

TOUR_SORT_FIELDS = {
    "date": "date",
    "price": "price",
    "title": "title",
    "createdAt": "created_at",
    "created_at": "created_at",
}


@router.get("", response_model=TourListEnvelope)
async def list_tours(
    db: Annotated[AsyncSession, Depends(get_db)],
    guide_id: UUID | None = Query(default=None, alias="guideId"),
    location: str | None = Query(default=None),
    min_price: float | None = Query(default=None, ge=0, alias="minPrice"),
    max_price: float | None = Query(default=None, ge=0, alias="maxPrice"),
    sort_by: str = Query(default="date", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query(default="asc", alias="sortOrder"),
) -> TourListEnvelope:
    """List tours with simple field matching."""
    Tour = get_tour_model()

    query = select(Tour)
    if guide_id:
        query = query.where(Tour.guide_id == guide_id)
    if location:
        query = query.where(Tour.location.ilike(f"%{location}%"))
    if min_price is not None:
        query = query.where(Tour.price >= min_price)
    if max_price is not None:
        query = query.where(Tour.price <= max_price)

    sort_column = getattr(Tour, TOUR_SORT_FIELDS.get(sort_by, "date"))
    query = query.order_by(sort_column.desc() if sort_order == "desc" else sort_column.asc())

    result = await db.execute(query)
    return TourListEnvelope(tours=[TourResponse.model_validate(t) for t in result.scalars().all()])


@router.post("", response_model=TourEnvelope, status_code=status.HTTP_201_CREATED)
async def create_tour(
    tour_data: TourCreate,
    current_user: Annotated[User, Depends(require_create_tour)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TourEnvelope:
    """Create a tour owned by the current guide."""
    Tour = get_tour_model()

    data = tour_data.model_dump()
    data["images"] = data["images"] or [DEFAULT_TOUR_IMAGE]
    tour = Tour(guide_id=current_user.id, **data)
    db.add(tour)
    await db.flush()

    logger.info(f"Tour {tour.id} created by guide {current_user.id}")
    return TourEnvelope(tour=TourResponse.model_validate(tour))


@router.get("/guide-tours", response_model=TourListEnvelope)
async def get_guide_tours(
    current_user: Annotated[User, Depends(require_view_own_tours)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TourListEnvelope:
    """Tours created by the current guide, newest first."""
    Tour = get_tour_model()

    result = await db.execute(
        select(Tour).where(Tour.guide_id == current_user.id).order_by(Tour.created_at.desc())
    )
    return TourListEnvelope(tours=[TourResponse.model_validate(t) for t in result.scalars().all()])


@router.get("/recommended", response_model=RecommendedTourListEnvelope)
async def get_recommended_tours(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RecommendedTourListEnvelope:
    """The soonest upcoming tours that still have spots left."""
    tours = await reporting_service.get_recommended_tours(db)
    logger.debug(f"Found {len(tours)} recommended tours")
    return RecommendedTourListEnvelope(
        tours=[
            RecommendedTour(**TourResponse.model_validate(tour).model_dump(), guide_name=guide_name)
            for tour, guide_name in tours
        ],
        count=len(tours),
    )
