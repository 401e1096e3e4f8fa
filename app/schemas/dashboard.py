"""Dashboard and reporting schemas."""

from datetime import datetime
from uuid import UUID

from app.schemas.base import CamelModel
from app.schemas.booking import BookingResponse
from app.schemas.tour import TourResponse
from app.schemas.user import Preferences


class DashboardBooking(CamelModel):
    """Booking card shown on the traveler dashboard."""

    id: UUID
    tour_name: str
    guide_name: str
    location: str
    date: str
    time: str
    status: str
    image: str
    has_reviewed: bool
    can_review: bool


class SavedGuide(CamelModel):
    id: UUID
    name: str
    location: str
    rating: float
    specialty: str
    image: str


class UserDashboardData(CamelModel):
    name: str
    email: str
    avatar: str
    phone: str
    location: str
    bio: str
    preferences: Preferences
    profile_completed: bool
    upcoming_bookings: list[DashboardBooking]
    past_bookings: list[DashboardBooking]
    saved_guides: list[SavedGuide]


class UserDashboardEnvelope(CamelModel):
    success: bool = True
    user_data: UserDashboardData


class MonthlyStat(CamelModel):
    month: str
    bookings: int
    earnings: float


class MonthlyRevenue(CamelModel):
    month: str
    amount: float


class GuideAnalytics(CamelModel):
    total_tours: int
    total_bookings: int
    total_earnings: float
    average_rating: float
    status_counts: dict[str, int]
    monthly_stats: list[MonthlyStat]
    highest_month: MonthlyStat | None
    average_monthly_earnings: float


class GuideUpcomingTour(CamelModel):
    id: UUID
    title: str
    date: datetime
    location: str
    price: float
    status: str
    bookings: int


class GuideProfileSummary(CamelModel):
    id: UUID
    name: str
    email: str
    avatar: str | None
    rating: float


class GuideDashboardEnvelope(CamelModel):
    success: bool = True
    guide: GuideProfileSummary
    upcoming_tours: list[GuideUpcomingTour]
    recent_bookings: list[BookingResponse]
    analytics: GuideAnalytics


class AdminStats(CamelModel):
    total_guides: int
    total_travelers: int
    total_tours: int
    monthly_bookings: int
    bookings_change: float
    average_rating: float
    status_counts: dict[str, int]


class PopularTour(CamelModel):
    id: UUID
    title: str
    image: str | None
    bookings_count: int


class AdminDashboardEnvelope(CamelModel):
    success: bool = True
    stats: AdminStats
    recent_bookings: list[BookingResponse]
    popular_tours: list[PopularTour]
    monthly_revenue: list[MonthlyRevenue]


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool


class AdminBookingListEnvelope(CamelModel):
    success: bool = True
    bookings: list[BookingResponse]
    pagination: Pagination


class AdminGuide(CamelModel):
    """Guide row in the admin guide list, with booking and review stats."""

    id: UUID
    name: str
    email: str
    phone: str
    location: str
    profile_image: str
    languages: list[str]
    specialties: list[str]
    rating: float
    total_ratings: int
    status: str
    total_bookings: int
    confirmed_bookings: int
    completed_bookings: int
    cancelled_bookings: int
    total_revenue: float
    created_at: datetime
    updated_at: datetime


class AdminGuideListEnvelope(CamelModel):
    success: bool = True
    guides: list[AdminGuide]
    pagination: Pagination


class TourGuideInfo(CamelModel):
    id: UUID
    name: str
    email: str
    rating: float


class AdminTour(TourResponse):
    guide: TourGuideInfo | None


class AdminTourListEnvelope(CamelModel):
    success: bool = True
    tours: list[AdminTour]
    pagination: Pagination
