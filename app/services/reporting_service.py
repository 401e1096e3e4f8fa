"""Dashboard reporting service (read-only queries)."""

from collections.abc import Iterable
from datetime import UTC, datetime
from uuid import UUID

from dateutil.relativedelta import relativedelta
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.booking_state import BookingStatus
from app.models.booking import Booking
from app.models.registry import get_booking_model, get_tour_model, get_user_model
from app.models.review import Review
from app.models.tour import Tour
from app.models.user import User, default_avatar

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# Bookings that count towards revenue and earnings
REVENUE_STATUSES = {BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value}

GUIDE_STATS_MONTHS = 6

RECOMMENDED_TOURS_LIMIT = 3

# Per-status counters reported for each guide in the admin guide list
GUIDE_STATUS_COLUMNS = {
    BookingStatus.CONFIRMED.value: "confirmed_bookings",
    BookingStatus.COMPLETED.value: "completed_bookings",
    BookingStatus.CANCELLED.value: "cancelled_bookings",
}


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _month_start(value: datetime) -> datetime:
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def empty_guide_stats() -> dict:
    return {
        "total_bookings": 0,
        "confirmed_bookings": 0,
        "completed_bookings": 0,
        "cancelled_bookings": 0,
        "total_revenue": 0.0,
    }


class ReportingService:
    """Read-only dashboard reporting service."""

    # ==================== REDUCTIONS ====================

    @staticmethod
    def status_counts(bookings: Iterable[Booking]) -> dict[str, int]:
        """Count bookings per status; every status is present."""
        counts = {status.value: 0 for status in BookingStatus}
        for booking in bookings:
            counts[booking.status] = counts.get(booking.status, 0) + 1
        return counts

    @staticmethod
    def total_earnings(bookings: Iterable[Booking]) -> float:
        return float(sum(b.total_price for b in bookings if b.status in REVENUE_STATUSES))

    @staticmethod
    def monthly_revenue(bookings: Iterable[Booking], year: int) -> list[dict]:
        """Revenue of confirmed and completed bookings created in ``year``.

        Only months with revenue are listed, in calendar order.
        """
        totals: dict[int, float] = {}
        for booking in bookings:
            created_at = as_utc(booking.created_at)
            if created_at.year != year or booking.status not in REVENUE_STATUSES:
                continue
            totals[created_at.month] = totals.get(created_at.month, 0.0) + booking.total_price
        return [
            {"month": MONTH_LABELS[month - 1], "amount": amount}
            for month, amount in sorted(totals.items())
        ]

    @staticmethod
    def monthly_stats(
        bookings: Iterable[Booking],
        now: datetime,
        months: int = GUIDE_STATS_MONTHS,
    ) -> list[dict]:
        """Bookings and earnings for each of the last ``months`` months.

        Every month in the window is listed, oldest first, including empty ones.
        """
        current = _month_start(now)
        window = [current - relativedelta(months=offset) for offset in range(months - 1, -1, -1)]
        stats = {(start.year, start.month): {"bookings": 0, "earnings": 0.0} for start in window}

        for booking in bookings:
            created_at = as_utc(booking.created_at)
            bucket = stats.get((created_at.year, created_at.month))
            if bucket is None:
                continue
            bucket["bookings"] += 1
            if booking.status in REVENUE_STATUSES:
                bucket["earnings"] += booking.total_price

        return [
            {"month": MONTH_LABELS[start.month - 1], **stats[(start.year, start.month)]}
            for start in window
        ]

    @staticmethod
    def highest_month(stats: list[dict]) -> dict | None:
        """Month with the highest earnings; the earliest wins a tie."""
        if not stats:
            return None
        best = max(stats, key=lambda s: s["earnings"])
        return best if best["earnings"] > 0 else None

    @staticmethod
    def average_monthly_earnings(stats: list[dict]) -> float:
        if not stats:
            return 0.0
        return round(sum(s["earnings"] for s in stats) / len(stats), 2)

    @staticmethod
    def bookings_change(current: int, previous: int) -> float:
        """Percentage change versus last month, rounded to one decimal.

        With no bookings last month the change is reported as 100.
        """
        if previous == 0:
            return 100.0
        return round((current - previous) / previous * 100, 1)

    @staticmethod
    def guide_booking_stats(rows: Iterable[tuple[UUID, str, int, float | None]]) -> dict[UUID, dict]:
        """Fold ``(guide_id, status, count, total_price)`` groups into per-guide stats."""
        stats: dict[UUID, dict] = {}
        for guide_id, status, count, total in rows:
            entry = stats.setdefault(guide_id, empty_guide_stats())
            entry["total_bookings"] += count
            if status in GUIDE_STATUS_COLUMNS:
                entry[GUIDE_STATUS_COLUMNS[status]] += count
            if status in REVENUE_STATUSES:
                entry["total_revenue"] += float(total or 0)
        return stats

    # ==================== ADMIN ====================

    async def get_admin_dashboard(self, db: AsyncSession, now: datetime | None = None) -> dict:
        """Platform-wide rollups for the admin dashboard."""
        now = now or datetime.now(UTC)
        this_month = _month_start(now)
        last_month = this_month - relativedelta(months=1)
        BookingModel = get_booking_model()
        Tour = get_tour_model()
        UserModel = get_user_model()

        role_counts = dict(
            (await db.execute(select(UserModel.role, func.count()).group_by(UserModel.role))).all()
        )
        total_tours = (await db.execute(select(func.count()).select_from(Tour))).scalar() or 0
        average_rating = (await db.execute(select(func.avg(Review.rating)))).scalar()

        bookings = list((await db.execute(select(BookingModel))).scalars().all())
        monthly_bookings = 0
        last_month_bookings = 0
        for booking in bookings:
            created_at = as_utc(booking.created_at)
            if created_at >= this_month:
                monthly_bookings += 1
            elif created_at >= last_month:
                last_month_bookings += 1

        recent_bookings = sorted(bookings, key=lambda b: as_utc(b.created_at), reverse=True)[:5]

        return {
            "stats": {
                "total_guides": role_counts.get("guide", 0),
                "total_travelers": role_counts.get("traveler", 0),
                "total_tours": total_tours,
                "monthly_bookings": monthly_bookings,
                "bookings_change": self.bookings_change(monthly_bookings, last_month_bookings),
                "average_rating": round(float(average_rating or 0), 2),
                "status_counts": self.status_counts(bookings),
            },
            "recent_bookings": recent_bookings,
            "popular_tours": await self.get_popular_tours(db),
            "monthly_revenue": self.monthly_revenue(bookings, now.year),
        }

    async def get_popular_tours(self, db: AsyncSession, limit: int = 5) -> list[dict]:
        """Tours ordered by number of bookings."""
        BookingModel = get_booking_model()
        Tour = get_tour_model()
        counts = (
            select(BookingModel.tour_id, func.count(BookingModel.id).label("bookings_count"))
            .group_by(BookingModel.tour_id)
            .subquery()
        )
        bookings_count = func.coalesce(counts.c.bookings_count, 0)
        result = await db.execute(
            select(Tour, bookings_count)
            .outerjoin(counts, counts.c.tour_id == Tour.id)
            .order_by(bookings_count.desc(), Tour.created_at.desc())
            .limit(limit)
        )
        return [
            {
                "id": tour.id,
                "title": tour.title,
                "image": tour.images[0] if tour.images else None,
                "bookings_count": count,
            }
            for tour, count in result.all()
        ]

    async def get_guide_stats(self, db: AsyncSession, guide_ids: list[UUID]) -> dict[UUID, dict]:
        """Booking counts, revenue and review ratings for each of ``guide_ids``.

        Guides without bookings or reviews get zeroed entries.
        """
        if not guide_ids:
            return {}
        BookingModel = get_booking_model()

        booking_rows = await db.execute(
            select(
                BookingModel.guide_id,
                BookingModel.status,
                func.count(BookingModel.id),
                func.sum(BookingModel.total_price),
            )
            .where(BookingModel.guide_id.in_(guide_ids))
            .group_by(BookingModel.guide_id, BookingModel.status)
        )
        stats = self.guide_booking_stats(booking_rows.all())

        review_rows = await db.execute(
            select(Review.guide_id, func.avg(Review.rating), func.count(Review.id))
            .where(Review.guide_id.in_(guide_ids))
            .group_by(Review.guide_id)
        )
        ratings = {guide_id: (float(avg or 0), count) for guide_id, avg, count in review_rows.all()}

        result = {}
        for guide_id in guide_ids:
            entry = stats.get(guide_id, empty_guide_stats())
            average, count = ratings.get(guide_id, (0.0, 0))
            entry["rating"] = round(average, 2)
            entry["total_ratings"] = count
            result[guide_id] = entry
        return result

    # ==================== GUIDE ====================

    async def get_guide_dashboard(
        self,
        db: AsyncSession,
        guide: User,
        now: datetime | None = None,
    ) -> dict:
        """Tours, recent bookings and earnings analytics for one guide."""
        now = now or datetime.now(UTC)
        BookingModel = get_booking_model()
        Tour = get_tour_model()

        bookings = list(
            (
                await db.execute(
                    select(BookingModel)
                    .where(BookingModel.guide_id == guide.id)
                    .order_by(BookingModel.created_at.desc())
                )
            )
            .scalars()
            .all()
        )
        total_tours = (
            await db.execute(select(func.count()).select_from(Tour).where(Tour.guide_id == guide.id))
        ).scalar() or 0

        stats = self.monthly_stats(bookings, now)

        return {
            "guide": guide,
            "upcoming_tours": await self.get_upcoming_tours(db, guide.id, bookings),
            "recent_bookings": bookings[:5],
            "analytics": {
                "total_tours": total_tours,
                "total_bookings": len(bookings),
                "total_earnings": self.total_earnings(bookings),
                "average_rating": guide.rating or 0,
                "status_counts": self.status_counts(bookings),
                "monthly_stats": stats,
                "highest_month": self.highest_month(stats),
                "average_monthly_earnings": self.average_monthly_earnings(stats),
            },
        }

    async def get_upcoming_tours(
        self,
        db: AsyncSession,
        guide_id: UUID,
        bookings: list[Booking],
        limit: int = 5,
    ) -> list[dict]:
        """Active tours of a guide, soonest first, with live booking counts."""
        Tour = get_tour_model()
        result = await db.execute(
            select(Tour)
            .where(Tour.guide_id == guide_id, Tour.status == "active")
            .order_by(Tour.date.asc())
            .limit(limit)
        )
        per_tour: dict[UUID, int] = {}
        for booking in bookings:
            if booking.status != BookingStatus.CANCELLED.value:
                per_tour[booking.tour_id] = per_tour.get(booking.tour_id, 0) + 1

        return [
            {
                "id": tour.id,
                "title": tour.title,
                "date": tour.date,
                "location": tour.location,
                "price": tour.price,
                "status": tour.status,
                "bookings": per_tour.get(tour.id, 0),
            }
            for tour in result.scalars().all()
        ]

    async def get_guide_profile(self, db: AsyncSession, guide: User) -> dict:
        """Public profile of a guide with all of their tours, soonest first."""
        Tour = get_tour_model()
        tours = (
            await db.execute(select(Tour).where(Tour.guide_id == guide.id).order_by(Tour.date.asc()))
        ).scalars().all()
        review_count = (
            await db.execute(select(func.count(Review.id)).where(Review.guide_id == guide.id))
        ).scalar() or 0

        return {
            "id": guide.id,
            "name": guide.name,
            "location": guide.location or "",
            "languages": guide.languages or ["English"],
            "specialties": [guide.specialty] if guide.specialty else ["Tours"],
            "rating": guide.rating or 0,
            "reviews": review_count,
            "bio": guide.bio or "",
            "profile_image": guide.avatar or default_avatar(guide.name),
            "slug": str(guide.id),
            "tours": list(tours),
        }

    # ==================== TOURS ====================

    async def get_recommended_tours(
        self,
        db: AsyncSession,
        now: datetime | None = None,
        limit: int = RECOMMENDED_TOURS_LIMIT,
    ) -> list[tuple[Tour, str | None]]:
        """Soonest upcoming tours that still have spots, with their guide's name."""
        now = now or datetime.now(UTC)
        Tour = get_tour_model()
        UserModel = get_user_model()
        result = await db.execute(
            select(Tour, UserModel.name)
            .outerjoin(UserModel, UserModel.id == Tour.guide_id)
            .where(Tour.date > now, Tour.available_spots > 0)
            .order_by(Tour.date.asc())
            .limit(limit)
        )
        return [(tour, guide_name) for tour, guide_name in result.all()]


reporting_service = ReportingService()
