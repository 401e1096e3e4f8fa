"""Pure reductions behind the dashboards."""

from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import uuid4

from app.services.reporting_service import ReportingService, as_utc

NOW = datetime(2030, 6, 15, 12, 0, tzinfo=UTC)


def booking(status, total_price, created_at):
    return SimpleNamespace(status=status, total_price=total_price, created_at=created_at)


def test_status_counts_lists_every_status():
    counts = ReportingService.status_counts(
        [booking("pending", 1, NOW), booking("pending", 1, NOW), booking("completed", 1, NOW)]
    )
    assert counts == {"pending": 2, "confirmed": 0, "cancelled": 0, "completed": 1}


def test_total_earnings_counts_confirmed_and_completed_only():
    bookings = [
        booking("confirmed", 100.0, NOW),
        booking("completed", 50.5, NOW),
        booking("pending", 999.0, NOW),
        booking("cancelled", 999.0, NOW),
    ]
    assert ReportingService.total_earnings(bookings) == 150.5


def test_monthly_revenue_lists_months_with_revenue_in_order():
    bookings = [
        booking("completed", 30.0, datetime(2030, 3, 2, tzinfo=UTC)),
        booking("confirmed", 20.0, datetime(2030, 1, 9, tzinfo=UTC)),
        booking("confirmed", 5.0, datetime(2030, 3, 28)),  # naive, read back from SQLite
        booking("cancelled", 70.0, datetime(2030, 2, 1, tzinfo=UTC)),
        booking("completed", 40.0, datetime(2029, 12, 31, tzinfo=UTC)),
    ]

    assert ReportingService.monthly_revenue(bookings, 2030) == [
        {"month": "Jan", "amount": 20.0},
        {"month": "Mar", "amount": 35.0},
    ]


def test_monthly_stats_covers_six_months_oldest_first():
    bookings = [
        booking("completed", 100.0, datetime(2030, 6, 1, tzinfo=UTC)),
        booking("pending", 10.0, datetime(2030, 6, 2, tzinfo=UTC)),
        booking("confirmed", 40.0, datetime(2030, 1, 20, tzinfo=UTC)),
        # Outside the window
        booking("confirmed", 500.0, datetime(2029, 12, 31, tzinfo=UTC)),
    ]

    stats = ReportingService.monthly_stats(bookings, NOW)

    assert [s["month"] for s in stats] == ["Jan", "Feb", "Mar", "Apr", "May", "Jun"]
    assert stats[0] == {"month": "Jan", "bookings": 1, "earnings": 40.0}
    assert stats[-1] == {"month": "Jun", "bookings": 2, "earnings": 100.0}
    assert all(s["bookings"] == 0 for s in stats[1:5])


def test_monthly_stats_crosses_year_boundary():
    stats = ReportingService.monthly_stats([], datetime(2030, 2, 10, tzinfo=UTC), months=4)
    assert [s["month"] for s in stats] == ["Nov", "Dec", "Jan", "Feb"]


def test_highest_month():
    stats = [
        {"month": "Jan", "bookings": 1, "earnings": 50.0},
        {"month": "Feb", "bookings": 2, "earnings": 80.0},
        {"month": "Mar", "bookings": 3, "earnings": 80.0},
    ]
    assert ReportingService.highest_month(stats)["month"] == "Feb"

    empty = [{"month": "Jan", "bookings": 0, "earnings": 0.0}]
    assert ReportingService.highest_month(empty) is None
    assert ReportingService.highest_month([]) is None


def test_average_monthly_earnings():
    stats = [{"earnings": 10.0}, {"earnings": 0.0}, {"earnings": 0.0}]
    assert ReportingService.average_monthly_earnings(stats) == 3.33
    assert ReportingService.average_monthly_earnings([]) == 0.0


def test_bookings_change():
    assert ReportingService.bookings_change(5, 0) == 100.0
    assert ReportingService.bookings_change(0, 0) == 100.0
    assert ReportingService.bookings_change(3, 2) == 50.0
    assert ReportingService.bookings_change(1, 3) == -66.7


def test_as_utc_keeps_aware_datetimes():
    naive = datetime(2030, 1, 1)
    assert as_utc(naive).tzinfo is UTC
    assert as_utc(NOW) is NOW


def test_guide_booking_stats_folds_status_groups():
    guide_a, guide_b = uuid4(), uuid4()
    rows = [
        (guide_a, "pending", 2, 80.0),
        (guide_a, "confirmed", 1, 100.0),
        (guide_a, "completed", 3, 45.5),
        (guide_a, "cancelled", 1, 999.0),
        (guide_b, "cancelled", 2, None),
    ]

    stats = ReportingService.guide_booking_stats(rows)

    assert stats[guide_a] == {
        "total_bookings": 7,
        "confirmed_bookings": 1,
        "completed_bookings": 3,
        "cancelled_bookings": 1,
        "total_revenue": 145.5,
    }
    assert stats[guide_b]["cancelled_bookings"] == 2
    assert stats[guide_b]["total_revenue"] == 0.0
