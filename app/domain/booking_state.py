"""Booking state machine.

States: pending → confirmed → completed, with cancelled reachable from the
traveler side (pending/confirmed only) and from the guide side (any state).
Guide updates are unrestricted: a guide may move a booking
from any status to any other, including out of cancelled or completed.
"""

import math
from enum import Enum

from app.core.exceptions import InvalidBookingStatus, ValidationError


class BookingStatus(str, Enum):
    """Booking lifecycle states."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


INITIAL_STATUS = BookingStatus.PENDING

# Spellings seen from older clients
STATUS_ALIASES = {
    "canceled": BookingStatus.CANCELLED,
}

GUIDE_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    status: set(BookingStatus) for status in BookingStatus
}

TRAVELER_CANCELLABLE = {BookingStatus.PENDING, BookingStatus.CONFIRMED}

# Message sent to the traveler when a guide moves a booking to a status
STATUS_NOTIFICATIONS: dict[BookingStatus, tuple[str, str]] = {
    BookingStatus.CONFIRMED: (
        "Booking confirmed",
        "Your booking for {tour} on {date} has been confirmed by {guide}.",
    ),
    BookingStatus.PENDING: (
        "Booking status set to pending",
        "Your booking for {tour} on {date} has been set back to pending.",
    ),
    BookingStatus.COMPLETED: (
        "Booking marked completed",
        "Your tour {tour} on {date} has been marked completed. You can now leave a review.",
    ),
    BookingStatus.CANCELLED: (
        "Booking cancelled",
        "Your booking for {tour} on {date} has been cancelled by {guide}.",
    ),
}


def parse_status(value: object) -> BookingStatus:
    """Map external input onto a ``BookingStatus``.

    Casing and surrounding whitespace are ignored and the "canceled"
    spelling is accepted; anything else is rejected.
    """
    if isinstance(value, BookingStatus):
        return value
    if not isinstance(value, str):
        raise ValidationError("Invalid status value")

    normalized = value.strip().lower()
    if normalized in STATUS_ALIASES:
        return STATUS_ALIASES[normalized]
    try:
        return BookingStatus(normalized)
    except ValueError:
        raise ValidationError("Invalid status value")


def assert_guide_transition(current: str, target: str) -> BookingStatus:
    """Validate a guide-initiated status change and return the target."""
    current_status = parse_status(current)
    target_status = parse_status(target)
    if target_status not in GUIDE_TRANSITIONS[current_status]:
        raise InvalidBookingStatus(
            f"Invalid booking transition: {current_status.value} → {target_status.value}"
        )
    return target_status


def assert_traveler_cancellation(current: str) -> None:
    """Validate a traveler-initiated cancellation."""
    current_status = parse_status(current)
    if current_status == BookingStatus.CANCELLED:
        raise InvalidBookingStatus("Booking is already cancelled")
    if current_status == BookingStatus.COMPLETED:
        raise InvalidBookingStatus("Completed bookings cannot be cancelled")
    if current_status not in TRAVELER_CANCELLABLE:
        raise InvalidBookingStatus(f"Bookings in status '{current_status.value}' cannot be cancelled")


def can_write_review(status: str, has_reviewed: bool) -> bool:
    """Whether the traveler may review the booking."""
    return status == BookingStatus.COMPLETED.value and not has_reviewed


def assert_can_review(status: str, has_reviewed: bool) -> None:
    if has_reviewed:
        raise InvalidBookingStatus("You have already reviewed this booking")
    if not can_write_review(status, has_reviewed):
        raise InvalidBookingStatus("Only completed bookings can be reviewed")


def status_notification(status: BookingStatus, tour: str, date: str, guide: str) -> tuple[str, str]:
    """Title and body of the traveler notification for ``status``."""
    title, body = STATUS_NOTIFICATIONS[status]
    return title, body.format(tour=tour, date=date, guide=guide)


def expected_total_price(price: float, participants: int) -> float:
    """Total a booking should carry: tour price times participants."""
    return float(price) * participants


def price_matches(total_price: float, price: float, participants: int) -> bool:
    return math.isclose(total_price, expected_total_price(price, participants), abs_tol=0.01)
