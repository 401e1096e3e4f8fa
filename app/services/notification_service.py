"""Notification Service for booking updates.

Handles the two notification channels:
- In-app notifications (database)
- Email (SendGrid)

Email delivery is best effort: failures are logged and never undo the
change that triggered the notification.
"""

import html
import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.domain.booking_state import BookingStatus, status_notification
from app.models.booking import Booking
from app.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for sending booking notifications."""

    # Notification types
    BOOKING_REQUEST = "booking_request"
    BOOKING_STATUS_CHANGED = "booking_status_changed"
    BOOKING_CANCELLED = "booking_cancelled"
    REVIEW_RECEIVED = "review_received"

    def __init__(self) -> None:
        """Initialize notification service."""
        self._http_client: httpx.AsyncClient | None = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    # ==================== IN-APP NOTIFICATIONS ====================

    def create_notification(
        self,
        db: AsyncSession,
        user_id: UUID,
        title: str,
        body: str,
        notification_type: str,
        booking_id: UUID | None = None,
    ) -> Notification:
        """Stage an in-app notification on the caller's session.

        The row is written with the caller's transaction, so it is only
        persisted together with the change it describes.
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            body=body,
            notification_type=notification_type,
            booking_id=booking_id,
        )
        db.add(notification)
        return notification

    # ==================== EMAIL (SENDGRID) ====================

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str | None = None,
    ) -> bool:
        """Send an email via SendGrid.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_content: HTML body
            text_content: Plain text body

        Returns:
            bool: True if sent successfully
        """
        if not settings.sendgrid_api_key:
            logger.debug(f"SendGrid not configured; skipping email to {to_email}")
            return False

        headers = {
            "Authorization": f"Bearer {settings.sendgrid_api_key}",
            "Content-Type": "application/json",
        }
        payload: dict[str, Any] = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": {
                "email": settings.email_from_address,
                "name": settings.email_from_name,
            },
            "subject": subject,
            "content": [{"type": "text/html", "value": html_content}],
        }
        if text_content:
            payload["content"].insert(0, {"type": "text/plain", "value": text_content})

        try:
            response = await self.http_client.post(
                "https://api.sendgrid.com/v3/mail/send",
                headers=headers,
                json=payload,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Email to {to_email} failed: {e}")
            return False

        if response.status_code not in (200, 202):
            logger.warning(f"Email to {to_email} rejected with status {response.status_code}")
            return False
        return True

    def _generate_email_html(self, title: str, body: str, extra_lines: list[str] | None = None) -> str:
        """Generate simple HTML email content; all text is escaped."""
        title = html.escape(title)
        body = html.escape(body)
        extra_html = "".join(
            f'<p style="color: #4b5563; font-size: 14px; margin: 4px 0;">{html.escape(line)}</p>'
            for line in extra_lines or []
        )
        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
                     max-width: 600px; margin: 0 auto; padding: 20px; color: #333;">
            <div style="background-color: #f9fafb; border-radius: 8px; padding: 24px;">
                <h1 style="color: #111827; font-size: 24px; margin-bottom: 16px;">{title}</h1>
                <p style="color: #4b5563; font-size: 16px; line-height: 1.6;">{body}</p>
                {extra_html}
            </div>
            <p style="color: #9ca3af; font-size: 12px; margin-top: 24px; text-align: center;">
                &copy; {datetime.now(UTC).year} {settings.email_from_name}. All rights reserved.
            </p>
        </body>
        </html>
        """

    # ==================== BOOKING NOTIFICATIONS ====================

    async def notify_booking_status_change(
        self,
        db: AsyncSession,
        booking: Booking,
        new_status: BookingStatus,
        guide_contact: dict[str, str | None] | None = None,
    ) -> Notification:
        """Tell the traveler that a guide moved their booking to ``new_status``.

        When the booking is confirmed the guide's contact details are
        included in the email.
        """
        title, body = status_notification(
            new_status, tour=booking.tour_name, date=booking.date, guide=booking.guide_name
        )
        notification = self.create_notification(
            db=db,
            user_id=booking.traveler_id,
            title=title,
            body=body,
            notification_type=self.BOOKING_STATUS_CHANGED,
            booking_id=booking.id,
        )

        extra_lines: list[str] = []
        if new_status == BookingStatus.CONFIRMED and guide_contact:
            for label, key in (("Email", "email"), ("Phone", "phone")):
                if guide_contact.get(key):
                    extra_lines.append(f"Guide {label}: {guide_contact[key]}")

        notification.email_sent = await self.send_email(
            to_email=booking.traveler_email,
            subject=title,
            html_content=self._generate_email_html(title, body, extra_lines),
            text_content=body,
        )
        logger.info(
            f"Booking {booking.id} status notification ({new_status.value}) queued for "
            f"traveler {booking.traveler_id}; email_sent={notification.email_sent}"
        )
        return notification

    async def notify_booking_created(self, db: AsyncSession, booking: Booking) -> None:
        """Confirm the request to the traveler and alert the guide."""
        self.create_notification(
            db=db,
            user_id=booking.guide_id,
            title="New booking request",
            body=(
                f"{booking.traveler_name} requested {booking.tour_name} on {booking.date} "
                f"for {booking.participants} participant(s)."
            ),
            notification_type=self.BOOKING_REQUEST,
            booking_id=booking.id,
        )

        title = "Booking request received"
        body = (
            f"Your booking for {booking.tour_name} on {booking.date} is pending "
            f"confirmation from {booking.guide_name}."
        )
        await self.send_email(
            to_email=booking.traveler_email,
            subject=title,
            html_content=self._generate_email_html(
                title, body, [f"Total price: {booking.total_price:.2f}"]
            ),
            text_content=body,
        )

    def notify_booking_cancelled(self, db: AsyncSession, booking: Booking) -> Notification:
        """Tell the guide that the traveler cancelled."""
        return self.create_notification(
            db=db,
            user_id=booking.guide_id,
            title="Booking cancelled",
            body=f"{booking.traveler_name} cancelled {booking.tour_name} on {booking.date}.",
            notification_type=self.BOOKING_CANCELLED,
            booking_id=booking.id,
        )

    def notify_review_received(self, db: AsyncSession, booking: Booking, rating: int) -> Notification:
        return self.create_notification(
            db=db,
            user_id=booking.guide_id,
            title="New review",
            body=f"{booking.traveler_name} rated {booking.tour_name} {rating}/5.",
            notification_type=self.REVIEW_RECEIVED,
            booking_id=booking.id,
        )


# Singleton instance
notification_service = NotificationService()
