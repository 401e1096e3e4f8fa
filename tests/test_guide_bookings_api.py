"""Guide-side booking management."""

import httpx
import pytest
from jose import jwt
from sqlalchemy import select

from app.config import settings
from app.core.security import create_access_token
from app.models.booking import Booking
from app.models.notification import Notification
from app.services.notification_service import notification_service
from tests.conftest import auth_headers


async def traveler_notifications(session_factory, traveler):
    async with session_factory() as session:
        result = await session.execute(
            select(Notification).where(Notification.user_id == traveler.id)
        )
        return list(result.scalars().all())


def status_url(booking) -> str:
    return f"/api/guides/bookings/{booking.id}"


async def test_update_requires_token(client, make_booking, traveler, guide, tour):
    booking = await make_booking(traveler, guide, tour)

    response = await client.patch(status_url(booking), json={"status": "confirmed"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Authentication required"}


async def test_update_rejects_bad_token(client, make_booking, traveler, guide, tour):
    booking = await make_booking(traveler, guide, tour)

    response = await client.patch(
        status_url(booking),
        json={"status": "confirmed"},
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


async def test_update_rejects_refresh_style_token(client, make_booking, traveler, guide, tour):
    booking = await make_booking(traveler, guide, tour)
    token = create_access_token({"sub": str(guide.id)})

    claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    claims["type"] = "refresh"
    forged = jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    response = await client.patch(
        status_url(booking),
        json={"status": "confirmed"},
        headers={"Authorization": f"Bearer {forged}"},
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid token type"


async def test_travelers_cannot_update_status(client, make_booking, traveler, guide, tour, fetch):
    booking = await make_booking(traveler, guide, tour)

    response = await client.patch(
        status_url(booking), json={"status": "confirmed"}, headers=auth_headers(traveler)
    )

    assert response.status_code == 403
    assert response.json() == {"success": False, "error": "Unauthorized access"}
    assert (await fetch(Booking, booking.id)).status == "pending"


async def test_other_guides_cannot_update(client, make_user, make_booking, traveler, guide, tour):
    booking = await make_booking(traveler, guide, tour)
    other_guide = await make_user("guide")

    response = await client.patch(
        status_url(booking), json={"status": "confirmed"}, headers=auth_headers(other_guide)
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Booking not found or not authorized"


async def test_invalid_status_rejected(client, make_booking, traveler, guide, tour, fetch):
    booking = await make_booking(traveler, guide, tour)

    response = await client.patch(
        status_url(booking), json={"status": "refunded"}, headers=auth_headers(guide)
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid status value"}
    assert (await fetch(Booking, booking.id)).status == "pending"


async def test_missing_status_rejected(client, make_booking, traveler, guide, tour):
    booking = await make_booking(traveler, guide, tour)

    response = await client.patch(status_url(booking), json={}, headers=auth_headers(guide))

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields: status"


async def test_confirm_notifies_traveler(
    client, make_booking, traveler, guide, tour, fetch, session_factory
):
    booking = await make_booking(traveler, guide, tour)

    response = await client.patch(
        status_url(booking), json={"status": "Confirmed"}, headers=auth_headers(guide)
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Booking status updated successfully",
        "booking": {"id": str(booking.id), "status": "confirmed"},
    }
    assert (await fetch(Booking, booking.id)).status == "confirmed"

    notes = await traveler_notifications(session_factory, traveler)
    assert len(notes) == 1
    assert notes[0].title == "Booking confirmed"
    assert notes[0].booking_id == booking.id
    assert notes[0].email_sent is False


async def test_same_status_does_not_notify(
    client, make_booking, traveler, guide, tour, session_factory
):
    booking = await make_booking(traveler, guide, tour, status="confirmed")

    response = await client.patch(
        status_url(booking), json={"status": "confirmed"}, headers=auth_headers(guide)
    )

    assert response.status_code == 200
    assert await traveler_notifications(session_factory, traveler) == []


@pytest.mark.parametrize(
    "current, target",
    [
        ("cancelled", "pending"),
        ("completed", "confirmed"),
        ("pending", "completed"),
        ("confirmed", "canceled"),
    ],
)
async def test_guide_may_set_any_status(
    client, make_booking, traveler, guide, tour, fetch, current, target
):
    booking = await make_booking(traveler, guide, tour, status=current)

    response = await client.patch(
        status_url(booking), json={"status": target}, headers=auth_headers(guide)
    )

    assert response.status_code == 200
    expected = "cancelled" if target == "canceled" else target
    assert (await fetch(Booking, booking.id)).status == expected


async def test_email_failure_keeps_status_change(
    client, make_booking, traveler, guide, tour, fetch, session_factory, monkeypatch
):
    class FailingClient:
        async def post(self, *args, **kwargs):
            raise httpx.ConnectError("connection refused")

        async def aclose(self):
            pass

    monkeypatch.setattr(settings, "sendgrid_api_key", "SG.test")
    monkeypatch.setattr(notification_service, "_http_client", FailingClient())
    booking = await make_booking(traveler, guide, tour)

    response = await client.patch(
        status_url(booking), json={"status": "confirmed"}, headers=auth_headers(guide)
    )

    assert response.status_code == 200
    assert (await fetch(Booking, booking.id)).status == "confirmed"
    notes = await traveler_notifications(session_factory, traveler)
    assert len(notes) == 1
    assert notes[0].email_sent is False


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture SendGrid payloads instead of sending them."""
    sent = []

    class RecordingClient:
        async def post(self, url, headers=None, json=None):
            sent.append(json)
            return httpx.Response(202)

        async def aclose(self):
            pass

    monkeypatch.setattr(settings, "sendgrid_api_key", "SG.test")
    monkeypatch.setattr(notification_service, "_http_client", RecordingClient())
    return sent


async def test_confirmation_email_includes_guide_contact(
    client, make_booking, traveler, guide, tour, session_factory, sent_emails
):
    booking = await make_booking(traveler, guide, tour)

    response = await client.patch(
        status_url(booking), json={"status": "confirmed"}, headers=auth_headers(guide)
    )

    assert response.status_code == 200
    assert len(sent_emails) == 1
    assert sent_emails[0]["personalizations"][0]["to"][0]["email"] == traveler.email
    html = sent_emails[0]["content"][-1]["value"]
    assert f"Guide Email: {guide.email}" in html
    assert f"Guide Phone: {guide.phone}" in html

    notes = await traveler_notifications(session_factory, traveler)
    assert notes[0].email_sent is True


async def test_confirmation_email_escapes_user_text(
    client, make_user, make_tour, make_booking, traveler, sent_emails
):
    guide = await make_user("guide", name="Rui <b>Guide</b>", phone="<img src=x>")
    tour = await make_tour(guide, title="<script>alert(1)</script>")
    booking = await make_booking(traveler, guide, tour)

    response = await client.patch(
        status_url(booking), json={"status": "confirmed"}, headers=auth_headers(guide)
    )

    assert response.status_code == 200
    html = sent_emails[0]["content"][-1]["value"]
    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "Rui &lt;b&gt;Guide&lt;/b&gt;" in html
    assert "Guide Phone: &lt;img src=x&gt;" in html
    # The plain-text part keeps the text as written
    assert "<script>alert(1)</script>" in sent_emails[0]["content"][0]["value"]


async def test_list_guide_bookings_with_status_filter(
    client, make_booking, traveler, guide, tour
):
    await make_booking(traveler, guide, tour)
    await make_booking(traveler, guide, tour, status="completed")

    response = await client.get(
        "/api/guides/bookings", params={"status": "completed"}, headers=auth_headers(guide)
    )
    assert response.status_code == 200
    bookings = response.json()["bookings"]
    assert [b["status"] for b in bookings] == ["completed"]
    assert bookings[0]["canReview"] is True

    response = await client.get(
        "/api/guides/bookings", params={"status": "lost"}, headers=auth_headers(guide)
    )
    assert response.status_code == 400


async def test_guide_directory_filters(client, make_user, guide):
    await make_user("guide", location="Porto", languages=["English", "French"], rating=4.5)

    response = await client.get("/api/guides", params={"language": "french"})
    assert response.status_code == 200
    guides = response.json()["guides"]
    assert len(guides) == 1
    assert guides[0]["location"] == "Porto"

    response = await client.get("/api/guides", params={"rating": 4})
    assert [g["rating"] for g in response.json()["guides"]] == [4.5]

    response = await client.get("/api/guides")
    assert len(response.json()["guides"]) == 2
