"""Admin dashboard, booking, guide and tour listings."""

from datetime import UTC, datetime

import pytest

from app.models.review import Review
from tests.conftest import auth_headers


@pytest.mark.parametrize(
    "path",
    ["/api/admin/dashboard", "/api/admin/bookings", "/api/admin/guides", "/api/admin/tours"],
)
async def test_admin_endpoints_reject_other_roles(client, traveler, guide, path):
    for user in (traveler, guide):
        response = await client.get(path, headers=auth_headers(user))
        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "error": "Unauthorized access: Admin privileges required",
        }


async def test_dashboard_rollups(client, db, make_tour, make_booking, admin, traveler, guide, tour):
    second_tour = await make_tour(guide, title="Food Tour", images=["/img/food.jpg"])
    await make_booking(traveler, guide, second_tour, status="confirmed", total_price=90.0)
    await make_booking(traveler, guide, second_tour, status="completed", total_price=30.0)
    reviewed = await make_booking(traveler, guide, tour, status="completed", total_price=50.0)
    await make_booking(traveler, guide, tour, status="cancelled", total_price=500.0)

    db.add(
        Review(
            booking_id=reviewed.id,
            traveler_id=traveler.id,
            guide_id=guide.id,
            tour_id=tour.id,
            rating=4,
        )
    )
    await db.commit()

    response = await client.get("/api/admin/dashboard", headers=auth_headers(admin))

    assert response.status_code == 200
    body = response.json()
    stats = body["stats"]
    assert stats["totalGuides"] == 1
    assert stats["totalTravelers"] == 1
    assert stats["totalTours"] == 2
    assert stats["monthlyBookings"] == 4
    assert stats["bookingsChange"] == 100.0
    assert stats["averageRating"] == 4.0
    assert stats["statusCounts"] == {
        "pending": 0,
        "confirmed": 1,
        "cancelled": 1,
        "completed": 2,
    }

    assert len(body["recentBookings"]) == 4

    popular = body["popularTours"]
    assert popular[0]["title"] == "Food Tour"
    assert popular[0]["bookingsCount"] == 2
    assert popular[0]["image"] == "/img/food.jpg"
    assert popular[1]["bookingsCount"] == 2

    month = datetime.now(UTC).strftime("%b")
    assert body["monthlyRevenue"] == [{"month": month, "amount": 170.0}]


async def test_dashboard_on_empty_platform(client, admin):
    response = await client.get("/api/admin/dashboard", headers=auth_headers(admin))

    body = response.json()
    assert body["stats"]["totalGuides"] == 0
    assert body["stats"]["averageRating"] == 0
    assert body["recentBookings"] == []
    assert body["popularTours"] == []
    assert body["monthlyRevenue"] == []


async def test_bookings_pagination(client, make_booking, admin, traveler, guide, tour):
    for price in (10.0, 20.0, 30.0, 40.0, 50.0):
        await make_booking(traveler, guide, tour, total_price=price)

    response = await client.get(
        "/api/admin/bookings",
        params={"page": 2, "limit": 2, "sortBy": "totalPrice", "sortOrder": "asc"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert [b["totalPrice"] for b in body["bookings"]] == [30.0, 40.0]
    assert body["pagination"] == {
        "page": 2,
        "limit": 2,
        "total": 5,
        "totalPages": 3,
        "hasMore": True,
    }

    last = await client.get(
        "/api/admin/bookings",
        params={"page": 3, "limit": 2, "sortBy": "totalPrice", "sortOrder": "asc"},
        headers=auth_headers(admin),
    )
    assert [b["totalPrice"] for b in last.json()["bookings"]] == [50.0]
    assert last.json()["pagination"]["hasMore"] is False


async def test_bookings_search_and_filters(
    client, make_user, make_tour, make_booking, admin, traveler, guide, tour
):
    maria = await make_user("traveler", name="Maria Silva", email="maria@example.com")
    food = await make_tour(guide, title="Food Tour")
    await make_booking(traveler, guide, tour, total_price=40.0)
    await make_booking(maria, guide, food, total_price=120.0, status="confirmed")
    await make_booking(maria, guide, tour, total_price=80.0, status="completed")

    headers = auth_headers(admin)

    by_name = await client.get("/api/admin/bookings", params={"search": "maria"}, headers=headers)
    assert by_name.json()["pagination"]["total"] == 2

    by_tour = await client.get("/api/admin/bookings", params={"search": "food"}, headers=headers)
    assert [b["tourName"] for b in by_tour.json()["bookings"]] == ["Food Tour"]

    by_price = await client.get(
        "/api/admin/bookings", params={"minPrice": 50, "maxPrice": 100}, headers=headers
    )
    assert [b["totalPrice"] for b in by_price.json()["bookings"]] == [80.0]

    by_status = await client.get(
        "/api/admin/bookings", params={"status": "confirmed"}, headers=headers
    )
    assert [b["status"] for b in by_status.json()["bookings"]] == ["confirmed"]

    sorted_desc = await client.get(
        "/api/admin/bookings",
        params={"sortBy": "totalPrice", "sortOrder": "desc"},
        headers=headers,
    )
    assert [b["totalPrice"] for b in sorted_desc.json()["bookings"]] == [120.0, 80.0, 40.0]


async def test_bookings_rejects_bad_paging(client, admin):
    response = await client.get(
        "/api/admin/bookings", params={"limit": 500}, headers=auth_headers(admin)
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


async def test_guides_list_with_booking_stats(
    client, db, make_user, make_booking, admin, traveler, guide, tour
):
    idle = await make_user(
        "guide", name="Beatriz", location="Porto", specialty="Wine", status="inactive"
    )
    await make_booking(traveler, guide, tour, status="pending", total_price=10.0)
    await make_booking(traveler, guide, tour, status="confirmed", total_price=90.0)
    first = await make_booking(traveler, guide, tour, status="completed", total_price=30.0)
    second = await make_booking(traveler, guide, tour, status="completed", total_price=50.0)
    await make_booking(traveler, guide, tour, status="cancelled", total_price=500.0)
    for booking, rating in ((first, 4), (second, 5)):
        db.add(
            Review(
                booking_id=booking.id,
                traveler_id=traveler.id,
                guide_id=guide.id,
                tour_id=tour.id,
                rating=rating,
            )
        )
    await db.commit()

    response = await client.get(
        "/api/admin/guides",
        params={"sortBy": "name", "sortOrder": "asc"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert [g["name"] for g in body["guides"]] == ["Beatriz", "Rui Guide"]
    assert body["pagination"]["total"] == 2

    empty, busy = body["guides"]
    assert busy["id"] == str(guide.id)
    assert busy["phone"] == guide.phone
    assert busy["status"] == "active"
    assert busy["totalBookings"] == 5
    assert busy["confirmedBookings"] == 1
    assert busy["completedBookings"] == 2
    assert busy["cancelledBookings"] == 1
    assert busy["totalRevenue"] == 170.0
    assert busy["rating"] == 4.5
    assert busy["totalRatings"] == 2
    assert busy["languages"] == ["English"]
    assert busy["specialties"] == ["Tours"]
    assert busy["profileImage"].startswith("https://ui-avatars.com/api/?name=Rui")

    assert empty["id"] == str(idle.id)
    assert empty["specialties"] == ["Wine"]
    assert empty["totalBookings"] == 0
    assert empty["totalRevenue"] == 0
    assert empty["rating"] == 0
    assert empty["totalRatings"] == 0


async def test_guides_list_search_and_status(client, make_user, admin, guide):
    await make_user("guide", name="Beatriz", location="Porto", status="inactive")
    headers = auth_headers(admin)

    by_location = await client.get("/api/admin/guides", params={"search": "porto"}, headers=headers)
    assert [g["name"] for g in by_location.json()["guides"]] == ["Beatriz"]

    by_email = await client.get(
        "/api/admin/guides", params={"search": guide.email}, headers=headers
    )
    assert [g["id"] for g in by_email.json()["guides"]] == [str(guide.id)]

    inactive = await client.get("/api/admin/guides", params={"status": "Inactive"}, headers=headers)
    assert [g["name"] for g in inactive.json()["guides"]] == ["Beatriz"]

    everyone = await client.get("/api/admin/guides", params={"status": "All"}, headers=headers)
    assert everyone.json()["pagination"]["total"] == 2


async def test_tours_list_with_guide(client, make_user, make_tour, admin, guide):
    other = await make_user("guide", name="Beatriz", rating=4.8)
    await make_tour(guide, title="Old Town Walk", price=50.0)
    await make_tour(guide, title="Fado Night", price=35.0, description="Music and dinner")
    await make_tour(other, title="Douro Valley", price=120.0, location="Porto")
    headers = auth_headers(admin)

    response = await client.get(
        "/api/admin/tours", params={"sortBy": "price", "sortOrder": "asc"}, headers=headers
    )

    assert response.status_code == 200
    body = response.json()
    assert [t["title"] for t in body["tours"]] == ["Fado Night", "Old Town Walk", "Douro Valley"]
    assert body["tours"][0]["guide"] == {
        "id": str(guide.id),
        "name": guide.name,
        "email": guide.email,
        "rating": 0,
    }
    assert body["tours"][2]["guide"]["rating"] == 4.8
    assert body["pagination"]["total"] == 3

    by_text = await client.get("/api/admin/tours", params={"search": "music"}, headers=headers)
    assert [t["title"] for t in by_text.json()["tours"]] == ["Fado Night"]

    by_price = await client.get(
        "/api/admin/tours", params={"minPrice": 40, "maxPrice": 100}, headers=headers
    )
    assert [t["title"] for t in by_price.json()["tours"]] == ["Old Town Walk"]

    paged = await client.get(
        "/api/admin/tours",
        params={"page": 2, "limit": 2, "sortBy": "price", "sortOrder": "asc"},
        headers=headers,
    )
    assert [t["title"] for t in paged.json()["tours"]] == ["Douro Valley"]
    assert paged.json()["pagination"]["hasMore"] is False
