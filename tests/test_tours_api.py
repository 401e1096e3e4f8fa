"""Tour listing, creation and recommendations."""

from datetime import UTC, datetime, timedelta

from tests.conftest import auth_headers


def tour_payload(**overrides):
    payload = {
        "title": "Alfama by Night",
        "description": "Fado houses and viewpoints.",
        "price": 35.0,
        "location": "Lisbon",
        "date": (datetime.now(UTC) + timedelta(days=10)).isoformat(),
        "maxParticipants": 8,
    }
    payload.update(overrides)
    return payload


async def test_guide_creates_tour(client, guide):
    response = await client.post("/api/tours", json=tour_payload(), headers=auth_headers(guide))

    assert response.status_code == 201
    tour = response.json()["tour"]
    assert tour["guideId"] == str(guide.id)
    assert tour["images"] == ["/images/default-tour.jpg"]
    assert tour["availableSpots"] == 8
    assert tour["status"] == "active"
    assert tour["duration"] == "2 hours"


async def test_travelers_cannot_create_tours(client, traveler):
    response = await client.post("/api/tours", json=tour_payload(), headers=auth_headers(traveler))
    assert response.status_code == 403
    assert response.json() == {"success": False, "error": "Only guides can create tours"}


async def test_create_tour_missing_fields(client, guide):
    response = await client.post(
        "/api/tours", json={"title": "Half a tour"}, headers=auth_headers(guide)
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields: description, price, location, date"


async def test_list_tours_filters_and_sorting(client, make_user, make_tour, guide):
    other_guide = await make_user("guide")
    await make_tour(guide, title="Cheap", price=10.0)
    await make_tour(guide, title="Pricey", price=200.0, location="Porto")
    await make_tour(other_guide, title="Middle", price=60.0)

    response = await client.get("/api/tours", params={"sortBy": "price", "sortOrder": "desc"})
    assert [t["title"] for t in response.json()["tours"]] == ["Pricey", "Middle", "Cheap"]

    response = await client.get("/api/tours", params={"guideId": str(guide.id), "sortBy": "price"})
    assert [t["title"] for t in response.json()["tours"]] == ["Cheap", "Pricey"]

    response = await client.get("/api/tours", params={"location": "porto"})
    assert [t["title"] for t in response.json()["tours"]] == ["Pricey"]

    response = await client.get("/api/tours", params={"minPrice": 50, "maxPrice": 100})
    assert [t["title"] for t in response.json()["tours"]] == ["Middle"]


async def test_guide_tours(client, make_user, make_tour, guide):
    other_guide = await make_user("guide")
    mine = await make_tour(guide)
    await make_tour(other_guide)

    response = await client.get("/api/tours/guide-tours", headers=auth_headers(guide))

    assert response.status_code == 200
    assert [t["id"] for t in response.json()["tours"]] == [str(mine.id)]


async def test_health_and_root(client):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"

    root = await client.get("/")
    assert root.json()["name"] == "Guidely"


async def test_recommended_tours_are_the_three_soonest_with_spots(client, make_tour, guide):
    now = datetime.now(UTC)
    await make_tour(guide, title="Yesterday", date=now - timedelta(days=1))
    await make_tour(guide, title="Sold out", date=now + timedelta(days=1), available_spots=0)
    await make_tour(guide, title="Fourth", date=now + timedelta(days=9))
    await make_tour(guide, title="Second", date=now + timedelta(days=3))
    await make_tour(guide, title="First", date=now + timedelta(days=2))
    await make_tour(guide, title="Third", date=now + timedelta(days=5))

    response = await client.get("/api/tours/recommended")

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 3
    assert [t["title"] for t in body["tours"]] == ["First", "Second", "Third"]
    assert all(t["guideName"] == guide.name for t in body["tours"])


async def test_recommended_tours_when_nothing_is_upcoming(client):
    response = await client.get("/api/tours/recommended")
    assert response.json() == {"success": True, "tours": [], "count": 0}
