"""Public guide profile."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from tests.conftest import auth_headers


async def test_profile_by_slug_lists_guide_tours(client, db, make_user, make_tour, guide):
    guide.bio = "Born and raised in Alfama."
    guide.specialty = "History"
    guide.languages = ["Portuguese", "English"]
    await db.commit()
    other = await make_user("guide")
    later = await make_tour(guide, title="Later", date=datetime.now(UTC) + timedelta(days=20))
    sooner = await make_tour(guide, title="Sooner", date=datetime.now(UTC) + timedelta(days=2))
    await make_tour(other, title="Not mine")

    response = await client.get("/api/guides/profile", params={"slug": str(guide.id)})

    assert response.status_code == 200
    profile = response.json()["guide"]
    assert profile["id"] == str(guide.id)
    assert profile["slug"] == str(guide.id)
    assert profile["bio"] == "Born and raised in Alfama."
    assert profile["specialties"] == ["History"]
    assert profile["languages"] == ["Portuguese", "English"]
    assert profile["reviews"] == 0
    assert [t["id"] for t in profile["tours"]] == [str(sooner.id), str(later.id)]
    # Contact details are shared only once a booking is confirmed
    assert "email" not in profile
    assert "phone" not in profile


async def test_profile_of_signed_in_guide(client, guide):
    response = await client.get("/api/guides/profile", headers=auth_headers(guide))

    assert response.status_code == 200
    assert response.json()["guide"]["id"] == str(guide.id)
    assert response.json()["guide"]["tours"] == []


async def test_profile_slug_wins_over_token(client, guide):
    response = await client.get(
        "/api/guides/profile",
        params={"slug": str(guide.id)},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 200
    assert response.json()["guide"]["name"] == guide.name


async def test_profile_requires_slug_or_guide_token(client, traveler):
    anonymous = await client.get("/api/guides/profile")
    assert anonymous.status_code == 400
    assert anonymous.json() == {
        "success": False,
        "error": "Either slug or valid authentication required",
    }

    as_traveler = await client.get("/api/guides/profile", headers=auth_headers(traveler))
    assert as_traveler.status_code == 403

    bad_token = await client.get(
        "/api/guides/profile", headers={"Authorization": "Bearer not-a-token"}
    )
    assert bad_token.status_code == 401


async def test_profile_of_unknown_guide(client, traveler):
    for slug in (str(uuid4()), "not-an-id", str(traveler.id)):
        response = await client.get("/api/guides/profile", params={"slug": slug})
        assert response.status_code == 404
        assert response.json()["error"] == "Guide not found"
