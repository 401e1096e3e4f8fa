#!/usr/bin/env python3
"""
Booking lifecycle flow script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Usage:
    python scripts/flow_book_and_review.py
    python scripts/flow_book_and_review.py --participants 3 --skip-review

Flow:
    1. Register a guide and a traveler
    2. Create a tour (as guide)
    3. Create booking (as traveler)
    4. Confirm booking (as guide)
    5. Complete booking (as guide)
    6. Review booking (as traveler)

Tokens are minted locally with the service's JWT secret, so the script
must run with the same environment as the API.
"""

import argparse
import json
import sys
import time

import httpx

from app.core.security import create_user_token

BASE_URL = "http://localhost:8000"


def api_request(token: str | None, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make an API request, authenticated when a token is given."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    response = httpx.request(
        method,
        f"{BASE_URL}{endpoint}",
        headers=headers,
        json=data,
        timeout=10.0,
    )
    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, key: str | None = None) -> bool:
    """Print result, optionally only one key of the payload."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    payload = result["data"].get(key) if key else result["data"]
    print(json.dumps(payload, indent=2))
    return True


def register(role: str, suffix: str) -> tuple[dict, str]:
    """Register an account and mint a token for it."""
    result = api_request(None, "POST", "/api/auth/register", {
        "name": f"Flow {role.title()}",
        "email": f"flow-{role}-{suffix}@example.com",
        "password": "Flow@12345",
        "role": role,
    })
    if not print_result(result, "user"):
        sys.exit(1)
    user = result["data"]["user"]
    return user, create_user_token(user["id"], user["email"], user["role"])


def main():
    parser = argparse.ArgumentParser(description="Booking lifecycle flow")
    parser.add_argument("--participants", type=int, default=2, help="Number of participants")
    parser.add_argument("--price", type=float, default=75.0, help="Tour price per participant")
    parser.add_argument("--skip-review", action="store_true", help="Stop after completing the booking")
    args = parser.parse_args()

    suffix = str(int(time.time()))

    # Step 1: Accounts
    print_step(1, "Register guide and traveler")
    guide, guide_token = register("guide", suffix)
    traveler, traveler_token = register("traveler", suffix)

    # Step 2: Tour
    print_step(2, "Create tour (as guide)")
    tour_result = api_request(guide_token, "POST", "/api/tours", {
        "title": "Old Town Walk",
        "description": "Two hours through the historic centre.",
        "price": args.price,
        "location": "Lisbon",
        "date": "2030-05-01T09:00:00Z",
    })
    if not print_result(tour_result, "tour"):
        sys.exit(1)
    tour = tour_result["data"]["tour"]

    # Step 3: Booking
    print_step(3, "Create booking (as traveler)")
    booking_result = api_request(traveler_token, "POST", "/api/bookings", {
        "guideId": guide["id"],
        "guideName": guide["name"],
        "tourId": tour["id"],
        "tourName": tour["title"],
        "date": "2030-05-01",
        "participants": args.participants,
        "totalPrice": tour["price"] * args.participants,
    })
    if not print_result(booking_result, "booking"):
        sys.exit(1)
    booking_id = booking_result["data"]["booking"]["id"]

    # Steps 4-5: Guide moves the booking forward
    for step, status in ((4, "confirmed"), (5, "completed")):
        print_step(step, f"Set booking {status} (as guide)")
        result = api_request(guide_token, "PATCH", f"/api/guides/bookings/{booking_id}", {"status": status})
        if not print_result(result, "booking"):
            sys.exit(1)

    if args.skip_review:
        print("\n" + "="*60)
        print("FLOW COMPLETE (skipped review)")
        print("="*60)
        return

    # Step 6: Review
    print_step(6, "Review booking (as traveler)")
    review_result = api_request(traveler_token, "POST", f"/api/bookings/{booking_id}/review", {
        "rating": 5,
        "comment": "Great walk.",
    })
    if not print_result(review_result, "booking"):
        sys.exit(1)

    print("\n" + "="*60)
    print("FULL FLOW COMPLETE")
    print("="*60)
    print(f"Booking:   {booking_id}")
    print(f"Traveler:  {traveler['email']}")
    print(f"Guide:     {guide['email']}")


if __name__ == "__main__":
    main()
