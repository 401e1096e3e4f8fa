"""Shared fixtures: an in-memory database per test and an ASGI client."""

import itertools
import os
from datetime import UTC, datetime, timedelta
from functools import lru_cache

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["ENVIRONMENT"] = "test"
os.environ["SENDGRID_API_KEY"] = ""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from app import models  # noqa: F401
from app.core.security import create_user_token, get_password_hash
from app.database import Base, create_engine_for_url, get_db
from app.main import app as application
from app.models.booking import Booking
from app.models.tour import Tour
from app.models.user import User

TEST_PASSWORD = "Secret@12345"

_sequence = itertools.count(1)


@lru_cache
def _password_hash() -> str:
    return get_password_hash(TEST_PASSWORD)


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header for ``user``."""
    token = create_user_token(str(user.id), user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def engine():
    engine = create_engine_for_url("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    """Session used by tests to arrange data; commit before calling the API."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    application.dependency_overrides.clear()


@pytest.fixture
def fetch(session_factory):
    """Load a fresh copy of a row, bypassing any cached identity map."""

    async def _fetch(model, ident):
        async with session_factory() as session:
            return await session.get(model, ident)

    return _fetch


@pytest.fixture
def make_user(db):
    async def _make(role: str = "traveler", **fields) -> User:
        n = next(_sequence)
        fields.setdefault("name", f"{role.title()} {n}")
        fields.setdefault("email", f"{role}{n}@example.com")
        user = User(role=role, password_hash=_password_hash(), **fields)
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
def make_tour(db):
    async def _make(guide: User, **fields) -> Tour:
        fields.setdefault("title", "Old Town Walk")
        fields.setdefault("description", "Two hours through the historic centre.")
        fields.setdefault("price", 50.0)
        fields.setdefault("location", "Lisbon")
        fields.setdefault("date", datetime.now(UTC) + timedelta(days=30))
        tour = Tour(guide_id=guide.id, **fields)
        db.add(tour)
        await db.commit()
        return tour

    return _make


@pytest.fixture
def make_booking(db):
    async def _make(traveler: User, guide: User, tour: Tour, **fields) -> Booking:
        fields.setdefault("date", "2030-05-01")
        fields.setdefault("participants", 2)
        fields.setdefault("total_price", tour.price * fields["participants"])
        fields.setdefault("status", "pending")
        booking = Booking(
            traveler_id=traveler.id,
            traveler_name=traveler.name,
            traveler_email=traveler.email,
            guide_id=guide.id,
            guide_name=guide.name,
            tour_id=tour.id,
            tour_name=tour.title,
            **fields,
        )
        db.add(booking)
        await db.commit()
        return booking

    return _make


@pytest_asyncio.fixture
async def traveler(make_user):
    return await make_user("traveler", name="Ana Traveler")


@pytest_asyncio.fixture
async def guide(make_user):
    return await make_user("guide", name="Rui Guide", phone="+351 900 000 000")


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user("admin", name="Site Admin")


@pytest_asyncio.fixture
async def tour(make_tour, guide):
    return await make_tour(guide)
