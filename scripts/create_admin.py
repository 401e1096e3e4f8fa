#!/usr/bin/env python3
"""Create an admin user with properly hashed password."""

import asyncio

from sqlalchemy import select

from app.database import close_db, connect_db, get_db_context
from app.models.registry import get_user_model


async def create_admin(
    email: str = "admin@guidely.app",
    password: str = "Admin@12345",
    name: str = "Guidely Admin",
) -> None:
    """Create an admin user, or promote and reset an existing account."""
    await connect_db()
    User = get_user_model()

    async with get_db_context() as session:
        # Check if admin already exists
        result = await session.execute(select(User).where(User.email == email.lower()))
        existing = result.scalar_one_or_none()

        if existing:
            existing.set_password(password)
            existing.role = "admin"
            existing.name = name
            print(f"Updated existing admin user: {email}")
        else:
            admin = User(email=email, name=name, role="admin", profile_completed=True)
            admin.set_password(password)
            session.add(admin)
            print(f"Created admin user: {email}")

    await close_db()

    print(f"Email: {email}")
    print("Role: admin")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", default="admin@guidely.app", help="Admin email")
    parser.add_argument("--password", default="Admin@12345", help="Admin password")
    parser.add_argument("--name", default="Guidely Admin", help="Display name")

    args = parser.parse_args()

    asyncio.run(create_admin(email=args.email, password=args.password, name=args.name))
