#!/usr/bin/env python3
"""Create or promote an admin account."""

import argparse
import asyncio

from sqlalchemy import select

from campus.config import settings
from campus.core.security import get_password_hash
from campus.database import Database
from campus.models.user import User


async def create_admin(email: str, password: str, name: str) -> None:
    """Create an admin user, or reset an existing account to admin."""
    database = Database.from_settings(settings)
    try:
        async with database.session() as session:
            result = await session.execute(select(User).where(User.email == email.lower()))
            existing = result.scalar_one_or_none()

            if existing:
                existing.password_hash = get_password_hash(password)
                existing.role = "admin"
                existing.is_active = True
                existing.name = name
                print(f"Updated existing admin user: {email}")
            else:
                session.add(
                    User(
                        email=email.lower(),
                        name=name,
                        password_hash=get_password_hash(password),
                        role="admin",
                        is_active=True,
                    )
                )
                print(f"Created admin user: {email}")
    finally:
        await database.dispose()

    print(f"Email: {email}")
    print("Role: admin")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", default="admin@festo.campus", help="Admin email")
    parser.add_argument("--password", required=True, help="Admin password")
    parser.add_argument("--name", default="Festo Admin", help="Display name")

    args = parser.parse_args()

    asyncio.run(create_admin(email=args.email, password=args.password, name=args.name))
