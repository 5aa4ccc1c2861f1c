#!/usr/bin/env python3
"""
Bootstrap administrator account.

Creates the admin user described by the ADMIN_* settings, or promotes an
existing account with that email to admin. Safe to run repeatedly.

Usage:
    python scripts/seed_admin.py [--email EMAIL] [--password PASSWORD] [--create-tables]

Arguments:
    --email: Admin email (default: ADMIN_EMAIL setting)
    --password: Admin password (default: ADMIN_PASSWORD setting)
    --create-tables: Create missing tables before seeding (development only)
"""

import argparse
import asyncio
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.config import settings
from app.core.logging import setup_logging
from app.core.security import get_password_hash
from app.db.base import engine, get_session_maker, init_db
from app.models.base import utcnow
from app.models.user import User, UserRole, VolunteerStatus
from app.schemas.auth import normalize_email

logger = logging.getLogger("seed_admin")


async def seed_admin(email: str, password: str, session_maker: Optional[async_sessionmaker] = None) -> User:
    email = normalize_email(email)
    session_maker = session_maker or get_session_maker()
    async with session_maker() as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        now = utcnow()

        if user is None:
            user = User(
                name=settings.ADMIN_NAME,
                email=email,
                password_hash=get_password_hash(password),
                role=UserRole.ADMIN,
                phone=settings.ADMIN_PHONE or "",
                volunteer_status=VolunteerStatus.ACTIVE,
                verified=True,
                verified_at=now,
                created=now,
                updated=now,
            )
            session.add(user)
            logger.info("Created admin account %s", user.email)
        elif user.role != UserRole.ADMIN:
            user.role = UserRole.ADMIN
            user.updated = now
            logger.info("Promoted %s to admin", user.email)
        else:
            logger.info("Admin account %s already exists", user.email)

        await session.commit()

    return user


async def run(email: str, password: str, create_tables: bool = False) -> None:
    if create_tables:
        await init_db()
    try:
        await seed_admin(email, password)
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Create or promote the bootstrap admin account")
    parser.add_argument("--email", default=settings.ADMIN_EMAIL, help="Admin email")
    parser.add_argument("--password", default=settings.ADMIN_PASSWORD, help="Admin password")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables first")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(run(args.email, args.password, args.create_tables))


if __name__ == "__main__":
    main()
