#!/usr/bin/env python3
"""Create the initial admin user.

Usage: create_admin.py [username] [email] [password]
"""
from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import or_, select

import pixelboard.models  # noqa: F401
from pixelboard.core.errors import ValidationError
from pixelboard.db.base import Base
from pixelboard.db.session import engine, get_session
from pixelboard.models.user import User
from pixelboard.schemas.user import UserCreate
from pixelboard.services.users import create_user

logger = logging.getLogger("create_admin")


async def create_admin(username: str, email: str, password: str) -> int:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with get_session() as session:
        result = await session.execute(
            select(User).where(
                or_(User.username == username.lower(), User.email == email.lower(), User.role == "admin")
            )
        )
        existing = result.scalars().first()
        if existing:
            logger.info("Admin user already exists: %s <%s> (role %s)", existing.username, existing.email, existing.role)
            return 0

        try:
            admin = await create_user(
                session, UserCreate(username=username, email=email, password=password, role="admin")
            )
        except ValidationError as exc:
            logger.error("Could not create admin: %s", exc.message)
            return 1
        await session.commit()
        logger.info("Admin user created: %s <%s>", admin.username, admin.email)
        return 0


if __name__ == "__main__":
    logging.basicConfig(level="INFO", format="%(message)s")
    args = sys.argv[1:]
    username = args[0] if len(args) > 0 else "admin"
    email = args[1] if len(args) > 1 else "admin@example.com"
    password = args[2] if len(args) > 2 else "admin123"
    sys.exit(asyncio.run(create_admin(username, email, password)))
