"""User service functions for CRUD and authentication."""
from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pixelboard.core.errors import ValidationError
from pixelboard.core.security import PasswordHasher
from pixelboard.db.base import utcnow
from pixelboard.models.user import User
from pixelboard.schemas.user import UserCreate
from pixelboard.services.tokens import revoke_all_for_user

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _normalize(value: str) -> str:
    return value.strip().lower()


async def get_user_by_id(session: AsyncSession, user_id: str) -> User | None:
    return await session.get(User, user_id)


async def get_user_by_login(session: AsyncSession, username_or_email: str) -> User | None:
    """Look up a user by username or email."""
    normalized = _normalize(username_or_email)
    result = await session.execute(
        select(User).where(or_(User.username == normalized, User.email == normalized)).limit(1)
    )
    return result.scalar_one_or_none()


async def _login_taken(session: AsyncSession, username: str, email: str) -> bool:
    existing = await session.execute(
        select(User.id).where(or_(User.username == username, User.email == email)).limit(1)
    )
    return existing.first() is not None


async def create_user(session: AsyncSession, user_in: UserCreate) -> User:
    username = _normalize(user_in.username)
    email = _normalize(user_in.email)
    if not username or not email or not user_in.password:
        raise ValidationError("username", "Username, email, and password are required")
    if len(user_in.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if await _login_taken(session, username, email):
        raise ValidationError("username", "Username or email already exists")

    now = utcnow()
    user = User(
        username=username,
        email=email,
        password_hash=PasswordHasher.hash(user_in.password),
        role="admin" if user_in.role == "admin" else "user",
        created_at=now,
        updated_at=now,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        # A concurrent registration won the unique index.
        await session.rollback()
        raise ValidationError("username", "Username or email already exists") from exc
    logger.info("Created %s user %s", user.role, user.username)
    return user


async def authenticate_user(session: AsyncSession, username_or_email: str, password: str) -> User | None:
    user = await get_user_by_login(session, username_or_email)
    if not user:
        return None
    if not PasswordHasher.verify(password, user.password_hash):
        return None
    return user


async def update_user_password(session: AsyncSession, user: User, current_password: str, new_password: str) -> User:
    """Change the password and revoke every bearer token the user holds."""
    if not PasswordHasher.verify(current_password, user.password_hash):
        raise ValidationError("currentPassword", "Current password is incorrect")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("newPassword", f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    user.password_hash = PasswordHasher.hash(new_password)
    user.updated_at = utcnow()
    await session.flush()
    await revoke_all_for_user(session, user.id)
    return user
