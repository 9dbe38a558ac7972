"""Persistence of bearer tokens issued at login."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from pixelboard.core.config import get_settings
from pixelboard.core.security import generate_token, mask_token
from pixelboard.db.base import as_utc, utcnow
from pixelboard.models.token import Token

logger = logging.getLogger(__name__)


async def issue_token(session: AsyncSession, user_id: str, role: str, now: datetime | None = None) -> Token:
    """Create and persist a new random token for the user.

    Tokens are effectively non-expiring: ``expires_at`` is set
    ``token_expire_days`` into the future.
    """
    now = now or utcnow()
    settings = get_settings()
    token = Token(
        token=generate_token(),
        user_id=user_id,
        role=role,
        expires_at=now + timedelta(days=settings.token_expire_days),
        created_at=now,
    )
    session.add(token)
    await session.flush()
    return token


async def resolve_token(session: AsyncSession, token: str | None, now: datetime | None = None) -> Token | None:
    """Return the stored token record, deleting it instead if it has expired."""
    if not token:
        return None
    record = await session.get(Token, token)
    if record is None:
        logger.debug("Token not found: %s", mask_token(token))
        return None
    now = now or utcnow()
    if as_utc(record.expires_at) < now:
        logger.info("Token expired: %s", mask_token(token))
        await revoke_token(session, token)
        return None
    return record


async def revoke_token(session: AsyncSession, token: str) -> None:
    await session.execute(delete(Token).where(Token.token == token))
    await session.flush()


async def revoke_all_for_user(session: AsyncSession, user_id: str) -> None:
    await session.execute(delete(Token).where(Token.user_id == user_id))
    await session.flush()


async def cleanup_expired_tokens(session: AsyncSession, now: datetime | None = None) -> int:
    """Delete every expired token and return how many were removed."""
    now = now or utcnow()
    result = await session.execute(
        delete(Token).where(Token.expires_at < now).execution_options(synchronize_session="fetch")
    )
    await session.flush()
    return result.rowcount or 0
