"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from typing import Any

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pixelboard.core.errors import AuthenticationError, AuthorizationError
from pixelboard.db.session import get_session
from pixelboard.services import auth as auth_service
from pixelboard.services.auth import ResolvedIdentity


async def get_db() -> AsyncIterator[AsyncSession]:
    async with get_session() as session:
        yield session


def get_bearer_token(request: Request) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    header = request.headers.get("authorization")
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def _remember(request: Request, identity: ResolvedIdentity | None) -> ResolvedIdentity | None:
    # Token-only callers get a session so later calls behave as logged in.
    if identity is not None and identity.restore_session:
        request.session.update(identity.session_values())
    return identity


Resolver = Callable[[AsyncSession, Mapping[str, Any], str | None], Awaitable[ResolvedIdentity | None]]


async def _resolve(request: Request, db: AsyncSession, resolver: Resolver) -> ResolvedIdentity | None:
    # Commit either way so a lazily expired token stays deleted.
    try:
        identity = await resolver(db, request.session, get_bearer_token(request))
    except (AuthenticationError, AuthorizationError):
        await db.commit()
        raise
    await db.commit()
    return _remember(request, identity)


async def get_current_identity(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> ResolvedIdentity:
    return await _resolve(request, db, auth_service.require_identity)


async def get_admin_identity(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> ResolvedIdentity:
    return await _resolve(request, db, auth_service.require_admin_identity)


async def get_optional_identity(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> ResolvedIdentity | None:
    return await _resolve(request, db, auth_service.optional_identity)
