"""Resolve the caller's identity from session state and/or a bearer token.

Three levels are supported: required (any authenticated identity), admin
(an identity with the admin role) and optional (never fails). A bearer token
is checked against the token store first. A session identity only counts
while the token recorded with it is still stored, so revoking that token ends
every copy of the session cookie. A session identity is used when no bearer
was sent, or when the bearer is the session's own token.

The resolver never writes to the session. When a valid token arrives without
a session identity, the returned identity has ``restore_session`` set and the
caller decides whether to persist it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from pixelboard.core.errors import AuthenticationError, AuthorizationError
from pixelboard.core.security import mask_token
from pixelboard.services.tokens import resolve_token
from pixelboard.services.users import get_user_by_id

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"

SESSION_USER_ID = "user_id"
SESSION_USERNAME = "username"
SESSION_ROLE = "role"
SESSION_TOKEN = "session_token"


@dataclass(frozen=True)
class ResolvedIdentity:
    user_id: str
    username: str | None
    role: str
    token: str | None
    source: str  # "token" or "session"
    restore_session: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def session_values(self) -> dict[str, Any]:
        return {
            SESSION_USER_ID: self.user_id,
            SESSION_USERNAME: self.username,
            SESSION_ROLE: self.role,
            SESSION_TOKEN: self.token,
        }


async def _session_identity(
    db: AsyncSession, session_state: Mapping[str, Any]
) -> ResolvedIdentity | None:
    """Identity recorded in the session, if its token is still stored.

    Every session is opened with a persisted token, so logout and password
    changes end copies of the cookie too.
    """
    user_id = session_state.get(SESSION_USER_ID)
    token = session_state.get(SESSION_TOKEN)
    if not user_id or not token:
        return None
    record = await resolve_token(db, token)
    if record is None or record.user_id != user_id:
        logger.info("Ignoring session of user %s with revoked token %s", user_id, mask_token(token))
        return None
    return ResolvedIdentity(
        user_id=user_id,
        username=session_state.get(SESSION_USERNAME),
        role=session_state.get(SESSION_ROLE) or "user",
        token=token,
        source="session",
    )


async def _token_identity(
    db: AsyncSession, session_state: Mapping[str, Any], bearer: str
) -> ResolvedIdentity | None:
    record = await resolve_token(db, bearer)
    if record is None:
        return None

    session_user_id = session_state.get(SESSION_USER_ID)
    username = session_state.get(SESSION_USERNAME) if session_user_id == record.user_id else None
    if username is None:
        user = await get_user_by_id(db, record.user_id)
        if user is None:
            logger.warning("Token belongs to missing user %s", record.user_id)
            return None
        username = user.username

    return ResolvedIdentity(
        user_id=record.user_id,
        username=username,
        role=record.role,
        token=record.token,
        source="token",
        restore_session=not session_user_id,
    )


async def _resolve(
    db: AsyncSession,
    session_state: Mapping[str, Any],
    bearer: str | None,
    admin: bool,
) -> ResolvedIdentity | None:
    if bearer:
        identity = await _token_identity(db, session_state, bearer)
        if identity is not None and (not admin or identity.is_admin):
            return identity

        session_identity = await _session_identity(db, session_state)
        if (
            session_identity is not None
            and bearer == session_identity.token
            and (not admin or session_identity.is_admin)
        ):
            return session_identity
        return None

    session_identity = await _session_identity(db, session_state)
    if session_identity is not None and (not admin or session_identity.is_admin):
        return session_identity
    return None


async def require_identity(
    db: AsyncSession, session_state: Mapping[str, Any], bearer: str | None
) -> ResolvedIdentity:
    identity = await _resolve(db, session_state, bearer, admin=False)
    if identity is None:
        raise AuthenticationError()
    return identity


async def require_admin_identity(
    db: AsyncSession, session_state: Mapping[str, Any], bearer: str | None
) -> ResolvedIdentity:
    identity = await _resolve(db, session_state, bearer, admin=True)
    if identity is None:
        raise AuthorizationError()
    return identity


async def optional_identity(
    db: AsyncSession, session_state: Mapping[str, Any], bearer: str | None
) -> ResolvedIdentity | None:
    session_identity = await _session_identity(db, session_state)
    if session_identity is not None:
        return session_identity
    if bearer:
        return await _token_identity(db, session_state, bearer)
    return None
