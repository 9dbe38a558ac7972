"""Bearer token persistence: issue, resolve, revoke and expiry sweep."""

from datetime import timedelta

from sqlalchemy import select

from pixelboard.db.base import utcnow
from pixelboard.models.token import Token
from pixelboard.services import tokens as token_service


async def _tokens_of(session, user_id):
    result = await session.execute(select(Token.token).where(Token.user_id == user_id))
    return result.scalars().all()


async def test_issue_then_resolve_roundtrip(db_session):
    issued = await token_service.issue_token(db_session, "user-1", "admin")
    await db_session.commit()

    record = await token_service.resolve_token(db_session, issued.token)
    assert record is not None
    assert (record.user_id, record.role) == ("user-1", "admin")


async def test_tokens_are_random_and_far_future(db_session):
    now = utcnow()
    first = await token_service.issue_token(db_session, "user-1", "user", now=now)
    second = await token_service.issue_token(db_session, "user-1", "user", now=now)

    assert first.token != second.token
    assert len(first.token) >= 32
    assert first.expires_at - now > timedelta(days=365 * 50)


async def test_resolve_unknown_or_empty_token(db_session):
    assert await token_service.resolve_token(db_session, "nope") is None
    assert await token_service.resolve_token(db_session, "") is None
    assert await token_service.resolve_token(db_session, None) is None


async def test_revoke_is_idempotent(db_session):
    issued = await token_service.issue_token(db_session, "user-1", "user")
    await token_service.revoke_token(db_session, issued.token)
    await token_service.revoke_token(db_session, issued.token)
    await db_session.commit()

    assert await token_service.resolve_token(db_session, issued.token) is None


async def test_revoke_all_for_user_leaves_other_users(db_session):
    await token_service.issue_token(db_session, "user-1", "user")
    await token_service.issue_token(db_session, "user-1", "user")
    other = await token_service.issue_token(db_session, "user-2", "user")

    await token_service.revoke_all_for_user(db_session, "user-1")
    await db_session.commit()

    assert await _tokens_of(db_session, "user-1") == []
    assert await token_service.resolve_token(db_session, other.token) is not None


async def test_expired_token_is_deleted_on_lookup(db_session):
    past = utcnow() - timedelta(days=400 * 365)
    issued = await token_service.issue_token(db_session, "user-1", "user", now=past)
    await db_session.commit()

    assert await token_service.resolve_token(db_session, issued.token) is None
    assert await _tokens_of(db_session, "user-1") == []


async def test_cleanup_expired_tokens(db_session):
    now = utcnow()
    await token_service.issue_token(db_session, "user-1", "user", now=now - timedelta(days=200 * 365))
    await token_service.issue_token(db_session, "user-2", "user", now=now - timedelta(days=150 * 365))
    keep = await token_service.issue_token(db_session, "user-3", "user", now=now)
    await db_session.commit()

    assert await token_service.cleanup_expired_tokens(db_session, now=now) == 2
    assert await token_service.resolve_token(db_session, keep.token) is not None
    assert await token_service.cleanup_expired_tokens(db_session, now=now) == 0
