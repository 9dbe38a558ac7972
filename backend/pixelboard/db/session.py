"""Database session and engine management."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pixelboard.core.config import get_settings
from pixelboard.core.errors import StoreError

logger = logging.getLogger(__name__)

_settings = get_settings()
engine = create_async_engine(_settings.database_url, future=True, echo=False)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""

    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def check_database(session: AsyncSession) -> None:
    """Raise StoreError unless the database answers a trivial query."""

    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.exception("Database readiness check failed")
        raise StoreError("Database not ready") from exc
