"""Background scheduler for periodic maintenance jobs."""
from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from pixelboard.core.config import get_settings
from pixelboard.db.session import get_session
from pixelboard.services.tokens import cleanup_expired_tokens

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None

TOKEN_CLEANUP_JOB_ID = "cleanup-expired-tokens"


def get_scheduler() -> AsyncIOScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler()
    return _scheduler


def start_scheduler() -> None:
    scheduler = get_scheduler()
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
    # A stopped AsyncIOScheduler stays bound to its old event loop.
    _scheduler = None


def schedule_token_cleanup_job() -> None:
    settings = get_settings()
    scheduler = get_scheduler()
    trigger = IntervalTrigger(seconds=settings.token_cleanup_interval_seconds)
    scheduler.add_job(_cleanup_tokens, trigger=trigger, id=TOKEN_CLEANUP_JOB_ID, replace_existing=True)
    logger.info("Scheduled token cleanup every %s seconds", trigger.interval.total_seconds())


async def _cleanup_tokens() -> None:
    try:
        async with get_session() as session:
            removed = await cleanup_expired_tokens(session)
            await session.commit()
    except SQLAlchemyError:
        logger.exception("Token cleanup failed")
        return
    if removed:
        logger.info("Removed %d expired token(s)", removed)
