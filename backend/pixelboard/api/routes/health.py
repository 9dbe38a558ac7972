"""Readiness probe."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from pixelboard.core.dependencies import get_db
from pixelboard.core.errors import StoreError
from pixelboard.db.session import check_database

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(session: AsyncSession = Depends(get_db)):
    try:
        await check_database(session)
    except StoreError as exc:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"success": False, "error": exc.message},
        )
    return {"success": True}
