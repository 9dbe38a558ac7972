"""Public pixel request endpoints."""
from __future__ import annotations

import logging
import secrets
import time
from pathlib import Path

from fastapi import APIRouter, Depends, File, UploadFile, status
from starlette.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from pixelboard.core.config import get_settings
from pixelboard.core.dependencies import get_current_identity, get_db, get_optional_identity
from pixelboard.core.errors import ValidationError
from pixelboard.db.base import as_utc
from pixelboard.models.pixel_request import PixelRequest
from pixelboard.schemas.base import MessageResponse
from pixelboard.schemas.pixel_request import (
    PixelRequestCreate,
    PixelRequestPublic,
    PixelRequestUpdate,
    SaveRequestResponse,
    UploadResponse,
)
from pixelboard.services import requests as request_service
from pixelboard.services.auth import ResolvedIdentity

logger = logging.getLogger(__name__)

router = APIRouter(tags=["requests"])

# Uploads are served back from /uploads, so only plain image types are kept.
IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


def _request_to_public(request: PixelRequest) -> PixelRequestPublic:
    return PixelRequestPublic.model_validate(
        {
            "id": request.id,
            "pixels": request.pixels or {},
            "image_data": request.image_data,
            "image_position": request.image_position,
            "link": request.link,
            "text": request.text,
            "email": request.email,
            "telegram": request.telegram,
            "status": request.status,
            "created_at": as_utc(request.created_at),
            "updated_at": as_utc(request.updated_at or request.created_at),
        }
    )


@router.post("/save-request", response_model=SaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def save_request(
    payload: PixelRequestCreate,
    session: AsyncSession = Depends(get_db),
    identity: ResolvedIdentity | None = Depends(get_optional_identity),
) -> SaveRequestResponse:
    request = await request_service.submit_request(
        session,
        payload.model_dump(),
        owner_id=identity.user_id if identity else None,
    )
    await session.commit()
    return SaveRequestResponse(
        message="Request saved successfully. Our admin will contact you within 12 hours.",
        request_id=request.id,
    )


@router.get("/load-project", response_model=list[PixelRequestPublic])
async def load_project(session: AsyncSession = Depends(get_db)) -> list[PixelRequestPublic]:
    """Return visible requests as a bare list; an empty list on any failure."""
    try:
        requests = await request_service.list_visible(session)
        return [_request_to_public(request) for request in requests]
    except Exception:
        logger.exception("Error loading project")
        return []


@router.put("/requests/{request_id}", response_model=MessageResponse)
async def update_request(
    request_id: str,
    payload: PixelRequestUpdate,
    session: AsyncSession = Depends(get_db),
    identity: ResolvedIdentity = Depends(get_current_identity),
) -> MessageResponse:
    await request_service.update_owned_request(
        session, request_id, identity.user_id, payload.model_dump(exclude_unset=True)
    )
    await session.commit()
    return MessageResponse(message="Request updated successfully")


@router.post("/upload-image", response_model=UploadResponse)
async def upload_image(image: UploadFile | None = File(default=None)) -> UploadResponse:
    if image is None or not image.filename:
        raise ValidationError("image", "No image file uploaded")

    suffix = Path(image.filename).suffix.lower()
    content_type = (image.content_type or "").lower()
    if suffix not in IMAGE_SUFFIXES or not content_type.startswith("image/"):
        raise ValidationError("image", "Only PNG, JPEG, GIF and WebP images are allowed")

    upload_dir = Path(get_settings().upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    filename = f"image-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"
    data = await image.read()
    await run_in_threadpool((upload_dir / filename).write_bytes, data)
    logger.info("Stored uploaded image %s", filename)
    return UploadResponse(image_url=f"/uploads/{filename}", filename=filename)
