"""Pydantic schemas for pixel claim requests."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from pixelboard.schemas.base import CamelModel, UtcTimestamp


class PixelRequestCreate(CamelModel):
    pixels: dict[str, bool]
    image_data: str | None = None
    image_position: Any | None = None
    link: str | None = None
    text: str | None = None
    email: str | None = None
    telegram: str | None = None
    price: float | None = None
    pixel_count: int | None = None


class PixelRequestUpdate(CamelModel):
    """Owner edit; omitted fields keep their stored value."""

    pixels: dict[str, bool] | None = None
    image_data: str | None = None
    image_position: Any | None = None
    link: str | None = None
    text: str | None = None
    email: str | None = None
    telegram: str | None = None


class PixelRequestPublic(CamelModel):
    id: str
    pixels: dict[str, bool]
    image_data: str | None = None
    image_position: Any | None = None
    link: str | None = None
    text: str | None = None
    email: str | None = None
    telegram: str | None = None
    status: str
    created_at: UtcTimestamp
    updated_at: UtcTimestamp


class PixelRequestAdmin(PixelRequestPublic):
    price: float | None = None
    pixel_count: int | None = None
    effective_status: str


class SaveRequestResponse(CamelModel):
    success: bool = True
    message: str
    request_id: str


class StatusChange(BaseModel):
    status: str | None = None


class AdminRequestList(BaseModel):
    success: bool = True
    data: list[PixelRequestAdmin]


class UploadResponse(CamelModel):
    success: bool = True
    image_url: str
    filename: str
