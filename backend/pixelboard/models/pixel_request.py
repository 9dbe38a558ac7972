"""Database model for pixel claim requests."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pixelboard.db.base import Base, utcnow

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_REJECTED = "rejected"
REQUEST_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_REJECTED)


class PixelRequest(Base):
    """A submitted claim on a set of board pixels."""

    __tablename__ = "requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), default=None)
    pixels: Mapped[dict[str, bool]] = mapped_column(JSON, nullable=False)  # {"x,y": true, ...}
    image_data: Mapped[str | None] = mapped_column(Text, default=None)
    image_position: Mapped[Any | None] = mapped_column(JSON, default=None)
    link: Mapped[str | None] = mapped_column(String(2048), default=None)
    text: Mapped[str | None] = mapped_column(Text, default=None)
    email: Mapped[str | None] = mapped_column(String(255), default=None)
    telegram: Mapped[str | None] = mapped_column(String(33), default=None)
    price: Mapped[float | None] = mapped_column(Float, default=None)
    pixel_count: Mapped[int | None] = mapped_column(Integer, default=None)
    status: Mapped[str] = mapped_column(String(16), default=STATUS_PENDING, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
