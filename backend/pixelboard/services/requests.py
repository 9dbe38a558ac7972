"""Lifecycle of pixel claim requests: submission, visibility and admin transitions.

A pending request is shown on the public board only while it is younger than
the visibility window. Confirmed requests are always shown and rejected ones
never are. Admins may move a request between any two statuses.
"""
from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timedelta
from typing import Any, Mapping

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pixelboard.core.errors import AuthorizationError, NotFoundError, ValidationError
from pixelboard.db.base import as_utc, utcnow
from pixelboard.models.pixel_request import (
    REQUEST_STATUSES,
    STATUS_CONFIRMED,
    STATUS_PENDING,
    PixelRequest,
)

logger = logging.getLogger(__name__)

VISIBILITY_WINDOW = timedelta(hours=12)
EFFECTIVE_STATUS_EXPIRED = "expired"

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
TELEGRAM_RE = re.compile(r"^@?[A-Za-z0-9_]{5,32}$")

_url_adapter = TypeAdapter(AnyUrl)

_CONTACT_FIELDS = ("link", "text", "email", "telegram")


def _clean(value: Any) -> str | None:
    """Trim a string field, mapping blanks to None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _number(field: str, value: Any, cast: type) -> Any:
    """Cast an optional numeric field, rejecting values that do not convert."""
    if value is None or value == "":
        return None
    try:
        number = cast(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValidationError(field, f"{field} must be a number") from exc
    if not math.isfinite(number):
        raise ValidationError(field, f"{field} must be a number")
    return number or None


def normalize_telegram(handle: str) -> str:
    handle = handle.strip()
    return handle if handle.startswith("@") else f"@{handle}"


def is_expired(request: PixelRequest, now: datetime) -> bool:
    """True for a pending request at or beyond the visibility window."""
    return request.status == STATUS_PENDING and now - as_utc(request.created_at) >= VISIBILITY_WINDOW


def is_visible(request: PixelRequest, now: datetime) -> bool:
    if request.status == STATUS_CONFIRMED:
        return True
    return request.status == STATUS_PENDING and not is_expired(request, now)


def effective_status(request: PixelRequest, now: datetime) -> str:
    return EFFECTIVE_STATUS_EXPIRED if is_expired(request, now) else request.status


def validate_contact(fields: Mapping[str, Any]) -> dict[str, str | None]:
    """Check and normalise link/text/email/telegram.

    Returns the cleaned values. At least one of email or telegram must be set.
    """
    cleaned = {name: _clean(fields.get(name)) for name in _CONTACT_FIELDS}

    if not cleaned["email"] and not cleaned["telegram"]:
        raise ValidationError("contact", "Either email or telegram is required (at least one contact method)")

    if cleaned["email"] and not EMAIL_RE.match(cleaned["email"]):
        raise ValidationError("email", "Please provide a valid email address")

    if cleaned["telegram"]:
        if not TELEGRAM_RE.match(cleaned["telegram"]):
            raise ValidationError("telegram", "Please provide a valid Telegram username")
        cleaned["telegram"] = normalize_telegram(cleaned["telegram"])

    if cleaned["link"]:
        try:
            _url_adapter.validate_python(cleaned["link"])
        except PydanticValidationError as exc:
            raise ValidationError("link", "Please provide a valid URL for the link field") from exc

    return cleaned


async def submit_request(
    session: AsyncSession,
    fields: Mapping[str, Any],
    owner_id: str | None = None,
    now: datetime | None = None,
) -> PixelRequest:
    contact = validate_contact(fields)
    pixels = fields.get("pixels")
    if not isinstance(pixels, Mapping):
        raise ValidationError("pixels", "Pixels must be an object of coordinate keys")

    now = now or utcnow()
    price = fields.get("price")
    pixel_count = fields.get("pixel_count")
    request = PixelRequest(
        user_id=owner_id,
        pixels=dict(pixels),
        image_data=fields.get("image_data") or None,
        image_position=fields.get("image_position") or None,
        price=_number("price", price, float),
        pixel_count=_number("pixel_count", pixel_count, int),
        status=STATUS_PENDING,
        created_at=now,
        updated_at=now,
        **contact,
    )
    session.add(request)
    await session.flush()
    logger.info("Saved pending request %s (%d pixels)", request.id, len(request.pixels))
    return request


async def get_request(session: AsyncSession, request_id: str) -> PixelRequest | None:
    return await session.get(PixelRequest, request_id)


async def list_visible(session: AsyncSession, now: datetime | None = None) -> list[PixelRequest]:
    """Requests shown on the public board, newest first."""
    now = now or utcnow()
    cutoff = now - VISIBILITY_WINDOW
    result = await session.execute(
        select(PixelRequest)
        .where(
            or_(
                PixelRequest.status == STATUS_CONFIRMED,
                and_(PixelRequest.status == STATUS_PENDING, PixelRequest.created_at > cutoff),
            )
        )
        .order_by(PixelRequest.created_at.desc())
    )
    return [request for request in result.scalars().all() if is_visible(request, now)]


async def list_all(session: AsyncSession, now: datetime | None = None) -> list[tuple[PixelRequest, str]]:
    """Every request with its effective status, newest first."""
    now = now or utcnow()
    result = await session.execute(select(PixelRequest).order_by(PixelRequest.created_at.desc()))
    return [(request, effective_status(request, now)) for request in result.scalars().all()]


async def transition(
    session: AsyncSession, request_id: str, new_status: str | None, now: datetime | None = None
) -> PixelRequest:
    """Set the status of a request, whatever its current status is."""
    if new_status not in REQUEST_STATUSES:
        raise ValidationError("status", "Invalid status. Must be one of: pending, confirmed, rejected")

    now = now or utcnow()
    result = await session.execute(
        update(PixelRequest)
        .where(PixelRequest.id == request_id)
        .values(status=new_status, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        raise NotFoundError("Request not found")

    request = await session.get(PixelRequest, request_id, populate_existing=True)
    logger.info("Request %s moved to %s", request_id, new_status)
    return request


async def update_owned_request(
    session: AsyncSession,
    request_id: str,
    owner_id: str,
    fields: Mapping[str, Any],
    now: datetime | None = None,
) -> PixelRequest:
    """Let the owner replace the pixels, image and contact fields of a request."""
    request = await get_request(session, request_id)
    if request is None:
        raise NotFoundError("Request not found")
    if request.user_id is None or request.user_id != owner_id:
        raise AuthorizationError("You can only edit your own requests")

    merged = {name: getattr(request, name) for name in _CONTACT_FIELDS}
    merged.update({name: fields[name] for name in _CONTACT_FIELDS if name in fields})
    contact = validate_contact(merged)

    if "pixels" in fields and fields["pixels"] is not None:
        if not isinstance(fields["pixels"], Mapping):
            raise ValidationError("pixels", "Pixels must be an object of coordinate keys")
        request.pixels = dict(fields["pixels"])
    if "image_data" in fields:
        request.image_data = fields["image_data"] or None
    if "image_position" in fields:
        request.image_position = fields["image_position"] or None
    for name, value in contact.items():
        setattr(request, name, value)
    request.updated_at = now or utcnow()
    await session.flush()
    return request


async def delete_request(session: AsyncSession, request_id: str) -> None:
    result = await session.execute(delete(PixelRequest).where(PixelRequest.id == request_id))
    if not result.rowcount:
        raise NotFoundError("Request not found")
    logger.info("Deleted request %s", request_id)
