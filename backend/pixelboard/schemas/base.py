"""Shared base for schemas exchanged in camelCase with the board frontend."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from pixelboard.db.base import as_utc


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


UtcTimestamp = Annotated[datetime, PlainSerializer(format_timestamp, return_type=str, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
