"""Pydantic schemas for user operations."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from pixelboard.schemas.base import CamelModel


class UserCreate(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""
    role: str | None = None


class UserRead(BaseModel):
    id: str
    username: str
    email: str | None = None
    role: str

    model_config = ConfigDict(from_attributes=True)


class UserPasswordUpdate(CamelModel):
    current_password: str = ""
    new_password: str = ""
