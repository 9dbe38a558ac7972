"""Authentication-related schemas."""
from __future__ import annotations

from pydantic import BaseModel

from pixelboard.schemas.user import UserRead


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: UserRead


class LoginResponse(AuthResponse):
    token: str


class MeResponse(BaseModel):
    success: bool
    user: UserRead | None = None
