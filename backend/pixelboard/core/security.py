"""Security helpers for password hashing and bearer token generation."""
from __future__ import annotations

import secrets

from passlib.context import CryptContext


_password_context = CryptContext(schemes=["argon2"], deprecated="auto")


class PasswordHasher:
    """Hash and verify user passwords using Argon2id."""

    @staticmethod
    def hash(password: str) -> str:
        return _password_context.hash(password)

    @staticmethod
    def verify(password: str, hashed: str) -> bool:
        return _password_context.verify(password, hashed)


def generate_token() -> str:
    """Return a random, URL-safe bearer token string."""

    return secrets.token_urlsafe(32)


def mask_token(token: str) -> str:
    """Shorten a token for log output."""

    return f"{token[:8]}..."
