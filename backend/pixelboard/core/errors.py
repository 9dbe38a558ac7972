"""Domain errors raised by services and rendered by the API layer."""
from __future__ import annotations

from fastapi import status


class PixelBoardError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PixelBoardError):
    """Input has the wrong shape or content."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class AuthenticationError(PixelBoardError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class AuthorizationError(PixelBoardError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Admin access required") -> None:
        super().__init__(message)


class NotFoundError(PixelBoardError):
    status_code = status.HTTP_404_NOT_FOUND


class StoreError(PixelBoardError):
    """Persistence failure; the message is never shown to clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
