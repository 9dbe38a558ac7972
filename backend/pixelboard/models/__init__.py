"""SQLAlchemy models exposed for metadata creation and imports."""
from .pixel_request import PixelRequest
from .token import Token
from .user import User

__all__ = ["User", "PixelRequest", "Token"]
