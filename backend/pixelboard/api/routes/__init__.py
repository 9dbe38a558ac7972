"""Route modules for the Pixel Board API."""
from . import admin, auth, health, requests

__all__ = ["auth", "requests", "admin", "health"]
