"""Application configuration and settings management."""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="PIXELBOARD_",
        extra="ignore",
    )

    app_name: str = "Pixel Board"
    secret_key: str = "change-me"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./pixelboard.db"

    # Sessions and bearer tokens
    session_max_age_seconds: int = 24 * 60 * 60
    session_cookie_secure: bool = False
    token_expire_days: int = 100 * 365
    token_cleanup_interval_seconds: int = 3600

    allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Uploaded images
    upload_dir: str = "uploads"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: List[str] | str) -> List[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()
