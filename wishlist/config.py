"""
Configuration and settings for the wishlist service.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WISHLIST_",
        extra="ignore",
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Local key-value store (JSON file on disk)
    local_store_path: str = Field(default="data/wishlist_local.json")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Simulated single-user admin login. Not real authentication.
    admin_username: str = Field(default="admin")
    admin_password: str = Field(default="admin")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
