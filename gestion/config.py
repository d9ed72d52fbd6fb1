"""
Configuration and settings for the gestion service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None)

    # S3-compatible storage for photos and evidence files
    s3_endpoint: Optional[str] = Field(default=None)
    s3_region: Optional[str] = Field(default=None)
    s3_bucket: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)
    storage_public_base_url: Optional[str] = Field(default=None)
    fotos_prefix: str = Field(default="fotos_personas")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Sessions
    session_secret: str = Field(default="gestion-dev-session-secret")
    session_cookie_name: str = Field(default="gestion_session")
    session_cookie_secure: bool = Field(default=False)
    session_max_age_seconds: int = Field(default=8 * 60 * 60)

    # Administrator created on startup when missing
    admin_email: Optional[str] = Field(default=None)
    admin_password: Optional[str] = Field(default=None)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
