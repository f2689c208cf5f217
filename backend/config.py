"""
Configuration and settings for the storefront backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.constants import DEFAULT_IMAGEKIT_URL_ENDPOINT


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    # Relational database (Postgres expected)
    database_url: Optional[str] = Field(default=None, env="DATABASE_URL")
    seed_on_startup: bool = Field(default=True, env="SEED_ON_STARTUP")

    # Firebase (identity + Firestore)
    firebase_project_id: Optional[str] = Field(default=None, env="FIREBASE_PROJECT_ID")
    google_application_credentials: Optional[str] = Field(
        default=None, env="GOOGLE_APPLICATION_CREDENTIALS"
    )
    firebase_web_api_key: Optional[str] = Field(
        default=None, env="FIREBASE_WEB_API_KEY"
    )

    # Comma separated list of emails granted the admin role.
    admin_emails: str = Field(default="", env="ADMIN_EMAILS")

    # ImageKit CDN
    imagekit_url_endpoint: str = Field(
        default=DEFAULT_IMAGEKIT_URL_ENDPOINT, env="IMAGEKIT_URL_ENDPOINT"
    )
    imagekit_public_key: Optional[str] = Field(default=None, env="IMAGEKIT_PUBLIC_KEY")
    imagekit_private_key: Optional[str] = Field(
        default=None, env="IMAGEKIT_PRIVATE_KEY"
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, env="USE_IN_MEMORY_BACKENDS"
    )

    @property
    def admin_email_set(self) -> frozenset[str]:
        return frozenset(
            email.strip().lower() for email in self.admin_emails.split(",") if email.strip()
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
