"""
Configuration management for the record lifecycle service.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = Field(default="record-lifecycle")
    service_version: str = Field(default="V1")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_workers: int = Field(default=1)
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    # Database
    database_url: str = Field(default="sqlite:///./record_lifecycle.db")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    # Localization and timestamps
    language: str = Field(default="en")
    timezone: str = Field(default="Asia/Jakarta")
    timestamp_utc_format: str = Field(default="%Y-%m-%dT%H:%M:%SZ")
    timestamp_local_format: str = Field(default="%Y-%m-%d %H:%M:%S")

    # Listing
    page_size: int = Field(default=10, ge=1)

    # Identity
    superadmin_role: str = Field(default="superadmin")
    require_actor: bool = Field(
        default=False,
        description="Reject requests that carry no actor headers with 401.",
    )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
