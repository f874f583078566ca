"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    api_base_url: str = "http://localhost:8080"
    auth_token: str | None = None
    request_timeout_seconds: float | None = None
    eligible_projects_path: str = "/api/eligibleProjects"
    photo_leg_timeout_seconds: float | None = None
    photo_leg_retry_attempts: int = 0
    photo_leg_retry_delay_seconds: float = 0.3
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
