"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    auth_provider: Literal["mock", "firebase"] = "firebase"
    firebase_project_id: str | None = None
    firebase_audience: str | None = None

    replicate_api_token: str | None = None
    replicate_api_base: str = "https://api.replicate.com/v1"
    replicate_model_version: str = "3aa3dac9353cc4d6bd62a35e0f07d60c854ed5e00c37b2f12f6e6e2a83f1ba5a"

    gemini_api_key: str | None = None
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-pro"

    animation_poll_interval_seconds: float = Field(default=5.0, ge=0)
    animation_max_poll_attempts: int = Field(default=60, ge=1)
    animation_max_concurrency: int = Field(default=1, ge=1)
    provider_request_timeout_seconds: float = Field(default=30.0, gt=0)

    model_config = SettingsConfigDict(env_prefix="MONUMENTO_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
