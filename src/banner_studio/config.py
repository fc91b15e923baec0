from __future__ import annotations

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Loads keys from process env, and also from a local .env file for convenience.
    model_config = SettingsConfigDict(env_prefix="", extra="ignore", env_file=".env", env_file_encoding="utf-8")

    # Keys
    gemini_api_key: str | None = None

    # Models
    prompt_model: str = "gemini-2.5-flash"
    deep_research_model: str = "gemini-2.5-pro"
    deep_research_thinking_budget: int = 32768
    image_model: str = "imagen-4.0-generate-001"
    image_quality: int = 92
    edit_model: str = "gemini-2.5-flash-image"

    # Thumbnail fetching
    thumbnail_timeout: float = 10.0

    # Sessions
    session_cookie: str = "banner_session"
    session_ttl_seconds: int = 6 * 60 * 60

    log_level: str = "INFO"


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
