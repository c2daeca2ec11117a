"""
Library configuration.

Loads settings from environment variables (prefix KNOCK_) with sensible
defaults. Values passed to KnockKnock directly always win.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="KNOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Dispatcher
    # ==========================================================================

    # Forward unauthorized errors to next(error); otherwise only set
    # req.unauthorized_error and call next()
    throw_unauthorized_error: bool = True

    # Status code used by the FastAPI integration for forwarded errors
    unauthorized_status_code: int = 401


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
