"""
Configuration module for Robin.

All secrets are read from environment variables.
"""
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: Literal["development", "production", "test"] = "development"
    log_level: str = "info"
    log_format: Literal["json", "pretty"] = "pretty"

    # NLU provider
    nlu_provider: Literal["mock", "wit"] = "mock"
    wit_access_token: str = ""
    wit_api_url: str = "https://api.wit.ai"
    wit_api_version: str = "20200612"
    wit_timeout_seconds: float = 10.0
    max_utterance_length: int = 280

    # Dialogue
    delete_account_timeout_minutes: int = 3
    currency_symbol: str = "$"

    # Messages (defaults to the bundled catalog)
    messages_path: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
