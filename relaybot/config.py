"""
RelayBot Configuration Module

This module manages application settings and environment variables using
pydantic-settings for type-safe configuration management.

Environment variables are loaded from .env file or system environment.
All provider credentials use SecretStr to prevent accidental logging.
"""

from functools import lru_cache
from typing import Literal
import logging
import sys

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


VALID_AI_PROVIDERS = {
    "gemini",
    "openai",
    "deepseek",
    "claude",
    "qwen",
    "kimi",
    "llama",
}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic Settings automatically reads from:
    1. Environment variables
    2. .env file in working directory
    3. Default values defined here

    Gateway timings are expressed in seconds.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    gemini_api_key: SecretStr | None = Field(
        default=None, description="Google Gemini API key (query parameter auth)"
    )

    openai_api_key: SecretStr | None = Field(
        default=None, description="OpenAI API key (bearer auth)"
    )

    openai_chat_model: str = Field(
        default="gpt-4o-mini", description="Model name sent to the OpenAI chat endpoint"
    )

    default_ai_provider: str = Field(
        default="gemini",
        description="Provider used when a session has no valid preference",
    )

    default_tts_voice: str = Field(default="Salli", description="Fallback TTS voice")

    default_language: str = Field(
        default="en", description="Default language for new sessions"
    )

    command_prefix: str = Field(
        default="/", min_length=1, max_length=3, description="Explicit command prefix"
    )

    user_agent: str = Field(
        default="RelayBot/0.1", description="User-Agent sent with every outbound call"
    )

    retry_base_delay: float = Field(
        default=1.0, ge=0.0, description="First backoff delay in seconds"
    )

    retry_max_delay: float = Field(
        default=10.0, ge=0.0, description="Backoff ceiling in seconds"
    )

    default_timeout_seconds: float = Field(
        default=15.0,
        gt=0.0,
        description="Per-attempt timeout for services missing from the registry",
    )

    default_max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempt budget for services missing from the registry",
    )

    cache_max_entries: int = Field(
        default=1000,
        ge=1,
        description="Entry count that triggers an inline sweep of expired entries",
    )

    default_cache_ttl: float = Field(
        default=300.0, gt=0.0, description="Cache TTL when a request omits one"
    )

    request_deadline_seconds: float | None = Field(
        default=120.0,
        gt=0.0,
        description="Ceiling for one call including every retry (None = unbounded)",
    )

    max_tts_chars: int = Field(
        default=1000, ge=1, description="Longest text accepted for speech synthesis"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Application log level"
    )

    host: str = Field(default="0.0.0.0", description="Server bind host")

    port: int = Field(default=8000, description="Server bind port")

    debug: bool = Field(default=False, description="Enable debug mode")

    @field_validator("default_ai_provider")
    @classmethod
    def validate_default_ai_provider(cls, v: str) -> str:
        """Ensure default_ai_provider names a known chat provider."""
        v = v.lower()
        if v not in VALID_AI_PROVIDERS:
            raise ValueError(f"default_ai_provider must be one of {VALID_AI_PROVIDERS}")
        return v

    @model_validator(mode="after")
    def validate_backoff(self) -> "Settings":
        """Backoff ceiling may not be below the first delay."""
        if self.retry_max_delay < self.retry_base_delay:
            raise ValueError("retry_max_delay must be >= retry_base_delay")
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Returns cached settings instance.

    Using lru_cache ensures settings are loaded once and reused,
    avoiding repeated file reads and environment parsing.

    Returns:
        Settings: The application settings singleton.
    """
    return Settings()


def configure_logging(settings: Settings) -> None:
    """
    Configure application logging based on settings.

    Sets up structured logging with timestamps and reduces noise
    from third-party HTTP libraries.

    Args:
        settings: The application settings instance.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
