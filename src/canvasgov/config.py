"""Configuration management for canvasgov."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL = "openai:gpt-4o-mini"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CANVASGOV_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Model configuration
    model: str = Field(default=DEFAULT_MODEL, description="Default provider:model for assistants")
    api_key: str | None = Field(default=None, description="API key for the LLM provider")
    api_base: str | None = Field(default=None, description="Optional API base URL")
    max_tokens: int = Field(default=1024, description="Maximum tokens for responses")

    # Runner configuration
    custom_prompts: bool = Field(
        default=False,
        description="Allow assistants to supply their own system prompt instead of the bundled one",
    )
    verbose: bool = Field(default=False, description="Verbose mode forwarded to agent runners")
    throw_exception: bool = Field(default=False, description="Re-raise processing errors for every assistant")

    # Logging configuration
    log_level: str = Field(default="INFO", description="Log level")


def get_settings(**overrides: object) -> Settings:
    """Get application settings, loading from environment and .env."""

    return Settings(**overrides)  # type: ignore[arg-type]
