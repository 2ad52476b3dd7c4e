"""Configuration management for lumina."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from LUMINA_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LUMINA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    data_dir: Path = Field(default=Path.home() / ".lumina", description="Directory holding the JSON blobs")

    # Inference (Claude CLI)
    inference_enabled: bool = Field(default=True, description="Use the language model for task parsing")
    claude_command: str = Field(default="claude", description="Claude CLI executable name or path")
    claude_model: str = Field(default="haiku", description="Model passed to the Claude CLI")
    inference_timeout: float = Field(default=8.0, gt=0, description="Seconds before an inference call is abandoned")

    # Logging
    log_level: str = Field(default="WARNING", description="Root log level")


@lru_cache
def get_settings() -> Settings:
    return Settings()
