"""Configuration management for Contract Amender."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration via environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Output
    output_dir: Path = Field(
        default=Path("amended"),
        alias="AMENDER_OUTPUT_DIR",
    )
    document_author: str = Field(
        default="Document Service",
        alias="AMENDER_AUTHOR",
    )
    document_title: str = Field(
        default="Contract",
        alias="AMENDER_TITLE",
    )

    # Batch policy: stop at the first failing document instead of
    # reporting every document's result
    fail_fast: bool = Field(
        default=False,
        alias="AMENDER_FAIL_FAST",
    )

    log_level: str = Field(
        default="INFO",
        alias="AMENDER_LOG_LEVEL",
    )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, creating it if needed."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load settings from an optional specific .env file."""
    global _settings
    if env_file:
        _settings = Settings(_env_file=env_file)
    else:
        _settings = Settings()
    return _settings
