"""Configuration management for richtoken."""

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

    # Tooltip placement
    tooltip_gap: float = Field(default=8.0, alias="RICHTOKEN_TOOLTIP_GAP")
    viewport_margin: float = Field(default=4.0, alias="RICHTOKEN_VIEWPORT_MARGIN")
    default_tooltip_placement: str = Field(
        default="top",
        alias="RICHTOKEN_TOOLTIP_PLACEMENT",
    )

    # Overlay size estimate used by the in-memory overlay layer
    tooltip_char_width: float = Field(default=7.0, alias="RICHTOKEN_TOOLTIP_CHAR_WIDTH")
    tooltip_line_height: float = Field(
        default=18.0,
        alias="RICHTOKEN_TOOLTIP_LINE_HEIGHT",
    )
    tooltip_padding: float = Field(default=6.0, alias="RICHTOKEN_TOOLTIP_PADDING")
    tooltip_max_width: float = Field(default=240.0, alias="RICHTOKEN_TOOLTIP_MAX_WIDTH")

    # Search
    case_insensitive_search: bool = Field(
        default=True,
        alias="RICHTOKEN_CASE_INSENSITIVE",
    )

    # Codec switches
    enable_placeholders: bool = Field(
        default=True,
        alias="RICHTOKEN_ENABLE_PLACEHOLDERS",
    )
    enable_highlights: bool = Field(
        default=True,
        alias="RICHTOKEN_ENABLE_HIGHLIGHTS",
    )

    log_level: str = Field(default="WARNING", alias="RICHTOKEN_LOG_LEVEL")


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


def reset_settings() -> None:
    """Drop the cached settings so the next lookup re-reads the environment."""
    global _settings
    _settings = None
