"""Application configuration using Pydantic v2.

Centralized settings for ani-track including:
- Source site base URLs
- HTTP client settings (timeout, user agent)
- Storage location and seeded source names
- Logging options
- OS-specific data paths

Configuration can be overridden via environment variables:
    ANI_TRACK__HTTP__TIMEOUT_SECONDS=30
    ANI_TRACK__SOURCES__GOGOANIME_URL=https://gogoanime.example
    ANI_TRACK__STORAGE__DB_FILE=/tmp/db.json
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_data_path() -> Path:
    """Get OS-specific data directory for ani-track.

    Returns:
        Path: ~/.local/state/ani-track (Linux/macOS) or %APPDATA%\\ani-track (Windows)
    """
    if os.name == "nt":
        return Path(os.environ.get("APPDATA", Path.home())) / "ani-track"
    return Path.home() / ".local" / "state" / "ani-track"


class SourceSettings(BaseModel):
    """Base URLs of the supported source sites."""

    gogoanime_url: str = Field(
        "https://www3.gogoanime.se",
        description="Gogoanime base URL",
    )
    otakustream_url: str = Field(
        "https://otakustream.tv",
        description="OtakuStream base URL",
    )
    mangakakalot_url: str = Field(
        "https://manganelo.com",
        description="MangaKakalot/Manganelo base URL",
    )

    @field_validator("gogoanime_url", "otakustream_url", "mangakakalot_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate URL format and drop any trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Source URL must be http(s), got: {v}")
        return v.rstrip("/")


class HttpSettings(BaseModel):
    """HTTP client configuration used when fetching source pages."""

    timeout_seconds: float = Field(
        20,
        ge=1,
        le=120,
        description="Per-request timeout in seconds",
    )
    user_agent: str = Field(
        "Mozilla/5.0 (X11; Linux x86_64) ani-track",
        min_length=1,
        description="User-Agent header sent to source sites",
    )


class StorageSettings(BaseModel):
    """JSON store configuration."""

    db_file: Path = Field(
        default_factory=lambda: get_data_path() / "db.json",
        description="Path to the JSON database file",
    )
    default_sources: list[str] = Field(
        default_factory=lambda: ["gogoanime", "otakustream", "mangakakalot"],
        description="Source names seeded into an empty database",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    debug: bool = Field(False, description="Log DEBUG messages to the console")
    log_file: Path = Field(
        default_factory=lambda: get_data_path() / "ani-track.log",
        description="Rotating log file",
    )
    rotation: str = Field("50 MB", min_length=1, description="Rotate the log file at this size")
    retention: int = Field(10, ge=1, description="Rotated log files to keep")


class AppSettings(BaseSettings):
    """Root application settings with environment variable support.

    Environment variables use the prefix ANI_TRACK__ with nested delimiters:
    - ANI_TRACK__HTTP__TIMEOUT_SECONDS=30
    - ANI_TRACK__STORAGE__DB_FILE=/tmp/db.json
    - ANI_TRACK__LOGGING__DEBUG=true

    Can also be configured via .env file in project root.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",  # ANI_TRACK__HTTP__TIMEOUT_SECONDS
        env_prefix="ANI_TRACK__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    sources: SourceSettings = Field(default_factory=SourceSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Singleton instance - import and use throughout the app
settings = AppSettings()
