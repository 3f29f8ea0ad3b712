"""Application settings loaded from environment variables and .env files.

Hey future me - these are the PROCESS settings (where config lives, how to log,
how to talk HTTP). The per-source settings (credentials, urls) are NOT here -
they come from config.json / [type].json / source env vars and are resolved by
ScrobbleSources. Don't mix the two!
"""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HttpSettings(BaseModel):
    """Shared HTTP client configuration."""

    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    max_connections: int = Field(default=50, ge=1)
    max_keepalive: int = Field(default=20, ge=0)


class ObservabilitySettings(BaseModel):
    """Logging output configuration."""

    log_json_format: bool = Field(
        default=False, description="Emit JSON log lines (recommended for production)"
    )


class Settings(BaseSettings):
    """Top-level application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SCROBBLEHUB_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = "scrobblehub"
    log_level: str = "INFO"
    config_dir: Path = Field(
        default_factory=Path.cwd,
        description="Directory holding config.json and [type].json files",
    )
    local_url: str = Field(
        default="http://localhost:9078",
        description="Base URL this process is reachable at (OAuth callbacks)",
    )

    http: HttpSettings = Field(default_factory=HttpSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("local_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
