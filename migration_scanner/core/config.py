"""
Configuration system with environment-based settings.
Uses pydantic-settings for validation and type safety.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_VERSION: str = "0.1.0"
    ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Scanner
    SCANNER_USER_AGENT: str = "WP-Migration-Scanner/0.1"
    SCANNER_PROBE_TIMEOUT: float = 5.0        # HEAD /wp-json/
    SCANNER_REQUEST_TIMEOUT: float = 10.0     # sitemaps, feeds, REST endpoints, redirects
    SCANNER_HOMEPAGE_TIMEOUT: float = 15.0    # homepage HTML for plugin/integration detection
    SCANNER_MAX_CONNECTIONS: int = 20
    SCANNER_SAMPLE_SIZE: int = Field(default=5, ge=1, le=100)

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "console"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors(cls, v: str | list) -> list:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance - created once per process."""
    return Settings()
