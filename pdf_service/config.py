"""
PDF Service Configuration Module

Centralized configuration management with Pydantic validation.
The Browserless token is optional at load time: a missing token is reported
per request as a server configuration error rather than preventing startup.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PDFServiceSettings(BaseSettings):
    """
    PDF service configuration.

    All settings can be overridden via environment variables
    (BROWSERLESS_TOKEN, BROWSERLESS_ENDPOINT, PLAYWRIGHT_TIMEOUT,
    MAX_CONCURRENT_PDFS).
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    # === Browserless ===
    browserless_token: Optional[str] = Field(
        default=None,
        description="Access token for the hosted Browserless service"
    )
    browserless_endpoint: str = Field(
        default="wss://production-sfo.browserless.io",
        description="Browserless WebSocket endpoint (token appended per connection)"
    )

    # === Rendering ===
    playwright_timeout: int = Field(
        default=30000,
        ge=1000,
        le=300000,
        description="Navigation and PDF timeout in milliseconds"
    )
    max_concurrent_pdfs: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum concurrent renders (1-50)"
    )

    @field_validator("browserless_token")
    @classmethod
    def blank_token_is_missing(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty or whitespace token as not configured."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("browserless_endpoint")
    @classmethod
    def validate_endpoint_format(cls, v: str) -> str:
        """Basic WebSocket URL format validation."""
        if not v.startswith(("ws://", "wss://")):
            raise ValueError(f"Invalid WebSocket URL format: {v}")
        return v.rstrip("/")

    @property
    def browserless_configured(self) -> bool:
        return self.browserless_token is not None


@lru_cache()
def get_settings() -> PDFServiceSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached. Tests override them through
    FastAPI's dependency_overrides.
    """
    return PDFServiceSettings()
