"""
Client configuration for the URL to PDF converter.

Settings are read from environment variables (and a .env file when present)
and validated once at first access.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CACHE_DB_PATH = Path.home() / ".cache" / "url-to-pdf" / "pdf_cache.db"


class ClientSettings(BaseSettings):
    """
    Settings for the conversion orchestrator and its collaborators.

    Environment variables:
        PDF_SERVICE_URL: Base URL of the PDF service
        PDF_CACHE_DB_PATH: SQLite file holding cached PDFs and the counter
        RENDER_TIMEOUT_SECONDS: Time budget for one render request
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    pdf_service_url: str = Field(
        default="http://localhost:8001",
        description="PDF service endpoint URL"
    )
    pdf_cache_db_path: Path = Field(
        default=DEFAULT_CACHE_DB_PATH,
        description="Location of the local PDF cache database"
    )
    render_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Render request timeout in seconds (0-600)"
    )

    @field_validator("pdf_service_url")
    @classmethod
    def validate_url_format(cls, v: str) -> str:
        """Basic URL format validation."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid URL format: {v}")
        return v.rstrip("/")

    @field_validator("pdf_cache_db_path")
    @classmethod
    def expand_db_path(cls, v: Path) -> Path:
        return Path(v).expanduser()


@lru_cache()
def get_settings() -> ClientSettings:
    """Get cached settings instance."""
    return ClientSettings()
