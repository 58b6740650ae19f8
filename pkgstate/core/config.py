"""
pkgstate Configuration

Configuration management with environment variable support.
All settings are read from PKGSTATE_-prefixed variables or a local .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional
from functools import lru_cache
from dotenv import load_dotenv

from ..constants import MAX_KEY_LENGTH

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Package state settings with validation and safe defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PKGSTATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Runtime environment"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(
        default="console", description="Log renderer: 'json' or 'console'"
    )

    # Cache keys
    MAX_KEY_LENGTH: int = Field(
        default=MAX_KEY_LENGTH,
        ge=1,
        le=4096,
        description="Maximum accepted cache key length",
    )

    # Remote identity lookup
    IDENTITY_URL: Optional[str] = Field(
        default=None, description="Endpoint returning the remote identity as JSON"
    )
    IDENTITY_FIELD: str = Field(
        default="id", min_length=1, description="JSON field holding the identifier"
    )
    IDENTITY_TOKEN: Optional[str] = Field(
        default=None, description="Bearer token sent with the identity request"
    )
    IDENTITY_TIMEOUT_SECONDS: float = Field(
        default=10.0, gt=0, le=300, description="Identity request timeout"
    )
    IDENTITY_MAX_RETRIES: int = Field(
        default=3, ge=1, le=10, description="Attempts for transient request errors"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the logging level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return fmt

    @field_validator("IDENTITY_URL")
    @classmethod
    def validate_identity_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("IDENTITY_URL must start with http:// or https://")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    @property
    def identity_configured(self) -> bool:
        return self.IDENTITY_URL is not None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
