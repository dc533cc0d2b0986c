"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
This ensures consistent configuration across the application.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Database Configuration
    # Single SQLite file; the parent directory is created on startup.
    DATABASE_URL: str = Field(default="sqlite:///./data/data.db")

    # Session cookie - REQUIRED for signing
    # Must be set via environment variable, never use default in production
    SESSION_SECRET: str = Field(
        default=...,  # Required - no default
        description="Cookie signing key. Generate with: "
                    "python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )
    SESSION_COOKIE_NAME: str = Field(default="session")
    SESSION_MAX_AGE_DAYS: int = Field(default=30, ge=1)

    # The closed set of people who can log in (comma-separated)
    TRACKED_USERS: str = Field(default="Shamil,Halit")

    # Dashboard sizing
    FEED_LIMIT: int = Field(default=30, ge=1)
    HEATMAP_DAYS: int = Field(default=90, ge=1)

    # API Configuration
    API_HOST: str = Field(default="127.0.0.1")
    API_PORT: int = Field(default=3000)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    @property
    def tracked_user_names(self) -> List[str]:
        return [name.strip() for name in self.TRACKED_USERS.split(",") if name.strip()]

    @property
    def session_max_age_seconds(self) -> int:
        return self.SESSION_MAX_AGE_DAYS * 24 * 60 * 60


# Global settings instance
settings = Settings()
