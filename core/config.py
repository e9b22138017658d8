"""
Configuration settings for Panic Relay Backend.

Uses Pydantic Settings for environment variable management.
"""

import os
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    ENV: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # Logging Control
    ENABLE_FILE_LOGGING: bool = Field(default=True)
    ENABLE_REQUEST_LOGGING: bool = Field(default=True)

    # Application
    APP_NAME: str = Field(default="Panic Relay Backend")
    VERSION: str = Field(default="1.0.0")

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3001)

    origins: List[str] = [
        "http://localhost:3000",  # pwa dev server
        "http://localhost:5173",
    ]

    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./panic_relay.db")

    # Security
    SECRET_KEY: str = Field(..., description="Token signing key")
    ALGORITHM: str = Field(default="HS256")
    # 0 disables expiry
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 30, ge=0)

    # Realtime
    SOCKETIO_PATH: str = Field(default="socket.io")
    NOTIFY_ALL_SESSIONS: bool = Field(default=True)

    # Static record attached to every panic notification
    EMERGENCY_CONTACT_EMAIL: str = Field(default="help@panic-relay.example")
    EMERGENCY_CONTACT_PHONE: str = Field(default="+1 (619) 609 3341")

    # Sentry (Optional)
    SENTRY_DSN: Optional[str] = Field(default=None)
    SENTRY_ENVIRONMENT: str = Field(default="development")

    @field_validator("SECRET_KEY")
    @classmethod
    def secret_key_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("SECRET_KEY must be set to a non-empty value")
        return value

    @property
    def database_url(self) -> str:
        return self.DATABASE_URL


def get_env_file() -> str:
    """Get the appropriate environment file based on ENV setting."""
    env_file = f".env.{os.getenv('ENV', 'development')}"
    if os.path.exists(env_file):
        return env_file
    return ".env"


# Create settings instance
settings = Settings(_env_file=get_env_file())
