# sitegen/config.py
"""
Centralized application configuration using pydantic-settings.

All settings are read from environment variables or .env file.
Deployments only need to modify .env - no code changes needed.
"""

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Priority: environment variables > .env file > defaults
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    # --- Database ---
    DB_URL: str = Field(
        default="postgresql://localhost:5432/sitegen",
        description="PostgreSQL connection URL"
    )
    DB_POOL_SIZE: int = Field(
        default=10,
        ge=1,
        description="Number of pooled database connections"
    )
    DB_MAX_OVERFLOW: int = Field(
        default=0,
        ge=0,
        description="Connections allowed beyond the pool size"
    )
    DB_POOL_TIMEOUT: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for a free pooled connection"
    )

    # --- Server ---
    HOST: str = Field(
        default="127.0.0.1",
        description="Server bind host"
    )
    PORT: int = Field(
        default=3001,
        description="Server bind port"
    )
    CORS_ORIGINS: List[str] = Field(
        default=["*"],
        description="Origins allowed to call the API from a browser"
    )

    # --- Debug / Logging ---
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    OTEL_ENABLED: bool = Field(
        default=False,
        description="Export OpenTelemetry traces to the console"
    )
    SERVICE_NAME: str = Field(
        default="sitegen",
        description="service.name reported in traces"
    )

    # --- Auth ---
    JWT_SECRET: str = Field(
        default="change-me",
        description="HMAC secret used to sign access tokens"
    )
    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    JWT_EXPIRES_SECONDS: int = Field(
        default=24 * 3600,
        gt=0,
        description="Access token lifetime"
    )

    # --- AWS ---
    AWS_REGION: str = Field(
        default="us-west-2",
        description="Region for Bedrock and S3"
    )
    ASSET_BUCKET: str = Field(
        default="aset-backend-umkm-generator",
        description="Bucket receiving uploaded images"
    )
    HOSTING_BUCKET: str = Field(
        default="published-website-umkm",
        description="S3 static-website bucket serving published sites"
    )
    HOSTING_BASE_URL: Optional[str] = Field(
        default=None,
        description="Public base URL of the hosting bucket (derived from bucket and region when empty)"
    )
    HOSTING_MAX_RETRIES: int = Field(
        default=2,
        ge=0,
        description="Retries for transient hosting failures"
    )
    MAX_UPLOAD_BYTES: int = Field(
        default=5 * 1024 * 1024,
        gt=0,
        description="Largest accepted asset upload"
    )

    # --- Model ---
    BEDROCK_MODEL_ID: str = Field(
        default="anthropic.claude-3-5-sonnet-20240620-v1:0",
        description="Bedrock model used to synthesize pages"
    )
    MODEL_MAX_TOKENS: int = Field(
        default=4096,
        gt=0,
        description="Upper bound on generated tokens"
    )
    MODEL_TEMPERATURE: float = Field(
        default=0.7,
        description="Sampling temperature"
    )
    MODEL_TIMEOUT_SECONDS: float = Field(
        default=120.0,
        gt=0,
        description="Seconds before a model call is abandoned"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v_upper

    @field_validator("MODEL_TEMPERATURE")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("MODEL_TEMPERATURE must be between 0.0 and 1.0")
        return v

    @field_validator("HOSTING_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        return v.rstrip("/") if v else v


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance (singleton pattern)."""
    return Settings()


# --- Singleton instance for easy import ---
settings = get_settings()


# --- Module-level exports ---

# Database
DATABASE_URL: str = settings.DB_URL

# Server
HOST: str = settings.HOST
PORT: int = settings.PORT
DEBUG: bool = settings.DEBUG
LOG_LEVEL: str = settings.LOG_LEVEL
SERVICE_NAME: str = settings.SERVICE_NAME

# --- Paths (computed, not from env) ---
PROJECT_ROOT: str = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
LOGS_PATH: str = os.path.join(PROJECT_ROOT, "logs")
