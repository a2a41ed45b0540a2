"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_dispatch_settings() -> "DispatchSettings":
    """Build dispatcher settings from environment."""

    return DispatchSettings()  # type: ignore[call-arg]


def _build_store_settings() -> "StoreSettings":
    return StoreSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class DispatchSettings(BaseSettings):
    """Job dispatcher configuration.

    The dispatcher publishes the generation request to a push queue, which
    forwards it to the target API and later calls back into this service.
    Provider-specific requirements are validated in the factory.
    """

    provider: str = Field(
        "qstash",
        description="Dispatcher provider name (currently: qstash)",
    )
    qstash_url: str = Field(
        "https://qstash.upstash.io/v2/publish/",
        description="Publish endpoint of the push queue; the target URL is appended",
    )
    qstash_token: str | None = Field(
        None,
        description="Bearer token for the push queue",
    )
    target_url: str = Field(
        "https://api.openai.com/v1/images/generations",
        description="URL the queue forwards the generation request to",
    )
    target_api_key: str | None = Field(
        None,
        description="API key forwarded to the target as a bearer token",
    )
    callback_base_url: str | None = Field(
        None,
        description="Public base URL of this service, used to build the callback address",
    )
    callback_path: str = Field(
        "/v1/images/callback",
        description="Path of the callback entry point",
    )
    timeout_seconds: float = Field(
        15.0,
        description="Timeout for the outbound publish call in seconds",
    )
    image_size: str = Field(
        "1024x1024",
        description="Default image size requested from the target",
    )
    image_count: int = Field(
        1,
        description="Default number of images requested per job",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="DISPATCH_",
        case_sensitive=False,
    )


class StoreSettings(BaseSettings):
    """Durable result store configuration."""

    backend: str | None = Field(
        None,
        description="Store backend: 'memory' or 'redis' (auto: redis when redis_url is set)",
    )
    redis_url: str | None = Field(
        None,
        description="Redis connection URL (e.g., redis://localhost:6379/0)",
    )
    key_prefix: str = Field(
        "job:",
        description="Prefix prepended to correlation ids when building store keys",
    )
    result_ttl_seconds: int = Field(
        86400,
        description="Expiry applied to stored results (0 disables expiry)",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    max_prompt_chars: int = Field(
        1000,
        description="Maximum prompt length in characters",
        ge=1,
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable rate limiting of generation requests per caller",
    )
    rate_limit_requests: int = Field(
        10,
        description="Maximum number of requests allowed per window (per caller)",
        ge=1,
    )
    rate_limit_capacity: int = Field(
        500,
        description="Maximum number of distinct callers tracked at once",
        ge=1,
    )
    rate_limit_window_ms: int = Field(
        60000,
        description="Lifetime of a caller's counter in milliseconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers on responses",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log output: 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and echo the request id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    dispatch: DispatchSettings = Field(default_factory=_build_dispatch_settings)
    store: StoreSettings = Field(default_factory=_build_store_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
