"""
Application settings using Pydantic.

Provides environment-based configuration loading with RULEGRAPH_ prefix.
"""

from functools import lru_cache

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings

from rulegraph.core.errors import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class Settings(BaseSettings):
    """Application settings."""

    # Prometheus
    prometheus_url: str = "http://localhost:9090"
    prometheus_username: str | None = None
    prometheus_password: str | None = None

    # HTTP client settings
    http_timeout: float = 30.0
    http_max_retries: int = 3
    http_retry_backoff_factor: float = 0.5

    # Graph building
    skip_invalid_queries: bool = False
    strict_rule_names: bool = False

    # Logging
    log_level: str = "WARNING"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "RULEGRAPH_"

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        ConfigurationError: If a RULEGRAPH_ variable (or .env entry) is invalid
    """
    try:
        return Settings()
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigurationError(
            f"Invalid setting {field}: {first.get('msg')}",
            details={"errors": exc.error_count()},
        ) from exc
