"""Typed settings loader for the NDBC marine service."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AnyUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    ndbc_base_url: AnyUrl = Field(
        default="https://www.ndbc.noaa.gov",
        alias="NDBC_BASE_URL",
    )
    ndbc_user_agent: str = Field(default="WeatherandTideReport/1.0", alias="NDBC_USER_AGENT")
    ndbc_timeout_seconds: float = Field(default=10.0, alias="NDBC_TIMEOUT_SECONDS")

    cache_ttl_seconds: float = Field(default=300.0, alias="MARINE_CACHE_TTL_SECONDS")
    cache_max_entries: int = Field(default=256, alias="MARINE_CACHE_MAX_ENTRIES")
    cache_sweep_probability: float = Field(
        default=0.1,
        alias="MARINE_CACHE_SWEEP_PROBABILITY",
    )
    use_mock_data: bool = Field(default=False, alias="MARINE_USE_MOCK_DATA")

    api_host: str = Field(default="127.0.0.1", alias="API_HOST")
    api_port: int = Field(default=3000, alias="API_PORT")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        """Accept lowercase level names from the environment."""
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def validate_limits(self) -> Settings:
        """Validate numeric bounds and string fields."""
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}.")
        if not self.ndbc_user_agent.strip():
            raise ValueError("NDBC_USER_AGENT must not be empty.")
        if self.ndbc_timeout_seconds <= 0:
            raise ValueError("NDBC_TIMEOUT_SECONDS must be > 0.")
        if self.cache_ttl_seconds <= 0:
            raise ValueError("MARINE_CACHE_TTL_SECONDS must be > 0.")
        if self.cache_max_entries <= 0:
            raise ValueError("MARINE_CACHE_MAX_ENTRIES must be > 0.")
        if not (0 <= self.cache_sweep_probability <= 1):
            raise ValueError("MARINE_CACHE_SWEEP_PROBABILITY must be between 0 and 1.")
        if not (0 < self.api_port < 65536):
            raise ValueError("API_PORT must be between 1 and 65535.")
        return self

    @property
    def ndbc_base(self) -> str:
        """Base URL without a trailing slash, ready for path joins."""
        return str(self.ndbc_base_url).rstrip("/")

    def safe_summary(self) -> dict[str, Any]:
        """Return a config summary suitable for startup logging."""
        return {
            "app_env": self.app_env,
            "ndbc_base_url": self.ndbc_base,
            "ndbc_timeout_seconds": self.ndbc_timeout_seconds,
            "cache_ttl_seconds": self.cache_ttl_seconds,
            "cache_max_entries": self.cache_max_entries,
            "cache_sweep_probability": self.cache_sweep_probability,
            "use_mock_data": self.use_mock_data,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
