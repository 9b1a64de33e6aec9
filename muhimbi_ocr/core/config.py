from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.muhimbi.com/api/"
DEFAULT_LANGUAGE = "English"
DEFAULT_PERFORMANCE = "Slow but accurate"
DEFAULT_TIMEOUT_MINUTES = 15
DEFAULT_POLL_INTERVAL_SECONDS = 5.0


class Settings(BaseSettings):
    """Client configuration read from MUHIMBI_* environment variables or .env."""

    model_config = SettingsConfigDict(env_prefix="MUHIMBI_", env_file=".env", extra="ignore")

    API_KEY: SecretStr = Field(default=SecretStr(""))
    BASE_URL: str = Field(default=DEFAULT_BASE_URL)
    TIMEOUT_MINUTES: float = Field(default=DEFAULT_TIMEOUT_MINUTES, gt=0)
    # Unsafe: only for debugging TLS interception problems.
    SKIP_CERTIFICATE_VALIDATION: bool = Field(default=False)
    POLL_INTERVAL_SECONDS: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, ge=0)
    LANGUAGE: str = Field(default=DEFAULT_LANGUAGE)
    PERFORMANCE: str = Field(default=DEFAULT_PERFORMANCE)
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
