from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ZEBEDEE_TIMEOUT_SECONDS = 5


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cantabular
    CANTABULAR_URL: str = "http://localhost:8491"
    CANTABULAR_EXT_API_URL: str = "http://localhost:8492"

    # Cantabular dimension API
    DIMENSIONS_API_URL: str = "http://localhost:27200"

    # Zebedee
    ZEBEDEE_URL: str = "http://localhost:8082"
    ZEBEDEE_REQUEST_TIMEOUT_SECONDS: int = DEFAULT_ZEBEDEE_TIMEOUT_SECONDS

    # HTTP
    HTTP_TIMEOUT_SECONDS: float = 30.0
    ENRICHMENT_MAX_CONCURRENCY: int = Field(default=10, ge=1)

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")

    @field_validator("ZEBEDEE_REQUEST_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def _default_zebedee_timeout(cls, value: object) -> object:
        # Zebedee is often slow; an unset, zero or unparsable timeout keeps the default.
        try:
            timeout = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return DEFAULT_ZEBEDEE_TIMEOUT_SECONDS
        return timeout if timeout > 0 else DEFAULT_ZEBEDEE_TIMEOUT_SECONDS


def get_settings() -> Settings:
    return Settings()
