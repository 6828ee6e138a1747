from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Helpdesk configuration, read from ``HELPDESK_*`` variables or ``.env``."""

    model_config = SettingsConfigDict(env_prefix="HELPDESK_", env_file=".env", extra="ignore")

    app_name: str = "Helpdesk API"
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    store_url: str = Field(default="http://localhost:3001", description="Base URL of the record store")
    store_timeout: float = Field(default=10.0, gt=0)
    store_db_path: str = Field(default="db.json", description="JSON file served by the record store")

    # Every seeded user signs in with this password.
    demo_password: str = "password"

    otel_enabled: bool = False
    otel_service_name: str = "helpdesk-api"
    otel_exporter_otlp_endpoint: str | None = None
    otel_exporter_otlp_headers: str | None = None

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("store_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
