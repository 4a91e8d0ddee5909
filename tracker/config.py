"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - ALLOWED_ORIGINS / ALLOWED_PATTERNS stay raw comma-separated strings here;
      parsing into an OriginPolicy happens once in core/origin_policy.py

Design Decisions:
    - DATABASE_URL wins when set; otherwise it is composed from DB_USER,
      DB_PASS, DB_HOST, DB_PORT and DB_NAME
    - db_schema is trusted deployment configuration, applied through
      SQLAlchemy schema translation (never interpolated into SQL text)
"""

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _normalize_async_url(url: str) -> str:
    """Hosting providers hand out postgres:// URLs; asyncpg needs postgresql+asyncpg://."""
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return url.replace(prefix, "postgresql+asyncpg://", 1)
    return url


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Deployment tier: production | staging | anything else = development
    env: str = "development"

    # Database
    database_url: str = ""
    db_user: str = "tracker"
    db_pass: str = "tracker"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "tracker"
    db_schema: str | None = None
    database_pool_size: int = 20
    database_max_overflow: int = 10
    persist_timeout_seconds: float = 5.0

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        if isinstance(v, str):
            return _normalize_async_url(v.strip())
        return v

    @field_validator("db_schema", mode="before")
    @classmethod
    def blank_schema_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def compose_database_url(self) -> "Settings":
        if not self.database_url:
            self.database_url = (
                f"postgresql+asyncpg://{quote_plus(self.db_user)}:"
                f"{quote_plus(self.db_pass)}@{self.db_host}:{self.db_port}/"
                f"{self.db_name}"
            )
        return self

    # CORS
    allowed_origins: str = ""
    allowed_patterns: str = ""
    cors_max_age_seconds: int = 12 * 60 * 60

    # Geolocation (ipinfo.io)
    ipinfo_token: str = ""
    ipinfo_base_url: str = "https://ipinfo.io"
    geolocation_timeout_seconds: float = 2.0

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
