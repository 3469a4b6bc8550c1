"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import RedisDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cinemood.constants import HTTPX_TIMEOUT

PLACEHOLDER_SECRET = "change-me-to-a-secure-random-string"
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_name: str = "CineMood"
    app_url: str = "http://localhost:8080"
    app_secret_key: str
    log_level: LogLevel | None = None

    # Storage
    database_url: str = "sqlite+aiosqlite:///./cinemood.db"
    redis_url: RedisDsn = RedisDsn("redis://localhost:6379/0")

    # TMDB: a v3 API key or a v4 read access token
    tmdb_api_key: str = ""
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_timeout: float = HTTPX_TIMEOUT

    # Comma separated; these accounts may purge the cache
    admin_emails: str = ""

    @field_validator("app_secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Session cookies are signed with this key, so reject weak ones."""
        if v == PLACEHOLDER_SECRET:
            raise ValueError("APP_SECRET_KEY is still the placeholder value")
        if len(v) < 32:
            raise ValueError("APP_SECRET_KEY needs at least 32 characters")
        return v

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def database_url_async(self) -> str:
        """Database URL with an async driver (asyncpg for Postgres)."""
        url = self.database_url
        for prefix in ("postgres://", "postgresql://"):
            if url.startswith(prefix):
                return "postgresql+asyncpg://" + url[len(prefix):]
        return url

    @property
    def admin_email_set(self) -> set[str]:
        return {e.strip().lower() for e in self.admin_emails.split(",") if e.strip()}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]
