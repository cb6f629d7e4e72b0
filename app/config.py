"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="CineScope", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=5000, alias="PORT")

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    tmdb_language: str = Field(default="en-US", alias="TMDB_LANGUAGE")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./cinescope.db", alias="DATABASE_URL"
    )

    session_cookie_name: str = Field(
        default="cinescope_session", alias="SESSION_COOKIE_NAME"
    )
    session_ttl_seconds: int = Field(
        default=604_800, alias="SESSION_TTL", ge=300
    )
    password_hash_iterations: int = Field(
        default=260_000, alias="PASSWORD_HASH_ITERATIONS", ge=1_000
    )

    proxy_url: HttpUrl = Field(default="http://localhost:5000", alias="PROXY_URL")
    favorites_path: str = Field(
        default="./cinescope-storage.json", alias="FAVORITES_PATH"
    )
    min_search_length: int = Field(
        default=3, alias="MIN_SEARCH_LENGTH", ge=1, le=50
    )
    recent_search_limit: int = Field(
        default=5, alias="RECENT_SEARCH_LIMIT", ge=1, le=50
    )
    dark_mode_default: bool = Field(default=False, alias="DARK_MODE_DEFAULT")

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("tmdb_api_key", mode="before")
    @classmethod
    def _strip_blank_key(cls, value: object) -> object:
        """Treat blank API keys as missing."""

        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def secure_cookies(self) -> bool:
        """Return whether session cookies should carry the Secure flag."""

        return self.environment == "production"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
