"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .categories import CATEGORY_KEYS, MOVIES


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="GhostClient", alias="APP_NAME")
    server_host: str = Field(default="127.0.0.1", alias="HOST")
    server_port: int = Field(default=18081, alias="PORT")

    ghost_server_url: HttpUrl = Field(
        default="http://localhost:18080",
        alias="GHOST_SERVER_URL",
        validation_alias=AliasChoices("GHOST_SERVER_URL", "PUBLIC_IP"),
    )
    ghost_user_id: str | None = Field(default=None, alias="GHOST_USER_ID")
    ghost_password: str | None = Field(default=None, alias="GHOST_PASSWORD")
    ghost_profile_id: str | None = Field(default=None, alias="GHOST_PROFILE_ID")

    default_category: str = Field(default=MOVIES, alias="DEFAULT_CATEGORY")
    request_timeout_seconds: float = Field(
        default=20.0, alias="REQUEST_TIMEOUT", gt=0, le=300
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./ghostclient.db", alias="DATABASE_URL"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("ghost_server_url", mode="before")
    @classmethod
    def _ensure_scheme(cls, value: object) -> object:
        """Accept bare ``host:port`` values the way the old conf.ini stored them."""

        if isinstance(value, str):
            stripped = value.strip()
            if stripped and "://" not in stripped:
                return f"http://{stripped}"
            return stripped
        return value

    @field_validator("default_category", mode="before")
    @classmethod
    def _parse_default_category(cls, value: object) -> str:
        """Normalise the start-up category case-insensitively."""

        if value is None or value == "":
            return MOVIES
        text = str(value).strip().replace("-", "").replace("_", "").lower()
        for key in CATEGORY_KEYS:
            if key.lower() == text:
                return key
        raise ValueError("Unknown default category configured")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def server_base_url(self) -> str:
        """Return the stream server URL without a trailing slash."""

        return str(self.ghost_server_url).rstrip("/")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
