from __future__ import annotations

import json
from functools import lru_cache
from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, DotEnvSettingsSource, EnvSettingsSource, SettingsConfigDict


_DEFAULT_ORIGINS = [
    "http://localhost",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

# List-valued settings that may also be given as a comma-separated string.
_COMMA_SEPARATED_FIELDS = frozenset({"allow_origins"})


class _CommaSeparatedListMixin:
    def decode_complex_value(self, field_name, field, value):  # type: ignore[override]
        try:
            return super().decode_complex_value(field_name, field, value)
        except json.JSONDecodeError:
            if field_name in _COMMA_SEPARATED_FIELDS:
                return value
            raise


class _EnvSource(_CommaSeparatedListMixin, EnvSettingsSource):
    pass


class _DotEnvSource(_CommaSeparatedListMixin, DotEnvSettingsSource):
    pass


class Settings(BaseSettings):
    """ContentDesk configuration; every field can be overridden by an upper-case env var."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    project_name: str = "ContentDesk API"
    project_version: str = "1.0.0"
    environment: str = Field(
        default="development",
        description="production or prod switches on the startup guards",
        validation_alias=AliasChoices("ENV", "ENVIRONMENT"),
    )
    log_level: str = Field(default="INFO", description="Root log level for the JSON handler")

    # Database
    database_url: str = Field(
        default="sqlite:///./contentdesk.db",
        description="SQLite for local work, postgresql+psycopg in deployment",
    )

    # Auth / JWT
    jwt_secret: str = Field(default="change_me", description="HMAC key for access tokens")
    algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24 * 7, description="Access token expiry in minutes")

    # CORS
    allow_origins: List[str] = Field(default_factory=lambda: list(_DEFAULT_ORIGINS))

    # Connection pool, ignored for SQLite
    db_pool_size: int = Field(default=5, description="Connections kept open")
    db_max_overflow: int = Field(default=10, description="Burst connections above pool_size")
    db_pool_timeout: int = Field(default=30, description="Checkout wait in seconds")
    db_pool_recycle: int = Field(default=1800, description="Connection lifetime in seconds")

    # Dashboard
    dashboard_activity_limit: int = Field(default=10, description="Default size of the recent activity feed")
    dashboard_activity_per_type: int = Field(
        default=5,
        description="Most recent records fetched per entity type before merging the activity feed",
    )
    dashboard_deadline_days: int = Field(default=7, description="Default lookahead window for upcoming deadlines")

    @field_validator("allow_origins", mode="before")
    @classmethod
    def parse_allow_origins(cls, value: str | List[str]) -> List[str]:
        if isinstance(value, list):
            return value
        if isinstance(value, str) and value.strip():
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return list(_DEFAULT_ORIGINS)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            _EnvSource(settings_cls),
            _DotEnvSource(settings_cls),
            file_secret_settings,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
