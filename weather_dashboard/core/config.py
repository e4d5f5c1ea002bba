from __future__ import annotations

import secrets

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        case_sensitive=False,
        populate_by_name=True,
    )

    env: str = Field(default="development")
    debug: bool = Field(default=False)
    docs_enabled: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    secret_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32), min_length=32
    )
    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=list)

    session_cookie: str = Field(default="weather_dashboard_session", min_length=1, max_length=64)
    session_max_age_seconds: int = Field(default=60 * 60 * 24 * 30, ge=60, le=60 * 60 * 24 * 365)

    openweather_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "APP_OPENWEATHER_API_KEY", "OPENWEATHER_API_KEY", "openweather_api_key"
        ),
    )
    openweather_base_url: str = Field(default="https://api.openweathermap.org/data/2.5")
    openweather_geo_url: str = Field(default="https://api.openweathermap.org/geo/1.0")
    openweather_onecall_url: str = Field(
        default="https://api.openweathermap.org/data/3.0/onecall"
    )
    openweather_tile_url: str = Field(default="https://tile.openweathermap.org/map")

    weather_user_agent: str = Field(
        default="weather-dashboard/0.1",
        min_length=3,
        max_length=256,
    )
    weather_timeout_seconds: float = Field(default=10.0, ge=1.0, le=30.0)
    map_zoom: int = Field(default=5, ge=0, le=19)
    cache_ttl_seconds: int = Field(default=300, ge=0, le=24 * 3600)
    history_max_entries: int = Field(default=10, ge=1, le=100)

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

    @property
    def has_api_key(self) -> bool:
        return bool(self.openweather_api_key)


def load_settings() -> Settings:
    settings = Settings()
    if not settings.cors_origins:
        settings.cors_origins = ["http://localhost:3000", "http://localhost:8000"]
    return settings
