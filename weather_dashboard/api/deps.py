from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from weather_dashboard.core.config import Settings
from weather_dashboard.core.errors import ConfigError
from weather_dashboard.services.weather import ProxyGateway, WeatherAggregator, WeatherCache


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_api_key(settings: Annotated[Settings, Depends(get_settings)]) -> None:
    if not settings.has_api_key:
        raise ConfigError("OpenWeatherMap API key is not set on the server")


def get_openweather_client(request: Request) -> ProxyGateway | None:
    # None when no API key is configured; guarded routes never reach that.
    return getattr(request.app.state, "openweather_client", None)


def get_weather_cache(request: Request) -> WeatherCache | None:
    cache = getattr(request.app.state, "weather_cache", None)
    return cache if isinstance(cache, WeatherCache) else None


def get_weather_aggregator(
    gateway: Annotated[ProxyGateway | None, Depends(get_openweather_client)],
    cache: Annotated[WeatherCache | None, Depends(get_weather_cache)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> WeatherAggregator:
    if gateway is None:
        raise ConfigError("OpenWeatherMap API key is not set on the server")
    return WeatherAggregator(gateway=gateway, cache=cache, map_zoom=settings.map_zoom)


Gateway = Annotated[ProxyGateway, Depends(get_openweather_client)]
OptionalGateway = Annotated[ProxyGateway | None, Depends(get_openweather_client)]
Aggregator = Annotated[WeatherAggregator, Depends(get_weather_aggregator)]
