from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from weather_dashboard.api.deps import get_openweather_client, get_settings, get_weather_cache
from weather_dashboard.core.config import Settings
from weather_dashboard.services.fallback import FallbackProvider
from weather_dashboard.services.weather import ProxyGateway, WeatherAggregator, WeatherCache
from weather_dashboard.web.dashboard import SessionHistoryStorage, WeatherDashboard


def get_fallback_provider(
    settings: Annotated[Settings, Depends(get_settings)],
) -> FallbackProvider:
    return FallbackProvider(map_zoom=settings.map_zoom)


def is_demo_mode(request: Request) -> bool:
    return bool(getattr(request.app.state, "demo_mode", True))


def get_dashboard(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    gateway: Annotated[ProxyGateway | None, Depends(get_openweather_client)],
    cache: Annotated[WeatherCache | None, Depends(get_weather_cache)],
    fallback: Annotated[FallbackProvider, Depends(get_fallback_provider)],
    demo_mode: Annotated[bool, Depends(is_demo_mode)],
) -> WeatherDashboard:
    aggregator = None
    if not demo_mode and gateway is not None:
        aggregator = WeatherAggregator(gateway=gateway, cache=cache, map_zoom=settings.map_zoom)
    return WeatherDashboard(
        aggregator=aggregator,
        fallback=fallback,
        storage=SessionHistoryStorage(request.session),
        demo_mode=demo_mode or aggregator is None,
        max_history=settings.history_max_entries,
        tile_base_url=settings.openweather_tile_url,
        api_key=settings.openweather_api_key,
    )
