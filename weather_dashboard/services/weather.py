from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from weather_dashboard.core.errors import NotFound, SearchError, UpstreamError
from weather_dashboard.models.weather import (
    AirQualitySnapshot,
    AlertEntry,
    ComposedResult,
    CurrentConditions,
    ForecastSample,
    ForecastSeries,
    Location,
)
from weather_dashboard.services.forecast import to_daily_view, to_hourly_view
from weather_dashboard.services.tiles import tile_for

logger = logging.getLogger(__name__)

DEFAULT_MAP_ZOOM = 5

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class WeatherGateway(Protocol):
    async def fetch_current(self, city: str) -> CurrentConditions | NotFound | UpstreamError: ...

    async def fetch_forecast_series(
        self, city: str
    ) -> ForecastSeries | NotFound | UpstreamError: ...

    async def resolve_location(
        self, query: str, limit: int = 1
    ) -> list[Location] | UpstreamError: ...

    async def fetch_air_quality(
        self, lat: float, lon: float, *, location_name: str = ""
    ) -> AirQualitySnapshot | UpstreamError: ...

    async def fetch_alerts(self, lat: float, lon: float) -> list[AlertEntry] | UpstreamError: ...


class ProxyGateway(WeatherGateway, Protocol):
    """Gateway that can also hand back upstream payloads untouched."""

    async def get_current_payload(self, city: str) -> Any | NotFound | UpstreamError: ...

    async def get_forecast_payload(self, city: str) -> Any | NotFound | UpstreamError: ...

    async def get_air_quality_payload(
        self, lat: float, lon: float
    ) -> Any | NotFound | UpstreamError: ...


@dataclass(frozen=True)
class CachedSearch:
    result: ComposedResult
    # Kept so time-relative views can be rebuilt against the current clock.
    samples: tuple[ForecastSample, ...] = ()


class WeatherCache:
    """Per-process advisory cache of composed results keyed by city."""

    def __init__(self, *, ttl_seconds: int, clock: Clock = utc_now) -> None:
        self._ttl = timedelta(seconds=max(int(ttl_seconds), 0))
        self._clock = clock
        self._lock = threading.Lock()
        self._by_city: dict[str, tuple[datetime, CachedSearch]] = {}

    @staticmethod
    def _key(city: str) -> str:
        return city.strip().casefold()

    @property
    def enabled(self) -> bool:
        return self._ttl > timedelta(0)

    def update(
        self, city: str, result: ComposedResult, samples: tuple[ForecastSample, ...] = ()
    ) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._by_city[self._key(city)] = (self._clock(), CachedSearch(result, samples))

    def get(self, city: str) -> CachedSearch | None:
        if not self.enabled:
            return None
        key = self._key(city)
        with self._lock:
            hit = self._by_city.get(key)
            if hit is None:
                return None
            stored_at, entry = hit
            if self._clock() - stored_at >= self._ttl:
                del self._by_city[key]
                return None
            return entry

    def clear(self) -> None:
        with self._lock:
            self._by_city.clear()


class WeatherAggregator:
    """Resolve one city search into a ComposedResult.

    Current conditions are mandatory; forecast, air quality and alerts are
    fetched concurrently and each degrades to empty on failure.
    """

    def __init__(
        self,
        *,
        gateway: WeatherGateway,
        cache: WeatherCache | None = None,
        clock: Clock = utc_now,
        map_zoom: int = DEFAULT_MAP_ZOOM,
    ) -> None:
        self._gateway = gateway
        self._cache = cache
        self._clock = clock
        self._map_zoom = map_zoom

    async def search(self, city: str) -> ComposedResult | SearchError:
        city = city.strip()
        if self._cache is not None:
            cached = self._cache.get(city)
            if cached is not None:
                logger.debug("Cache hit for %r", city)
                return replace(
                    cached.result, hourly=to_hourly_view(cached.samples, self._clock())
                )

        current = await self._gateway.fetch_current(city)
        if isinstance(current, (NotFound, UpstreamError)):
            logger.info("Search for %r failed: %s", city, current.message)
            return SearchError.from_failure(city, current)

        series, (coords, air_quality, alerts) = await asyncio.gather(
            self._forecast_facet(city),
            self._location_facets(city, current),
        )

        daily = []
        hourly = []
        if series is not None:
            offset = timezone(timedelta(seconds=series.utc_offset_seconds))
            daily = to_daily_view(series.samples, tz=offset)
            hourly = to_hourly_view(series.samples, self._clock())

        map_tile = None
        if coords is not None:
            map_tile = tile_for(coords[0], coords[1], self._map_zoom)

        result = ComposedResult(
            current=current,
            daily=daily,
            hourly=hourly,
            air_quality=air_quality,
            alerts=alerts,
            map_tile=map_tile,
        )
        if self._cache is not None:
            samples = tuple(series.samples) if series is not None else ()
            self._cache.update(city, result, samples)
        return result

    async def _forecast_facet(self, city: str) -> ForecastSeries | None:
        series = await self._gateway.fetch_forecast_series(city)
        if isinstance(series, (NotFound, UpstreamError)):
            logger.info("Forecast degraded for %r: %s", city, series.message)
            return None
        return series

    async def _location_facets(
        self, city: str, current: CurrentConditions
    ) -> tuple[tuple[float, float] | None, AirQualitySnapshot | None, list[AlertEntry]]:
        coords = await self._resolve_coordinates(city, current)
        if coords is None:
            return None, None, []
        lat, lon = coords

        air_quality, alerts = await asyncio.gather(
            self._gateway.fetch_air_quality(lat, lon, location_name=current.location_name or city),
            self._gateway.fetch_alerts(lat, lon),
        )
        if isinstance(air_quality, (NotFound, UpstreamError)):
            logger.info("Air quality degraded for %r: %s", city, air_quality.message)
            air_quality = None
        if isinstance(alerts, (NotFound, UpstreamError)):
            logger.info("Alerts degraded for %r: %s", city, alerts.message)
            alerts = []
        return coords, air_quality, alerts

    async def _resolve_coordinates(
        self, city: str, current: CurrentConditions
    ) -> tuple[float, float] | None:
        if current.has_coordinates:
            return current.latitude, current.longitude

        matches = await self._gateway.resolve_location(city, 1)
        if isinstance(matches, (NotFound, UpstreamError)):
            logger.info("Location lookup failed for %r: %s", city, matches.message)
            return None
        if not matches:
            logger.info("No location match for %r", city)
            return None
        return matches[0].latitude, matches[0].longitude
