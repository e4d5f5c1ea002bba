from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

from weather_dashboard.clients.openweather import (
    parse_air_quality,
    parse_alerts,
    parse_current,
    parse_forecast,
    parse_location,
)
from weather_dashboard.core.errors import NotFound, UpstreamError
from weather_dashboard.models.weather import (
    AirQualitySnapshot,
    AlertEntry,
    CurrentConditions,
    ForecastSample,
    ForecastSeries,
    Location,
    WeatherCategory,
)

LONDON = {"name": "London", "lat": 51.5074, "lon": -0.1278, "country": "GB", "state": "England"}

_CATEGORY_CYCLE = ("Clear", "Clouds", "Rain", "Snow", "Drizzle")


def current_payload(
    name: str = "London",
    *,
    now: datetime,
    lat: float | None = 51.5074,
    lon: float | None = -0.1278,
    main: str = "Clouds",
    temp: float = 18.4,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "weather": [{"id": 801, "main": main, "description": "few clouds", "icon": "02d"}],
        "main": {"temp": temp, "feels_like": temp - 0.5, "pressure": 1013, "humidity": 65},
        "wind": {"speed": 5.5, "deg": 180},
        "dt": int(now.timestamp()),
        "sys": {
            "country": "GB",
            "sunrise": int((now - timedelta(hours=6)).timestamp()),
            "sunset": int((now + timedelta(hours=6)).timestamp()),
        },
        "timezone": 0,
        "name": name,
    }
    if lat is not None and lon is not None:
        payload["coord"] = {"lon": lon, "lat": lat}
    return payload


def forecast_payload(*, now: datetime, count: int = 40, utc_offset: int = 0) -> dict[str, Any]:
    # Upstream samples sit on 3-hour UTC boundaries, starting after "now".
    start = now.replace(minute=0, second=0, microsecond=0)
    start += timedelta(hours=3 - start.hour % 3)
    items = []
    for i in range(count):
        ts = start + timedelta(hours=3 * i)
        main = _CATEGORY_CYCLE[i % len(_CATEGORY_CYCLE)]
        items.append(
            {
                "dt": int(ts.timestamp()),
                "main": {"temp": 10.4 + i % 5, "humidity": 70},
                "weather": [{"main": main, "description": main.lower(), "icon": "10d"}],
                "wind": {"speed": 5.0},
            }
        )
    return {
        "cod": "200",
        "cnt": count,
        "list": items,
        "city": {"name": "London", "timezone": utc_offset},
    }


def air_quality_payload(aqi: int = 2) -> dict[str, Any]:
    return {
        "coord": {"lon": -0.1278, "lat": 51.5074},
        "list": [
            {
                "main": {"aqi": aqi},
                "components": {"co": 201.9, "no2": 15.2, "o3": 45.1, "pm2_5": 8.1, "pm10": 12.3},
                "dt": 1700000000,
            }
        ],
    }


def sample(
    ts: datetime,
    *,
    temp: float = 10.0,
    category: WeatherCategory = WeatherCategory.CLEAR,
    wind_ms: float = 5.0,
) -> ForecastSample:
    return ForecastSample(
        timestamp=ts,
        temperature=temp,
        humidity=70.0,
        wind_speed_ms=wind_ms,
        category=category,
        description=category.value.lower(),
        icon="01d",
    )


class FakeOpenWeatherClient:
    """In-memory gateway with per-resource failure switches."""

    def __init__(self, *, now: datetime | None = None) -> None:
        self.now = now or datetime.now(tz=timezone.utc).replace(microsecond=0)
        self.current: dict[str, dict[str, Any]] = {
            "london": current_payload("London", now=self.now),
        }
        self.locations: dict[str, list[dict[str, Any]]] = {"london": [LONDON]}
        self.alerts: list[dict[str, Any]] = []
        self.aqi = 2
        self.utc_offset = 0

        self.current_failure: NotFound | UpstreamError | None = None
        self.forecast_failure: NotFound | UpstreamError | None = None
        self.geocode_failure: UpstreamError | None = None
        self.air_quality_failure: UpstreamError | None = None
        self.alerts_failure: UpstreamError | None = None

        # Set to make the forecast fetch wait until alerts have been requested.
        self.forecast_waits_for_alerts = False
        self._alerts_requested: asyncio.Event | None = None

        self.calls: list[str] = []

    async def aclose(self) -> None:
        return None

    async def get_current_payload(self, city: str):
        self.calls.append("current")
        if self.current_failure is not None:
            return self.current_failure
        payload = self.current.get(city.casefold())
        if payload is None:
            return NotFound("No current weather found")
        return payload

    async def get_forecast_payload(self, city: str):
        self.calls.append("forecast")
        if self.forecast_waits_for_alerts:
            await self._alerts_event().wait()
        if self.forecast_failure is not None:
            return self.forecast_failure
        if city.casefold() not in self.current:
            return NotFound("No forecast found")
        return forecast_payload(now=self.now, utc_offset=self.utc_offset)

    async def get_air_quality_payload(self, lat: float, lon: float):
        self.calls.append("air_quality")
        if self.air_quality_failure is not None:
            return self.air_quality_failure
        return air_quality_payload(self.aqi)

    async def fetch_current(self, city: str) -> CurrentConditions | NotFound | UpstreamError:
        payload = await self.get_current_payload(city)
        if isinstance(payload, (NotFound, UpstreamError)):
            return payload
        return parse_current(payload)

    async def fetch_forecast_series(self, city: str) -> ForecastSeries | NotFound | UpstreamError:
        payload = await self.get_forecast_payload(city)
        if isinstance(payload, (NotFound, UpstreamError)):
            return payload
        return parse_forecast(payload)

    async def resolve_location(self, query: str, limit: int = 1) -> list[Location] | UpstreamError:
        self.calls.append("geocode")
        if self.geocode_failure is not None:
            return self.geocode_failure
        return [parse_location(item) for item in self.locations.get(query.casefold(), [])[:limit]]

    async def fetch_air_quality(
        self, lat: float, lon: float, *, location_name: str = ""
    ) -> AirQualitySnapshot | UpstreamError:
        payload = await self.get_air_quality_payload(lat, lon)
        if isinstance(payload, UpstreamError):
            return payload
        return parse_air_quality(payload, lat=lat, lon=lon, location_name=location_name)

    async def fetch_alerts(self, lat: float, lon: float) -> list[AlertEntry] | UpstreamError:
        self.calls.append("alerts")
        if self.forecast_waits_for_alerts:
            self._alerts_event().set()
        if self.alerts_failure is not None:
            return self.alerts_failure
        return parse_alerts({"alerts": self.alerts})

    def _alerts_event(self) -> asyncio.Event:
        if self._alerts_requested is None:
            self._alerts_requested = asyncio.Event()
        return self._alerts_requested
