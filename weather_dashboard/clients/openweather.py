from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from weather_dashboard.core.errors import NotFound, UpstreamError
from weather_dashboard.models.weather import (
    AirQualitySnapshot,
    AlertEntry,
    CurrentConditions,
    ForecastSample,
    ForecastSeries,
    Location,
    WeatherCategory,
    from_unix,
)

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
OPENWEATHER_GEO_URL = "https://api.openweathermap.org/geo/1.0"
OPENWEATHER_ONECALL_URL = "https://api.openweathermap.org/data/3.0/onecall"

JsonPayload = dict[str, Any] | list[Any]


class OpenWeatherClient:
    """Async adapter over the OpenWeatherMap REST resources.

    No method raises on upstream trouble. Every call returns either a value or
    a ``NotFound``/``UpstreamError`` describing what went wrong.
    """

    def __init__(
        self,
        *,
        api_key: str,
        user_agent: str,
        timeout_seconds: float,
        base_url: str = OPENWEATHER_BASE_URL,
        geo_url: str = OPENWEATHER_GEO_URL,
        onecall_url: str = OPENWEATHER_ONECALL_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._geo_url = geo_url.rstrip("/")
        self._onecall_url = onecall_url
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={
                "User-Agent": user_agent,
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # Raw payloads, returned in upstream shape for the proxy endpoints.

    async def get_current_payload(self, city: str) -> JsonPayload | NotFound | UpstreamError:
        return await self._get_json(
            f"{self._base_url}/weather",
            {"q": city, "units": "metric"},
            resource="current weather",
        )

    async def get_forecast_payload(self, city: str) -> JsonPayload | NotFound | UpstreamError:
        return await self._get_json(
            f"{self._base_url}/forecast",
            {"q": city, "units": "metric"},
            resource="forecast",
        )

    async def get_air_quality_payload(
        self, lat: float, lon: float
    ) -> JsonPayload | NotFound | UpstreamError:
        return await self._get_json(
            f"{self._base_url}/air_pollution",
            {"lat": lat, "lon": lon},
            resource="air quality",
        )

    # Domain-level operations.

    async def fetch_current(self, city: str) -> CurrentConditions | NotFound | UpstreamError:
        payload = await self.get_current_payload(city)
        if isinstance(payload, (NotFound, UpstreamError)):
            return payload
        try:
            return parse_current(payload)
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("Unexpected current weather payload for %r: %s", city, e)
            return UpstreamError("Unexpected current weather response shape")

    async def fetch_forecast_series(self, city: str) -> ForecastSeries | NotFound | UpstreamError:
        payload = await self.get_forecast_payload(city)
        if isinstance(payload, (NotFound, UpstreamError)):
            return payload
        try:
            return parse_forecast(payload)
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("Unexpected forecast payload for %r: %s", city, e)
            return UpstreamError("Unexpected forecast response shape")

    async def resolve_location(self, query: str, limit: int = 1) -> list[Location] | UpstreamError:
        payload = await self._get_json(
            f"{self._geo_url}/direct",
            {"q": query, "limit": limit},
            resource="geocoding",
        )
        if isinstance(payload, NotFound):
            return []
        if isinstance(payload, UpstreamError):
            return payload
        try:
            return [parse_location(item) for item in payload]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Unexpected geocoding payload for %r: %s", query, e)
            return UpstreamError("Unexpected geocoding response shape")

    async def fetch_air_quality(
        self, lat: float, lon: float, *, location_name: str = ""
    ) -> AirQualitySnapshot | UpstreamError:
        payload = await self.get_air_quality_payload(lat, lon)
        if isinstance(payload, NotFound):
            return UpstreamError(payload.message, status_code=404)
        if isinstance(payload, UpstreamError):
            return payload
        try:
            return parse_air_quality(payload, lat=lat, lon=lon, location_name=location_name)
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("Unexpected air quality payload at %s,%s: %s", lat, lon, e)
            return UpstreamError("Unexpected air quality response shape")

    async def fetch_alerts(self, lat: float, lon: float) -> list[AlertEntry] | UpstreamError:
        # The alerts resource needs a paid One Call subscription; any failure
        # reaching it means "no alerts", never an error.
        payload = await self._get_json(
            self._onecall_url,
            {"lat": lat, "lon": lon, "exclude": "current,minutely,hourly,daily"},
            resource="alerts",
        )
        if isinstance(payload, (NotFound, UpstreamError)):
            logger.info("Alerts unavailable at %s,%s: %s", lat, lon, payload.message)
            return []
        try:
            return parse_alerts(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Unexpected alerts payload at %s,%s: %s", lat, lon, e)
            return UpstreamError("Unexpected alerts response shape")

    async def _get_json(
        self, url: str, params: dict[str, Any], *, resource: str
    ) -> JsonPayload | NotFound | UpstreamError:
        try:
            resp = await self._client.get(url, params={**params, "appid": self._api_key})
        except httpx.TimeoutException:
            logger.warning("OpenWeatherMap %s request timed out", resource)
            return UpstreamError(f"Timed out fetching {resource}")
        except httpx.HTTPError as e:
            logger.warning("OpenWeatherMap %s request failed: %s", resource, type(e).__name__)
            return UpstreamError(f"Failed to fetch {resource}")

        if resp.status_code == httpx.codes.NOT_FOUND:
            return NotFound(f"No {resource} found")
        if resp.is_error:
            logger.warning(
                "OpenWeatherMap %s error %s: %s",
                resource,
                resp.status_code,
                resp.text[:200],
            )
            return UpstreamError(
                f"Failed to fetch {resource}", status_code=resp.status_code
            )

        try:
            return resp.json()
        except ValueError:
            return UpstreamError(f"Invalid JSON in {resource} response", resp.status_code)


def parse_location(item: dict[str, Any]) -> Location:
    return Location(
        name=str(item["name"]),
        country=str(item.get("country", "")),
        state=_str_or_none(item.get("state")),
        latitude=float(item["lat"]),
        longitude=float(item["lon"]),
    )


def parse_current(payload: dict[str, Any]) -> CurrentConditions:
    main: dict[str, Any] = payload["main"]
    weather: dict[str, Any] = (payload.get("weather") or [{}])[0]
    wind: dict[str, Any] = payload.get("wind") or {}
    sys: dict[str, Any] = payload.get("sys") or {}
    coord: dict[str, Any] = payload.get("coord") or {}

    return CurrentConditions(
        location_name=str(payload.get("name", "")),
        timestamp=from_unix(payload["dt"]) if "dt" in payload else datetime.now(tz=timezone.utc),
        temperature=float(main["temp"]),
        humidity=float(main.get("humidity", 0)),
        wind_speed_ms=float(wind.get("speed", 0.0)),
        category=WeatherCategory.from_token(weather.get("main")),
        description=str(weather.get("description", "")),
        icon=_str_or_none(weather.get("icon")),
        country=_str_or_none(sys.get("country")),
        latitude=_float_or_none(coord.get("lat")),
        longitude=_float_or_none(coord.get("lon")),
        feels_like=_float_or_none(main.get("feels_like")),
        pressure=_float_or_none(main.get("pressure")),
        sunrise=from_unix(sys["sunrise"]) if sys.get("sunrise") else None,
        sunset=from_unix(sys["sunset"]) if sys.get("sunset") else None,
        utc_offset_seconds=int(payload.get("timezone") or 0),
    )


def parse_forecast(payload: dict[str, Any]) -> ForecastSeries:
    samples: list[ForecastSample] = []
    for item in payload["list"]:
        main: dict[str, Any] = item["main"]
        weather: dict[str, Any] = (item.get("weather") or [{}])[0]
        wind: dict[str, Any] = item.get("wind") or {}
        samples.append(
            ForecastSample(
                timestamp=from_unix(item["dt"]),
                temperature=float(main["temp"]),
                humidity=float(main.get("humidity", 0)),
                wind_speed_ms=float(wind.get("speed", 0.0)),
                category=WeatherCategory.from_token(weather.get("main")),
                description=str(weather.get("description", "")),
                icon=_str_or_none(weather.get("icon")),
            )
        )
    city: dict[str, Any] = payload.get("city") or {}
    return ForecastSeries(samples=samples, utc_offset_seconds=int(city.get("timezone") or 0))


def parse_air_quality(
    payload: dict[str, Any], *, lat: float, lon: float, location_name: str = ""
) -> AirQualitySnapshot:
    entry: dict[str, Any] = payload["list"][0]
    aqi = int(entry["main"]["aqi"])
    if not 1 <= aqi <= 5:
        raise ValueError(f"AQI ordinal out of range: {aqi}")
    components = {
        str(k): float(v)
        for k, v in (entry.get("components") or {}).items()
        if _float_or_none(v) is not None
    }
    return AirQualitySnapshot(
        location_name=location_name,
        latitude=float(lat),
        longitude=float(lon),
        aqi=aqi,
        components=components,
    )


def parse_alerts(payload: dict[str, Any]) -> list[AlertEntry]:
    alerts: list[AlertEntry] = []
    for item in payload.get("alerts") or []:
        alerts.append(
            AlertEntry(
                event=str(item.get("event", "")),
                description=str(item.get("description", "")),
                start=from_unix(item["start"]) if item.get("start") else None,
                end=from_unix(item["end"]) if item.get("end") else None,
                sender_name=_str_or_none(item.get("sender_name")),
            )
        )
    return alerts


def _float_or_none(v: Any) -> float | None:
    try:
        if v is None:
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


def _str_or_none(v: Any) -> str | None:
    if v is None:
        return None
    if isinstance(v, str):
        return v
    return str(v)
