from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class WeatherCategory(str, Enum):
    CLEAR = "Clear"
    CLOUDS = "Clouds"
    RAIN = "Rain"
    SNOW = "Snow"
    THUNDERSTORM = "Thunderstorm"
    DRIZZLE = "Drizzle"
    MIST = "Mist"
    FOG = "Fog"
    HAZE = "Haze"
    SMOKE = "Smoke"
    DUST = "Dust"
    SAND = "Sand"
    ASH = "Ash"
    SQUALL = "Squall"
    TORNADO = "Tornado"
    OTHER = "Other"

    @classmethod
    def from_token(cls, token: str | None) -> WeatherCategory:
        # Exact, case-sensitive match on the upstream "main" token.
        if token is None:
            return cls.OTHER
        for member in cls:
            if member is not cls.OTHER and member.value == token:
                return member
        return cls.OTHER


@dataclass(frozen=True)
class Location:
    name: str
    country: str
    latitude: float
    longitude: float
    state: str | None = None

    @property
    def identity(self) -> tuple[str, str, str | None]:
        return (self.name, self.country, self.state)

    @property
    def display_name(self) -> str:
        if self.state:
            return f"{self.name}, {self.state}, {self.country}"
        return f"{self.name}, {self.country}"


@dataclass(frozen=True)
class CurrentConditions:
    location_name: str
    timestamp: datetime
    temperature: float
    humidity: float
    wind_speed_ms: float
    category: WeatherCategory
    description: str
    icon: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    feels_like: float | None = None
    pressure: float | None = None
    sunrise: datetime | None = None
    sunset: datetime | None = None
    utc_offset_seconds: int = 0

    @property
    def temperature_display(self) -> int:
        return round(self.temperature)

    @property
    def wind_speed_kmh(self) -> int:
        return round(self.wind_speed_ms * 3.6)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class ForecastSample:
    timestamp: datetime
    temperature: float
    humidity: float
    wind_speed_ms: float
    category: WeatherCategory
    description: str
    icon: str | None = None


@dataclass(frozen=True)
class ForecastSeries:
    """Raw 3-hour samples in upstream order plus the city's UTC offset."""

    samples: list[ForecastSample]
    utc_offset_seconds: int = 0


@dataclass(frozen=True)
class DailyForecastEntry:
    date: datetime
    temperature: int
    description: str
    humidity: float
    wind_speed_kmh: int
    icon: str | None


@dataclass(frozen=True)
class HourlyForecastEntry:
    time: datetime
    temperature: int
    description: str
    icon: str
    humidity: float
    wind_speed_kmh: int


@dataclass(frozen=True)
class AirQualitySnapshot:
    location_name: str
    latitude: float
    longitude: float
    aqi: int
    components: dict[str, float] = field(default_factory=dict)

    @property
    def pm2_5(self) -> float | None:
        return self.components.get("pm2_5")

    @property
    def pm10(self) -> float | None:
        return self.components.get("pm10")

    @property
    def no2(self) -> float | None:
        return self.components.get("no2")


@dataclass(frozen=True)
class AlertEntry:
    event: str
    description: str
    end: datetime | None = None
    start: datetime | None = None
    sender_name: str | None = None


@dataclass(frozen=True)
class TileCoordinate:
    zoom: int
    x: int
    y: int


@dataclass(frozen=True)
class ComposedResult:
    current: CurrentConditions
    daily: list[DailyForecastEntry] = field(default_factory=list)
    hourly: list[HourlyForecastEntry] = field(default_factory=list)
    air_quality: AirQualitySnapshot | None = None
    alerts: list[AlertEntry] = field(default_factory=list)
    map_tile: TileCoordinate | None = None
    is_fallback: bool = False


def from_unix(value: int | float) -> datetime:
    return datetime.fromtimestamp(float(value), tz=timezone.utc)
