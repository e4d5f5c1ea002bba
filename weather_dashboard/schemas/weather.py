from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from weather_dashboard.models.weather import (
    AirQualitySnapshot,
    AlertEntry,
    ComposedResult,
    CurrentConditions,
    Location,
)
from weather_dashboard.services.categories import glyph_for
from weather_dashboard.services.insights import describe_aqi


class ErrorResponse(BaseModel):
    error: str
    message: str


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "OK"
    timestamp: datetime
    uptime: float = Field(ge=0)
    has_api_key: bool = Field(serialization_alias="hasApiKey")


class ConfigResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(serialization_alias="apiKey")


class Coordinates(BaseModel):
    lat: float
    lon: float


class AirQualityResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    city: str
    coordinates: Coordinates
    air_quality: dict[str, Any] = Field(serialization_alias="airQuality")


class AlertRead(BaseModel):
    event: str
    description: str
    start: datetime | None = None
    end: datetime | None = None
    sender_name: str | None = None

    @classmethod
    def from_entry(cls, alert: AlertEntry) -> AlertRead:
        return cls(
            event=alert.event,
            description=alert.description,
            start=alert.start,
            end=alert.end,
            sender_name=alert.sender_name,
        )


class AlertsResponse(BaseModel):
    city: str
    alerts: list[AlertRead] = Field(default_factory=list)


class LocationRead(BaseModel):
    name: str
    country: str
    state: str | None = None
    lat: float
    lon: float

    @classmethod
    def from_location(cls, location: Location) -> LocationRead:
        return cls(
            name=location.name,
            country=location.country,
            state=location.state,
            lat=location.latitude,
            lon=location.longitude,
        )


class Suggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    country: str
    state: str | None = None
    display_name: str = Field(serialization_alias="displayName")

    @classmethod
    def from_location(cls, location: Location) -> Suggestion:
        return cls(
            name=location.name,
            country=location.country,
            state=location.state,
            display_name=location.display_name,
        )


class CurrentRead(BaseModel):
    city: str
    country: str | None = None
    lat: float | None = None
    lon: float | None = None
    timestamp: datetime
    temperature: int
    temperature_precise: float
    feels_like: float | None = None
    humidity: float
    wind_speed_kmh: int
    category: str
    description: str
    icon: str
    sunrise: datetime | None = None
    sunset: datetime | None = None

    @classmethod
    def from_current(cls, current: CurrentConditions) -> CurrentRead:
        return cls(
            city=current.location_name,
            country=current.country,
            lat=current.latitude,
            lon=current.longitude,
            timestamp=current.timestamp,
            temperature=current.temperature_display,
            temperature_precise=current.temperature,
            feels_like=current.feels_like,
            humidity=current.humidity,
            wind_speed_kmh=current.wind_speed_kmh,
            category=current.category.value,
            description=current.description,
            icon=glyph_for(current.category),
            sunrise=current.sunrise,
            sunset=current.sunset,
        )


class DailyRead(BaseModel):
    date: datetime
    temperature: int
    description: str
    humidity: float
    wind_speed_kmh: int
    icon: str | None = None


class HourlyRead(BaseModel):
    time: datetime
    temperature: int
    description: str
    icon: str
    humidity: float
    wind_speed_kmh: int


class AirQualityRead(BaseModel):
    aqi: int = Field(ge=1, le=5)
    label: str
    color: str
    components: dict[str, float] = Field(default_factory=dict)

    @classmethod
    def from_snapshot(cls, snapshot: AirQualitySnapshot) -> AirQualityRead:
        description = describe_aqi(snapshot.aqi)
        return cls(
            aqi=snapshot.aqi,
            label=description.label,
            color=description.color,
            components=dict(snapshot.components),
        )


class TileRead(BaseModel):
    zoom: int
    x: int
    y: int


class ComposedResultRead(BaseModel):
    current: CurrentRead
    daily: list[DailyRead] = Field(default_factory=list, max_length=5)
    hourly: list[HourlyRead] = Field(default_factory=list, max_length=24)
    air_quality: AirQualityRead | None = None
    alerts: list[AlertRead] = Field(default_factory=list)
    map_tile: TileRead | None = None

    @classmethod
    def from_result(cls, result: ComposedResult) -> ComposedResultRead:
        return cls(
            current=CurrentRead.from_current(result.current),
            daily=[DailyRead.model_validate(asdict(d)) for d in result.daily],
            hourly=[HourlyRead.model_validate(asdict(h)) for h in result.hourly],
            air_quality=(
                AirQualityRead.from_snapshot(result.air_quality)
                if result.air_quality is not None
                else None
            ),
            alerts=[AlertRead.from_entry(a) for a in result.alerts],
            map_tile=(
                TileRead.model_validate(asdict(result.map_tile))
                if result.map_tile is not None
                else None
            ),
        )
