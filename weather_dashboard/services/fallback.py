from __future__ import annotations

import random
from datetime import datetime, timedelta

from weather_dashboard.models.weather import (
    AirQualitySnapshot,
    ComposedResult,
    CurrentConditions,
    DailyForecastEntry,
    HourlyForecastEntry,
    WeatherCategory,
)
from weather_dashboard.services.tiles import tile_for
from weather_dashboard.services.weather import Clock, utc_now

REFERENCE_CITY = "London"
REFERENCE_COUNTRY = "GB"
REFERENCE_LAT = 51.5074
REFERENCE_LON = -0.1278

FALLBACK_AQI = 2

# Inclusive bounds of the generated hourly values.
HOURLY_TEMPERATURE_RANGE = (15, 24)
HOURLY_HUMIDITY_RANGE = (50, 79)
HOURLY_WIND_KMH_RANGE = (5, 19)

_HOURLY_CHOICES = (
    ("Sunny", "☀️"),
    ("Cloudy", "☁️"),
    ("Partly cloudy", "⛅"),
)

# (day offset, temperature, description, humidity, wind km/h, icon code)
_DAILY = (
    (1, 19, "Sunny", 60, 12, "01d"),
    (2, 17, "Cloudy", 70, 15, "03d"),
    (3, 20, "Rainy", 80, 18, "10d"),
    (4, 16, "Partly cloudy", 65, 10, "02d"),
    (5, 22, "Sunny", 55, 8, "01d"),
)


class FallbackProvider:
    """Synthetic composed result served when the live path is unusable.

    Pass a seeded ``random.Random`` to make the hourly values reproducible.
    """

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        clock: Clock = utc_now,
        map_zoom: int = 5,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock
        self._map_zoom = map_zoom

    def composed_result(self) -> ComposedResult:
        now = self._clock()
        current = CurrentConditions(
            location_name=REFERENCE_CITY,
            country=REFERENCE_COUNTRY,
            timestamp=now,
            temperature=18.0,
            feels_like=16.0,
            pressure=1013.0,
            humidity=65.0,
            wind_speed_ms=5.5,
            category=WeatherCategory.CLOUDS,
            description="Partly cloudy",
            icon="02d",
            latitude=REFERENCE_LAT,
            longitude=REFERENCE_LON,
            sunrise=now - timedelta(hours=6),
            sunset=now + timedelta(hours=6),
        )
        daily = [
            DailyForecastEntry(
                date=now + timedelta(days=offset),
                temperature=temp,
                description=description,
                humidity=float(humidity),
                wind_speed_kmh=wind,
                icon=icon,
            )
            for offset, temp, description, humidity, wind, icon in _DAILY
        ]
        return ComposedResult(
            current=current,
            daily=daily,
            hourly=self._hourly(now),
            air_quality=AirQualitySnapshot(
                location_name=REFERENCE_CITY,
                latitude=REFERENCE_LAT,
                longitude=REFERENCE_LON,
                aqi=FALLBACK_AQI,
                components={
                    "co": 200.0,
                    "no2": 15.0,
                    "o3": 45.0,
                    "so2": 2.0,
                    "pm2_5": 8.0,
                    "pm10": 12.0,
                },
            ),
            alerts=[],
            map_tile=tile_for(REFERENCE_LAT, REFERENCE_LON, self._map_zoom),
            is_fallback=True,
        )

    def _hourly(self, now: datetime) -> list[HourlyForecastEntry]:
        entries: list[HourlyForecastEntry] = []
        for hour in range(1, 25):
            description, icon = self._rng.choice(_HOURLY_CHOICES)
            entries.append(
                HourlyForecastEntry(
                    time=now + timedelta(hours=hour),
                    temperature=self._rng.randint(*HOURLY_TEMPERATURE_RANGE),
                    description=description,
                    icon=icon,
                    humidity=float(self._rng.randint(*HOURLY_HUMIDITY_RANGE)),
                    wind_speed_kmh=self._rng.randint(*HOURLY_WIND_KMH_RANGE),
                )
            )
        return entries
