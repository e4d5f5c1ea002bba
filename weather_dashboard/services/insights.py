from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime

from weather_dashboard.models.weather import CurrentConditions, WeatherCategory
from weather_dashboard.services.categories import WEATHER_GEAR


@dataclass(frozen=True)
class AqiDescription:
    label: str
    color: str


AQI_SCALE: dict[int, AqiDescription] = {
    1: AqiDescription("Good", "#4CAF50"),
    2: AqiDescription("Fair", "#FF9800"),
    3: AqiDescription("Moderate", "#FF5722"),
    4: AqiDescription("Poor", "#9C27B0"),
    5: AqiDescription("Very Poor", "#7B1FA2"),
}
AQI_UNKNOWN = AqiDescription("Unknown", "#9E9E9E")


def describe_aqi(aqi: int | None) -> AqiDescription:
    if aqi is None:
        return AQI_UNKNOWN
    return AQI_SCALE.get(aqi, AQI_UNKNOWN)


@dataclass(frozen=True)
class UvEstimate:
    value: int
    level: str
    css_class: str

    @property
    def percent(self) -> float:
        return self.value / 11 * 100


def estimate_uv(category: WeatherCategory, local_hour: int, rng: random.Random) -> UvEstimate:
    """Rough UV index guess; the upstream free tier has no UV data."""
    if 10 <= local_hour <= 16:
        if category is WeatherCategory.CLEAR:
            value = rng.randint(3, 10)
        elif category is WeatherCategory.CLOUDS:
            value = rng.randint(2, 6)
        else:
            value = rng.randint(1, 3)
    else:
        value = rng.randint(0, 1)

    if value >= 8:
        return UvEstimate(value, "Very High", "uv-very-high")
    if value >= 6:
        return UvEstimate(value, "High", "uv-high")
    if value >= 3:
        return UvEstimate(value, "Moderate", "uv-moderate")
    return UvEstimate(value, "Low", "uv-low")


@dataclass(frozen=True)
class ClothingItem:
    icon: str
    text: str


def clothing_suggestions(temperature: float, category: WeatherCategory) -> list[ClothingItem]:
    if temperature < 5:
        items = [("🧥", "Heavy coat"), ("🧤", "Gloves"), ("🧣", "Scarf")]
    elif temperature < 15:
        items = [("🧥", "Light jacket"), ("👖", "Long pants")]
    elif temperature < 25:
        items = [("👕", "T-shirt"), ("👖", "Comfortable pants")]
    else:
        items = [("👕", "Light clothing"), ("🩳", "Shorts")]
    items.extend(WEATHER_GEAR[category])
    return [ClothingItem(icon, text) for icon, text in items]


def daylight_progress(current: CurrentConditions, now: datetime) -> float | None:
    """Percent of today's daylight already elapsed, clamped to 0..100."""
    if current.sunrise is None or current.sunset is None:
        return None
    total = (current.sunset - current.sunrise).total_seconds()
    if total <= 0:
        return None
    elapsed = (now - current.sunrise).total_seconds()
    return max(0.0, min(100.0, elapsed / total * 100))
