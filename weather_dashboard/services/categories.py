from __future__ import annotations

from weather_dashboard.models.weather import WeatherCategory

UNKNOWN_GLYPH = "🌤️"

_FOG_GLYPH = "🌫️"

# Every WeatherCategory member must appear in each table below;
# tests/test_categories.py enforces it.
GLYPHS: dict[WeatherCategory, str] = {
    WeatherCategory.CLEAR: "☀️",
    WeatherCategory.CLOUDS: "☁️",
    WeatherCategory.RAIN: "🌧️",
    WeatherCategory.SNOW: "❄️",
    WeatherCategory.THUNDERSTORM: "⛈️",
    WeatherCategory.DRIZZLE: "🌦️",
    WeatherCategory.MIST: _FOG_GLYPH,
    WeatherCategory.FOG: _FOG_GLYPH,
    WeatherCategory.HAZE: _FOG_GLYPH,
    WeatherCategory.SMOKE: _FOG_GLYPH,
    WeatherCategory.DUST: _FOG_GLYPH,
    WeatherCategory.SAND: _FOG_GLYPH,
    WeatherCategory.ASH: _FOG_GLYPH,
    WeatherCategory.SQUALL: "💨",
    WeatherCategory.TORNADO: "🌪️",
    WeatherCategory.OTHER: UNKNOWN_GLYPH,
}

BACKGROUND_EFFECTS: dict[WeatherCategory, str | None] = {
    WeatherCategory.CLEAR: "sun-rays",
    WeatherCategory.CLOUDS: "clouds",
    WeatherCategory.RAIN: "rain",
    WeatherCategory.SNOW: "snow",
    WeatherCategory.THUNDERSTORM: None,
    WeatherCategory.DRIZZLE: None,
    WeatherCategory.MIST: None,
    WeatherCategory.FOG: None,
    WeatherCategory.HAZE: None,
    WeatherCategory.SMOKE: None,
    WeatherCategory.DUST: None,
    WeatherCategory.SAND: None,
    WeatherCategory.ASH: None,
    WeatherCategory.SQUALL: None,
    WeatherCategory.TORNADO: None,
    WeatherCategory.OTHER: None,
}

# (icon, text) pairs added on top of the temperature-based suggestions.
WEATHER_GEAR: dict[WeatherCategory, tuple[tuple[str, str], ...]] = {
    WeatherCategory.CLEAR: (),
    WeatherCategory.CLOUDS: (),
    WeatherCategory.RAIN: (("☔", "Umbrella"), ("👢", "Waterproof shoes")),
    WeatherCategory.SNOW: (("👢", "Boots"), ("🧤", "Gloves")),
    WeatherCategory.THUNDERSTORM: (),
    WeatherCategory.DRIZZLE: (),
    WeatherCategory.MIST: (),
    WeatherCategory.FOG: (),
    WeatherCategory.HAZE: (),
    WeatherCategory.SMOKE: (),
    WeatherCategory.DUST: (),
    WeatherCategory.SAND: (),
    WeatherCategory.ASH: (),
    WeatherCategory.SQUALL: (),
    WeatherCategory.TORNADO: (),
    WeatherCategory.OTHER: (),
}


def glyph_for(category: WeatherCategory | str | None) -> str:
    if not isinstance(category, WeatherCategory):
        category = WeatherCategory.from_token(category)
    return GLYPHS.get(category, UNKNOWN_GLYPH)


def background_effect(category: WeatherCategory) -> str | None:
    return BACKGROUND_EFFECTS[category]
