from __future__ import annotations

import pytest

from weather_dashboard.models.weather import WeatherCategory
from weather_dashboard.services.categories import (
    BACKGROUND_EFFECTS,
    GLYPHS,
    UNKNOWN_GLYPH,
    WEATHER_GEAR,
    background_effect,
    glyph_for,
)


@pytest.mark.parametrize("table", [GLYPHS, BACKGROUND_EFFECTS, WEATHER_GEAR])
def test_tables_cover_every_category(table: dict) -> None:
    assert set(table) == set(WeatherCategory)


def test_from_token_is_exact_and_case_sensitive() -> None:
    assert WeatherCategory.from_token("Rain") is WeatherCategory.RAIN
    assert WeatherCategory.from_token("rain") is WeatherCategory.OTHER
    assert WeatherCategory.from_token(None) is WeatherCategory.OTHER
    assert WeatherCategory.from_token("Aurora") is WeatherCategory.OTHER


def test_glyphs() -> None:
    assert glyph_for(WeatherCategory.CLEAR) == "☀️"
    assert glyph_for("Haze") == glyph_for(WeatherCategory.FOG)
    assert glyph_for("Volcano") == UNKNOWN_GLYPH
    assert glyph_for(None) == UNKNOWN_GLYPH


def test_background_effects() -> None:
    assert background_effect(WeatherCategory.CLEAR) == "sun-rays"
    assert background_effect(WeatherCategory.SNOW) == "snow"
    assert background_effect(WeatherCategory.TORNADO) is None
