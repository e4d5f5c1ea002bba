from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from weather_dashboard.core.errors import NotFound, SearchError, SearchFailure, UpstreamError
from weather_dashboard.services.tiles import tile_for
from weather_dashboard.services.weather import WeatherAggregator, WeatherCache
from tests.fakes import FakeOpenWeatherClient, current_payload

NOW = datetime(2024, 6, 1, 10, 30, tzinfo=timezone.utc)


def make_aggregator(fake: FakeOpenWeatherClient, **kwargs) -> WeatherAggregator:
    return WeatherAggregator(gateway=fake, clock=lambda: NOW, **kwargs)


def test_search_composes_all_facets() -> None:
    fake = FakeOpenWeatherClient(now=NOW)
    fake.alerts = [{"event": "Wind warning", "description": "Gusts", "start": 1717236000, "end": 1717250400}]

    result = asyncio.run(make_aggregator(fake).search("London"))

    assert not isinstance(result, SearchError)
    assert result.current.location_name == "London"
    assert len(result.daily) == 5
    assert 0 < len(result.hourly) <= 24
    assert all(NOW < e.time <= NOW + timedelta(hours=24) for e in result.hourly)
    assert result.air_quality is not None and result.air_quality.aqi == 2
    assert [a.event for a in result.alerts] == ["Wind warning"]
    assert result.map_tile == tile_for(51.5074, -0.1278, 5)
    assert not result.is_fallback
    assert "geocode" not in fake.calls


def test_unknown_city_stops_after_current() -> None:
    fake = FakeOpenWeatherClient(now=NOW)

    result = asyncio.run(make_aggregator(fake).search("Qwxyzzy"))

    assert isinstance(result, SearchError)
    assert result.reason is SearchFailure.CITY_NOT_FOUND
    assert fake.calls == ["current"]


def test_current_upstream_failure_is_unavailable() -> None:
    fake = FakeOpenWeatherClient(now=NOW)
    fake.current_failure = UpstreamError("boom", status_code=502)

    result = asyncio.run(make_aggregator(fake).search("London"))

    assert isinstance(result, SearchError)
    assert result.reason is SearchFailure.UPSTREAM_UNAVAILABLE


def test_forecast_failure_degrades_to_empty_views() -> None:
    fake = FakeOpenWeatherClient(now=NOW)
    fake.forecast_failure = UpstreamError("boom")

    result = asyncio.run(make_aggregator(fake).search("London"))

    assert not isinstance(result, SearchError)
    assert result.daily == []
    assert result.hourly == []
    assert result.air_quality is not None


def test_air_quality_and_alert_failures_degrade() -> None:
    fake = FakeOpenWeatherClient(now=NOW)
    fake.air_quality_failure = UpstreamError("nope", status_code=401)
    fake.alerts_failure = UpstreamError("nope", status_code=401)

    result = asyncio.run(make_aggregator(fake).search("London"))

    assert not isinstance(result, SearchError)
    assert result.air_quality is None
    assert result.alerts == []
    assert result.current.temperature == 18.4


def test_missing_coordinates_are_resolved_by_geocoding() -> None:
    fake = FakeOpenWeatherClient(now=NOW)
    fake.current["london"] = current_payload("London", now=NOW, lat=None, lon=None)

    result = asyncio.run(make_aggregator(fake).search("London"))

    assert not isinstance(result, SearchError)
    assert "geocode" in fake.calls
    assert result.air_quality is not None
    assert result.map_tile == tile_for(51.5074, -0.1278, 5)


def test_unresolvable_location_skips_coordinate_facets() -> None:
    fake = FakeOpenWeatherClient(now=NOW)
    fake.current["london"] = current_payload("London", now=NOW, lat=None, lon=None)
    fake.locations = {}

    result = asyncio.run(make_aggregator(fake).search("London"))

    assert not isinstance(result, SearchError)
    assert result.air_quality is None
    assert result.alerts == []
    assert result.map_tile is None
    assert "air_quality" not in fake.calls
    assert len(result.daily) == 5


def test_facets_are_fetched_concurrently() -> None:
    fake = FakeOpenWeatherClient(now=NOW)
    fake.forecast_waits_for_alerts = True

    async def run():
        return await asyncio.wait_for(make_aggregator(fake).search("London"), timeout=2)

    result = asyncio.run(run())

    assert not isinstance(result, SearchError)
    assert len(result.daily) == 5


def test_cache_serves_repeat_searches_until_expiry() -> None:
    clock_now = [NOW]
    cache = WeatherCache(ttl_seconds=60, clock=lambda: clock_now[0])
    fake = FakeOpenWeatherClient(now=NOW)
    aggregator = make_aggregator(fake, cache=cache)

    first = asyncio.run(aggregator.search("London"))
    second = asyncio.run(aggregator.search(" london "))
    assert second.current is first.current
    assert second.daily == first.daily
    assert fake.calls.count("current") == 1

    clock_now[0] = NOW + timedelta(seconds=61)
    asyncio.run(aggregator.search("London"))
    assert fake.calls.count("current") == 2


def test_disabled_cache_stores_nothing() -> None:
    cache = WeatherCache(ttl_seconds=0)
    fake = FakeOpenWeatherClient(now=NOW)
    asyncio.run(make_aggregator(fake, cache=cache).search("London"))
    assert not cache.enabled
    assert cache.get("London") is None


def test_search_error_from_failure() -> None:
    assert SearchError.from_failure("X", NotFound("gone")).reason is SearchFailure.CITY_NOT_FOUND
    assert (
        SearchError.from_failure("X", UpstreamError("down")).reason
        is SearchFailure.UPSTREAM_UNAVAILABLE
    )


def test_cache_clear() -> None:
    cache = WeatherCache(ttl_seconds=60)
    fake = FakeOpenWeatherClient(now=NOW)
    asyncio.run(make_aggregator(fake, cache=cache).search("London"))
    assert cache.get("LONDON") is not None
    cache.clear()
    assert cache.get("London") is None


def test_cache_hit_rebuilds_hourly_against_current_clock() -> None:
    filled_at = datetime(2024, 6, 1, 11, 57, tzinfo=timezone.utc)
    clock_now = [filled_at]
    cache = WeatherCache(ttl_seconds=300, clock=lambda: clock_now[0])
    fake = FakeOpenWeatherClient(now=filled_at)
    aggregator = WeatherAggregator(gateway=fake, cache=cache, clock=lambda: clock_now[0])

    first = asyncio.run(aggregator.search("London"))
    assert first.hourly[0].time == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)

    # Still inside the TTL, but past the first three-hour sample.
    later = datetime(2024, 6, 1, 12, 1, 59, tzinfo=timezone.utc)
    clock_now[0] = later
    second = asyncio.run(aggregator.search("London"))

    assert fake.calls.count("current") == 1
    assert second.hourly
    assert all(later < e.time <= later + timedelta(hours=24) for e in second.hourly)
    assert second.hourly[0].time == datetime(2024, 6, 1, 15, tzinfo=timezone.utc)


def test_daily_dates_follow_city_offset() -> None:
    fake = FakeOpenWeatherClient(now=NOW)
    fake.utc_offset = 10 * 3600

    result = asyncio.run(make_aggregator(fake).search("London"))

    days = [d.date.date() for d in result.daily]
    assert len(days) == 5
    assert len(set(days)) == 5
