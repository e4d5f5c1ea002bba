"""Reduce the upstream 3-hour forecast series into daily and hourly views.

Both reducers assume samples arrive in ascending time order, which is the
upstream's native order, and never re-sort them. Daily entries carry the
first sample's time converted to the city's local offset.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone, tzinfo

from weather_dashboard.models.weather import (
    DailyForecastEntry,
    ForecastSample,
    HourlyForecastEntry,
)
from weather_dashboard.services.categories import glyph_for

DEFAULT_MAX_DAYS = 5
DEFAULT_HORIZON_HOURS = 24
DEFAULT_MAX_HOURLY_ENTRIES = 24


def _kmh(speed_ms: float) -> int:
    return round(speed_ms * 3.6)


def _local(ts: datetime, tz: tzinfo | None) -> datetime:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(tz or timezone.utc)


def to_daily_view(
    samples: Iterable[ForecastSample],
    max_days: int = DEFAULT_MAX_DAYS,
    *,
    tz: tzinfo | None = None,
) -> list[DailyForecastEntry]:
    # First sample of each calendar day wins; no midday preference.
    seen: set[date] = set()
    entries: list[DailyForecastEntry] = []
    if max_days <= 0:
        return entries
    for sample in samples:
        local = _local(sample.timestamp, tz)
        key = local.date()
        if key in seen:
            continue
        seen.add(key)
        entries.append(
            DailyForecastEntry(
                date=local,
                temperature=round(sample.temperature),
                description=sample.description,
                humidity=sample.humidity,
                wind_speed_kmh=_kmh(sample.wind_speed_ms),
                icon=sample.icon,
            )
        )
        if len(entries) >= max_days:
            break
    return entries


def to_hourly_view(
    samples: Iterable[ForecastSample],
    now: datetime,
    horizon_hours: int = DEFAULT_HORIZON_HOURS,
    max_entries: int = DEFAULT_MAX_HOURLY_ENTRIES,
) -> list[HourlyForecastEntry]:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    horizon = now + timedelta(hours=horizon_hours)

    entries: list[HourlyForecastEntry] = []
    for sample in samples:
        if len(entries) >= max_entries:
            break
        if not (now < sample.timestamp <= horizon):
            continue
        entries.append(
            HourlyForecastEntry(
                time=sample.timestamp,
                temperature=round(sample.temperature),
                description=sample.description,
                icon=glyph_for(sample.category),
                humidity=sample.humidity,
                wind_speed_kmh=_kmh(sample.wind_speed_ms),
            )
        )
    return entries
