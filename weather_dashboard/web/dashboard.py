"""Presentation state for the server-rendered dashboard.

A ``WeatherDashboard`` is built per request. It owns the visitor's search
history (loaded from and saved to an injected ``HistoryStorage``) and routes
searches either to the live aggregator or to the fallback provider, depending
on the health probe taken once at application startup.
"""

from __future__ import annotations

import random
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Protocol

from weather_dashboard.core.errors import SearchError
from weather_dashboard.models.history import DEFAULT_HISTORY_SIZE, SearchHistory
from weather_dashboard.models.weather import ComposedResult
from weather_dashboard.services.categories import background_effect
from weather_dashboard.services.fallback import FallbackProvider
from weather_dashboard.services.insights import (
    AqiDescription,
    ClothingItem,
    UvEstimate,
    clothing_suggestions,
    daylight_progress,
    describe_aqi,
    estimate_uv,
)
from weather_dashboard.services.tiles import MAP_LAYERS, tile_url
from weather_dashboard.services.weather import Clock, WeatherAggregator, utc_now

HISTORY_SESSION_KEY = "search_history"


class HistoryStorage(Protocol):
    def load(self) -> list[str]: ...

    def save(self, entries: list[str]) -> None: ...


class InMemoryHistoryStorage:
    def __init__(self, entries: list[str] | None = None) -> None:
        self._entries = list(entries or [])

    def load(self) -> list[str]:
        return list(self._entries)

    def save(self, entries: list[str]) -> None:
        self._entries = list(entries)


class SessionHistoryStorage:
    """Stores the history list in the signed session cookie."""

    def __init__(self, session: MutableMapping[str, Any], *, key: str = HISTORY_SESSION_KEY) -> None:
        self._session = session
        self._key = key

    def load(self) -> list[str]:
        raw = self._session.get(self._key)
        if not isinstance(raw, list):
            return []
        return [str(item) for item in raw if isinstance(item, str)]

    def save(self, entries: list[str]) -> None:
        self._session[self._key] = list(entries)


@dataclass(frozen=True)
class DashboardView:
    result: ComposedResult
    uv: UvEstimate
    clothing: list[ClothingItem]
    background_effect: str | None
    daylight_progress: float | None
    aqi: AqiDescription | None
    map_urls: dict[str, str] = field(default_factory=dict)

    @property
    def is_fallback(self) -> bool:
        return self.result.is_fallback


class WeatherDashboard:
    def __init__(
        self,
        *,
        aggregator: WeatherAggregator | None,
        fallback: FallbackProvider,
        storage: HistoryStorage,
        demo_mode: bool,
        rng: random.Random | None = None,
        clock: Clock = utc_now,
        max_history: int = DEFAULT_HISTORY_SIZE,
        tile_base_url: str | None = None,
        api_key: str | None = None,
    ) -> None:
        if aggregator is None and not demo_mode:
            raise ValueError("A live dashboard needs an aggregator")
        self._aggregator = aggregator
        self._fallback = fallback
        self._storage = storage
        self._demo_mode = demo_mode
        self._rng = rng or random.Random()
        self._clock = clock
        self._tile_base_url = tile_base_url
        self._api_key = api_key
        self.history = SearchHistory(storage.load(), max_entries=max_history)

    @property
    def demo_mode(self) -> bool:
        return self._demo_mode

    async def search(self, city: str) -> DashboardView | SearchError:
        if self._demo_mode or self._aggregator is None:
            result = self._fallback.composed_result()
            self._remember(result.current.location_name)
            return self.build_view(result)

        outcome = await self._aggregator.search(city)
        if isinstance(outcome, SearchError):
            return outcome
        self._remember(city)
        return self.build_view(outcome)

    def fallback_view(self) -> DashboardView:
        """Reference data view; does not count as a search."""
        return self.build_view(self._fallback.composed_result())

    def _remember(self, city: str) -> None:
        self.history.add(city)
        self._storage.save(self.history.entries())

    def build_view(self, result: ComposedResult) -> DashboardView:
        current = result.current
        now = self._clock()
        local_hour = (now + timedelta(seconds=current.utc_offset_seconds)).hour

        map_urls: dict[str, str] = {}
        if result.map_tile is not None and self._tile_base_url and self._api_key:
            map_urls = {
                layer: tile_url(self._tile_base_url, layer, result.map_tile, self._api_key)
                for layer in MAP_LAYERS
            }

        return DashboardView(
            result=result,
            uv=estimate_uv(current.category, local_hour, self._rng),
            clothing=clothing_suggestions(current.temperature, current.category),
            background_effect=background_effect(current.category),
            daylight_progress=daylight_progress(current, now),
            aqi=describe_aqi(result.air_quality.aqi) if result.air_quality else None,
            map_urls=map_urls,
        )
