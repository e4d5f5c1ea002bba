from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from weather_dashboard.api import deps
from weather_dashboard.core.config import Settings
from weather_dashboard.factory import create_app
from tests.fakes import FakeOpenWeatherClient


def make_settings(**overrides) -> Settings:
    values = dict(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        log_level="WARNING",
        secret_key="test_secret_key_must_be_32_chars_minimum",
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        openweather_api_key="test-key",
        weather_user_agent="test-agent",
        weather_timeout_seconds=1.0,
        cache_ttl_seconds=0,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def now() -> datetime:
    return datetime.now(tz=timezone.utc).replace(microsecond=0)


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def fake_weather(now: datetime) -> FakeOpenWeatherClient:
    return FakeOpenWeatherClient(now=now)


@pytest.fixture()
def client(settings: Settings, fake_weather: FakeOpenWeatherClient) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[deps.get_openweather_client] = lambda: fake_weather
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def unconfigured_client() -> TestClient:
    app = create_app(make_settings(openweather_api_key=None))
    with TestClient(app) as client:
        yield client
