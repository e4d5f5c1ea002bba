from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.sessions import SessionMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from weather_dashboard.api.router import api_router
from weather_dashboard.clients.openweather import OpenWeatherClient
from weather_dashboard.core.config import Settings, load_settings
from weather_dashboard.core.errors import ConfigError
from weather_dashboard.core.logging import setup_logging
from weather_dashboard.schemas.weather import ErrorResponse
from weather_dashboard.services.health import probe_health
from weather_dashboard.services.weather import WeatherCache
from weather_dashboard.web.router import ui_router

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    if not settings.has_api_key:
        logger.warning(
            "OPENWEATHER_API_KEY is not set; weather endpoints will answer 500 "
            "and the dashboard will show sample data"
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings
        app.state.started_at = time.monotonic()
        app.state.weather_cache = WeatherCache(ttl_seconds=settings.cache_ttl_seconds)
        app.state.openweather_client = None
        if settings.openweather_api_key:
            app.state.openweather_client = OpenWeatherClient(
                api_key=settings.openweather_api_key,
                user_agent=settings.weather_user_agent,
                timeout_seconds=settings.weather_timeout_seconds,
                base_url=settings.openweather_base_url,
                geo_url=settings.openweather_geo_url,
                onecall_url=settings.openweather_onecall_url,
            )

        # One health probe per process decides live vs. sample data for the UI.
        health = probe_health(settings, started_at=app.state.started_at)
        app.state.demo_mode = not health.live_path_usable
        if app.state.demo_mode:
            logger.warning("Live weather path unavailable; dashboard runs in demo mode")
        else:
            logger.info("OpenWeatherMap API key loaded; dashboard uses live data")

        yield
        if app.state.openweather_client is not None:
            await app.state.openweather_client.aclose()

    docs_enabled = settings.docs_enabled and not settings.is_production
    app = FastAPI(
        title="Weather Dashboard API",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.weather_cache = WeatherCache(ttl_seconds=settings.cache_ttl_seconds)
    app.state.demo_mode = not settings.has_api_key

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.is_production,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    if settings.trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    @app.exception_handler(ConfigError)
    async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error="API key not configured", message=str(exc)).model_dump(),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="Internal server error",
                message="Something went wrong on the server",
            ).model_dump(),
        )

    @app.get("/", include_in_schema=False)
    def root():
        return RedirectResponse("/ui/", status_code=303)

    app.include_router(api_router)
    app.include_router(ui_router)
    return app
