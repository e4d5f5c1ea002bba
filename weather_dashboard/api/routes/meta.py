from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from weather_dashboard.api.deps import get_settings
from weather_dashboard.core.config import Settings
from weather_dashboard.schemas.weather import ConfigResponse, ErrorResponse, HealthResponse
from weather_dashboard.services.health import probe_health

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(
    request: Request, settings: Annotated[Settings, Depends(get_settings)]
) -> HealthResponse:
    status_ = probe_health(settings, started_at=request.app.state.started_at)
    return HealthResponse(
        status=status_.status,
        timestamp=status_.timestamp,
        uptime=status_.uptime,
        has_api_key=status_.has_api_key,
    )


@router.get(
    "/config",
    response_model=ConfigResponse,
    responses={500: {"model": ErrorResponse}},
)
def client_config(settings: Annotated[Settings, Depends(get_settings)]) -> Any:
    # The key is handed to the browser for map tile requests only.
    if not settings.openweather_api_key:
        logger.error("API key requested but not configured")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="API key not found",
                message="OpenWeatherMap API key is not set on the server",
            ).model_dump(),
        )
    return ConfigResponse(api_key=settings.openweather_api_key)
