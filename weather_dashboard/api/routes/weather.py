from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from weather_dashboard.api.deps import (
    Aggregator,
    Gateway,
    OptionalGateway,
    get_settings,
    require_api_key,
)
from weather_dashboard.core.config import Settings
from weather_dashboard.core.errors import NotFound, SearchError, SearchFailure, UpstreamError
from weather_dashboard.schemas.weather import (
    AirQualityResponse,
    AlertRead,
    AlertsResponse,
    ComposedResultRead,
    Coordinates,
    ErrorResponse,
    LocationRead,
    Suggestion,
)

logger = logging.getLogger(__name__)

MIN_SUGGESTION_QUERY_LENGTH = 2
SUGGESTION_LIMIT = 5
GEOCODE_LIMIT = 5

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump(),
    )


@router.get(
    "/weather/{city}",
    dependencies=[Depends(require_api_key)],
    responses=_ERROR_RESPONSES,
)
async def current_weather(city: str, gateway: Gateway) -> Any:
    payload = await gateway.get_current_payload(city)
    if isinstance(payload, NotFound):
        return _error(
            status.HTTP_404_NOT_FOUND,
            "City not found",
            f"Could not find weather data for {city}",
        )
    if isinstance(payload, UpstreamError):
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            "Failed to fetch weather data",
        )
    return payload


@router.get(
    "/forecast/{city}",
    dependencies=[Depends(require_api_key)],
    responses=_ERROR_RESPONSES,
)
async def forecast(city: str, gateway: Gateway) -> Any:
    payload = await gateway.get_forecast_payload(city)
    if isinstance(payload, NotFound):
        return _error(
            status.HTTP_404_NOT_FOUND,
            "Forecast not found",
            f"Could not find forecast data for {city}",
        )
    if isinstance(payload, UpstreamError):
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            "Failed to fetch forecast data",
        )
    return payload


@router.get(
    "/air-quality/{city}",
    dependencies=[Depends(require_api_key)],
    response_model=AirQualityResponse,
    responses=_ERROR_RESPONSES,
)
async def air_quality(city: str, gateway: Gateway) -> Any:
    matches = await gateway.resolve_location(city, 1)
    if isinstance(matches, UpstreamError):
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            "Failed to fetch air quality data",
        )
    if not matches:
        return _error(
            status.HTTP_404_NOT_FOUND,
            "City not found",
            f"Could not find coordinates for {city}",
        )
    location = matches[0]

    payload = await gateway.get_air_quality_payload(location.latitude, location.longitude)
    if isinstance(payload, (NotFound, UpstreamError)):
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Air quality data not available",
            "Failed to fetch air quality data",
        )
    return AirQualityResponse(
        city=city,
        coordinates=Coordinates(lat=location.latitude, lon=location.longitude),
        air_quality=payload,
    )


@router.get(
    "/alerts/{city}",
    dependencies=[Depends(require_api_key)],
    response_model=AlertsResponse,
)
async def alerts(city: str, gateway: Gateway) -> AlertsResponse:
    # Never a hard error: any upstream trouble reads as "no alerts".
    matches = await gateway.resolve_location(city, 1)
    if isinstance(matches, UpstreamError) or not matches:
        return AlertsResponse(city=city, alerts=[])
    location = matches[0]

    found = await gateway.fetch_alerts(location.latitude, location.longitude)
    if isinstance(found, (NotFound, UpstreamError)):
        logger.info("Alerts for %r degraded: %s", city, found.message)
        return AlertsResponse(city=city, alerts=[])
    return AlertsResponse(city=city, alerts=[AlertRead.from_entry(a) for a in found])


@router.get(
    "/geocode/{city}",
    dependencies=[Depends(require_api_key)],
    response_model=list[LocationRead],
    responses={500: {"model": ErrorResponse}},
)
async def geocode(city: str, gateway: Gateway) -> Any:
    matches = await gateway.resolve_location(city, GEOCODE_LIMIT)
    if isinstance(matches, UpstreamError):
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Geocoding failed",
            "Failed to get city coordinates",
        )
    return [LocationRead.from_location(m) for m in matches]


@router.get("/suggestions/{query}", response_model=list[Suggestion])
async def suggestions(
    query: str,
    gateway: OptionalGateway,
    settings: Annotated[Settings, Depends(get_settings)],
) -> list[Suggestion]:
    if len(query.strip()) < MIN_SUGGESTION_QUERY_LENGTH:
        return []
    if gateway is None or not settings.has_api_key:
        return []
    matches = await gateway.resolve_location(query, SUGGESTION_LIMIT)
    if isinstance(matches, UpstreamError):
        return []

    seen: set[tuple[str, str, str | None]] = set()
    unique: list[Suggestion] = []
    for location in matches:
        if location.identity in seen:
            continue
        seen.add(location.identity)
        unique.append(Suggestion.from_location(location))
    return unique


@router.get(
    "/search/{city}",
    dependencies=[Depends(require_api_key)],
    response_model=ComposedResultRead,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def search(city: str, aggregator: Aggregator) -> Any:
    outcome = await aggregator.search(city)
    if isinstance(outcome, SearchError):
        if outcome.reason is SearchFailure.CITY_NOT_FOUND:
            return _error(status.HTTP_404_NOT_FOUND, "City not found", outcome.message)
        return _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Service temporarily unavailable",
            outcome.message,
        )
    return ComposedResultRead.from_result(outcome)
