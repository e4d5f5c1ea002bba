from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from weather_dashboard.core.errors import SearchError, SearchFailure
from weather_dashboard.web.dashboard import WeatherDashboard
from weather_dashboard.web.deps import get_dashboard
from weather_dashboard.web.templating import templates

router = APIRouter()


@router.get("/", include_in_schema=False)
async def dashboard_page(
    request: Request,
    dashboard: Annotated[WeatherDashboard, Depends(get_dashboard)],
    city: Annotated[str | None, Query(max_length=100)] = None,
):
    view = None
    error: str | None = None
    status_code = 200

    query = (city or "").strip()
    if query:
        outcome = await dashboard.search(query)
        if isinstance(outcome, SearchError):
            error = outcome.message
            status_code = 404 if outcome.reason is SearchFailure.CITY_NOT_FOUND else 503
        else:
            view = outcome
    elif dashboard.demo_mode:
        # Without a live upstream the page opens on the reference data.
        view = dashboard.fallback_view()

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "request": request,
            "title": "Weather Dashboard",
            "city": query,
            "view": view,
            "error": error,
            "history": dashboard.history.entries(),
            "demo_mode": dashboard.demo_mode,
        },
        status_code=status_code,
    )
