from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone

from weather_dashboard.core.config import Settings


@dataclass(frozen=True)
class HealthStatus:
    status: str
    timestamp: datetime
    uptime: float
    has_api_key: bool

    @property
    def live_path_usable(self) -> bool:
        return self.status == "OK" and self.has_api_key


def probe_health(settings: Settings, *, started_at: float) -> HealthStatus:
    return HealthStatus(
        status="OK",
        timestamp=datetime.now(tz=timezone.utc),
        uptime=max(time.monotonic() - started_at, 0.0),
        has_api_key=settings.has_api_key,
    )
