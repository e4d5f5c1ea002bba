from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class NotFound:
    """Upstream reported the requested resource (usually a city) does not exist."""

    message: str


@dataclass(frozen=True)
class UpstreamError:
    """Any other upstream failure: network, timeout, bad status or bad payload."""

    message: str
    status_code: int | None = None


Failure = NotFound | UpstreamError


class ConfigError(RuntimeError):
    """The upstream credential is not configured."""


class SearchFailure(str, Enum):
    CITY_NOT_FOUND = "city not found"
    UPSTREAM_UNAVAILABLE = "upstream unavailable"


@dataclass(frozen=True)
class SearchError:
    reason: SearchFailure
    message: str

    @classmethod
    def from_failure(cls, city: str, failure: Failure) -> SearchError:
        if isinstance(failure, NotFound):
            return cls(
                reason=SearchFailure.CITY_NOT_FOUND,
                message=f"Could not find weather data for {city}",
            )
        return cls(
            reason=SearchFailure.UPSTREAM_UNAVAILABLE,
            message="Weather service is temporarily unavailable. Please try again.",
        )
