from __future__ import annotations

import math

from weather_dashboard.models.weather import TileCoordinate

TEMPERATURE_LAYER = "temp_new"
PRECIPITATION_LAYER = "precipitation_new"
MAP_LAYERS = (TEMPERATURE_LAYER, PRECIPITATION_LAYER)


def tile_coords(lat: float, lon: float, zoom: int) -> tuple[int, int]:
    """Web-Mercator slippy-map tile containing (lat, lon) at ``zoom``.

    ``lat`` must lie strictly inside (-90, 90): tan/sec are singular at the
    poles. Callers clamp to the Mercator limit (about 85.0511) if needed.
    """
    n = 2**zoom
    lat_rad = math.radians(lat)
    x = math.floor((lon + 180.0) / 360.0 * n)
    y = math.floor(
        (1.0 - math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad)) / math.pi) / 2.0 * n
    )
    return x, y


def tile_for(lat: float, lon: float, zoom: int) -> TileCoordinate:
    x, y = tile_coords(lat, lon, zoom)
    return TileCoordinate(zoom=zoom, x=x, y=y)


def tile_url(base_url: str, layer: str, tile: TileCoordinate, api_key: str) -> str:
    return f"{base_url.rstrip('/')}/{layer}/{tile.zoom}/{tile.x}/{tile.y}.png?appid={api_key}"
