"""
Tile Range Planner

Turns a search circle into the rectangle of tiles that must be fetched.
"""

import structlog

from ..models import GeoPoint, TileRange
from .projection import tile_bounds


logger = structlog.get_logger(component="TilePlanner")


def plan_tile_range(center: GeoPoint, radius_km: float, zoom: int) -> TileRange:
    """
    Plan the tiles covering a circle around ``center``.

    Radius and zoom are validated by the caller. Circles crossing the
    antimeridian or reaching a pole yield a truncated range, never a wrapped one.
    """
    tile_range = tile_bounds(center.lon, center.lat, radius_km, zoom)

    logger.info(
        "Planned tile range",
        zoom=zoom,
        x_range=[tile_range.min_x, tile_range.max_x],
        y_range=[tile_range.min_y, tile_range.max_y],
        tile_count=tile_range.count
    )

    return tile_range
