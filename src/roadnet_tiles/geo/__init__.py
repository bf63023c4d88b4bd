"""
Geographic Math

Web Mercator tile arithmetic and spherical helpers used to plan which tiles
to fetch and to reproject tile geometry.
"""

from .projection import (
    EARTH_RADIUS_KM,
    EARTH_RADIUS_M,
    chord_distance_m,
    clamp_tile,
    lon_lat_to_tile,
    tile_bounds,
    tile_point_to_lon_lat,
    to_cartesian,
)
from .tile_planner import plan_tile_range

__all__ = [
    "EARTH_RADIUS_KM",
    "EARTH_RADIUS_M",
    "chord_distance_m",
    "clamp_tile",
    "lon_lat_to_tile",
    "tile_bounds",
    "tile_point_to_lon_lat",
    "to_cartesian",
    "plan_tile_range",
]
