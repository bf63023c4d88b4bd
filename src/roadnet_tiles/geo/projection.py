"""
Projection Math

Coordinate transforms between geographic coordinates, Web Mercator tile
indices, tile-local pixel coordinates and Earth-centred Cartesian space.
All functions are pure.
"""

import math
from typing import Tuple

from ..models import GeoPoint, TileRange


# Mean Earth radius used for the angular radius of the search circle
EARTH_RADIUS_KM = 6371.0088

# Sphere radius for chord distance tests
EARTH_RADIUS_M = 6371000.0

# Web Mercator latitude limit; tile rows beyond it do not exist
MAX_LATITUDE = 85.0511287798066


def clamp_tile(value: int, zoom: int) -> int:
    """Clamp a tile index into [0, 2^zoom - 1]."""
    max_index = 2 ** zoom - 1
    return max(0, min(max_index, value))


def lon_lat_to_tile(lon: float, lat: float, zoom: int) -> Tuple[int, int]:
    """Convert longitude/latitude to tile coordinates inside the zoom level grid."""
    n = 2 ** zoom
    lat_rad = math.radians(max(-MAX_LATITUDE, min(MAX_LATITUDE, lat)))

    x = math.floor((lon + 180.0) / 360.0 * n)
    y = math.floor(
        (1.0 - math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad)) / math.pi) / 2.0 * n
    )

    # Rounding at the latitude limit can still land one row outside the grid
    return (clamp_tile(x, zoom), clamp_tile(y, zoom))


def tile_bounds(lon: float, lat: float, radius_km: float, zoom: int) -> TileRange:
    """
    Compute the tile rectangle covering a circle on the sphere.

    Args:
        lon: Circle center longitude in degrees
        lat: Circle center latitude in degrees
        radius_km: Circle radius in kilometres
        zoom: Tile zoom level

    Returns:
        TileRange with every index clamped to the valid grid
    """
    rad_dist = radius_km / EARTH_RADIUS_KM
    lat_rad = math.radians(lat)

    min_lat = lat - math.degrees(rad_dist)
    max_lat = lat + math.degrees(rad_dist)

    # Half-width in longitude of a spherical cap. A cap spanning a hemisphere
    # or containing a pole covers every meridian.
    delta_lon = math.pi
    if rad_dist < math.pi / 2:
        ratio = math.sin(rad_dist) / math.cos(lat_rad)
        if ratio < 1.0:
            delta_lon = math.asin(ratio)
    min_lon = lon - math.degrees(delta_lon)
    max_lon = lon + math.degrees(delta_lon)

    # Tile y grows southward: NW corner gives the minimum indices
    min_tile_x, min_tile_y = lon_lat_to_tile(min_lon, max_lat, zoom)
    max_tile_x, max_tile_y = lon_lat_to_tile(max_lon, min_lat, zoom)

    return TileRange(
        zoom=zoom,
        min_x=min_tile_x,
        max_x=max_tile_x,
        min_y=min_tile_y,
        max_y=max_tile_y,
    )


def tile_point_to_lon_lat(
    tile_x: int,
    tile_y: int,
    zoom: int,
    extent: int,
    px: float,
    py: float
) -> GeoPoint:
    """Convert a tile-local pixel (y down, in [0, extent]) to longitude/latitude."""
    world_size = 2 ** zoom

    lon = ((tile_x + px / extent) / world_size) * 360.0 - 180.0

    y = tile_y + py / extent
    lat_rad = math.atan(math.sinh(math.pi * (1.0 - 2.0 * y / world_size)))

    return GeoPoint(lon=lon, lat=math.degrees(lat_rad))


def to_cartesian(lon: float, lat: float) -> Tuple[float, float, float]:
    """Project longitude/latitude onto a sphere of radius EARTH_RADIUS_M."""
    rad_lon = math.radians(lon)
    rad_lat = math.radians(lat)
    cos_lat = math.cos(rad_lat)

    return (
        EARTH_RADIUS_M * cos_lat * math.cos(rad_lon),
        EARTH_RADIUS_M * cos_lat * math.sin(rad_lon),
        EARTH_RADIUS_M * math.sin(rad_lat),
    )


def chord_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Straight-line distance in metres between two points on the sphere."""
    ax, ay, az = to_cartesian(a.lon, a.lat)
    bx, by, bz = to_cartesian(b.lon, b.lat)
    return math.sqrt((ax - bx) ** 2 + (ay - by) ** 2 + (az - bz) ** 2)
