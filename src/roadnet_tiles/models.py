"""
Road Network Data Model

Value types shared by the planner, the tile processing stages and the
exporter. Everything here lives for a single extraction run.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from shapely.geometry import LineString, mapping


# Decimal digits kept in output coordinates (~11 cm)
COORDINATE_PRECISION = 6

LonLat = Tuple[float, float]
PixelLine = Sequence[Tuple[float, float]]


@dataclass(frozen=True)
class GeoPoint:
    """A longitude/latitude pair in degrees."""
    lon: float
    lat: float

    def as_tuple(self) -> LonLat:
        return (self.lon, self.lat)


@dataclass(frozen=True)
class TileCoord:
    """Identifier of a single tile."""
    zoom: int
    x: int
    y: int

    @property
    def tile_id(self) -> str:
        """Get unique tile identifier."""
        return f"{self.zoom}/{self.x}/{self.y}"


@dataclass(frozen=True)
class TileRange:
    """Inclusive rectangle of tile indices at one zoom level."""
    zoom: int
    min_x: int
    max_x: int
    min_y: int
    max_y: int

    @property
    def count(self) -> int:
        return (self.max_x - self.min_x + 1) * (self.max_y - self.min_y + 1)

    def __iter__(self) -> Iterator[TileCoord]:
        # Scan order: outer loop over x, inner loop over y
        for x in range(self.min_x, self.max_x + 1):
            for y in range(self.min_y, self.max_y + 1):
                yield TileCoord(zoom=self.zoom, x=x, y=y)

    def __len__(self) -> int:
        return self.count

    def __contains__(self, item: Union[TileCoord, Tuple[int, int]]) -> bool:
        if isinstance(item, TileCoord):
            if item.zoom != self.zoom:
                return False
            x, y = item.x, item.y
        else:
            x, y = item
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y


@dataclass
class RawFeature:
    """
    A feature as decoded from a vector tile.

    Attributes:
        geom_type: Normalized geometry kind ("point", "line", "polygon", "unknown")
        properties: Feature attributes (class, brunnel, name, ...)
        lines: Polylines in tile-local pixel coordinates, y growing downward
    """
    geom_type: str
    properties: Dict[str, Any] = field(default_factory=dict)
    lines: List[PixelLine] = field(default_factory=list)


@dataclass
class TransportationLayer:
    """Decoded vector tile layer together with its coordinate resolution."""
    name: str
    extent: int
    features: List[RawFeature] = field(default_factory=list)


@dataclass(frozen=True)
class NetworkFeature:
    """An accepted road polyline in lon/lat."""
    coordinates: Tuple[LonLat, ...]
    road_class: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_coordinates(
        cls,
        coordinates: Sequence[LonLat],
        road_class: Optional[str] = None,
        name: Optional[str] = None
    ) -> "NetworkFeature":
        """Build a feature, rounding coordinates to the output precision."""
        if len(coordinates) < 2:
            raise ValueError("A network feature needs at least two vertices")
        rounded = tuple(
            (round(lon, COORDINATE_PRECISION), round(lat, COORDINATE_PRECISION))
            for lon, lat in coordinates
        )
        return cls(coordinates=rounded, road_class=road_class, name=name)

    def to_linestring(self) -> LineString:
        return LineString(self.coordinates)

    def to_geojson(self) -> Dict[str, Any]:
        geometry = mapping(self.to_linestring())
        return {
            "type": "Feature",
            "geometry": {
                "type": geometry["type"],
                "coordinates": [list(coord) for coord in geometry["coordinates"]],
            },
            "properties": {
                "class": self.road_class,
                "name": self.name,
            },
        }


@dataclass
class BoundingBox:
    """Geographic extent that only ever widens."""
    min_lon: float = math.inf
    min_lat: float = math.inf
    max_lon: float = -math.inf
    max_lat: float = -math.inf

    @property
    def is_empty(self) -> bool:
        return self.min_lon > self.max_lon or self.min_lat > self.max_lat

    def extend(self, lon: float, lat: float) -> None:
        self.min_lon = min(self.min_lon, lon)
        self.max_lon = max(self.max_lon, lon)
        self.min_lat = min(self.min_lat, lat)
        self.max_lat = max(self.max_lat, lat)

    def extend_all(self, coordinates: Sequence[LonLat]) -> None:
        for lon, lat in coordinates:
            self.extend(lon, lat)

    def contains(self, other: "BoundingBox") -> bool:
        """True if ``other`` lies within this box (an empty box is contained everywhere)."""
        if other.is_empty:
            return True
        return (
            self.min_lon <= other.min_lon
            and self.min_lat <= other.min_lat
            and self.max_lon >= other.max_lon
            and self.max_lat >= other.max_lat
        )

    def copy(self) -> "BoundingBox":
        return BoundingBox(self.min_lon, self.min_lat, self.max_lon, self.max_lat)

    def to_dict(self) -> Dict[str, Optional[float]]:
        """Serialize with JSON-safe values; unset edges become None."""
        def finite(value: float) -> Optional[float]:
            return value if math.isfinite(value) else None

        return {
            "minLon": finite(self.min_lon),
            "minLat": finite(self.min_lat),
            "maxLon": finite(self.max_lon),
            "maxLat": finite(self.max_lat),
        }


@dataclass
class NetworkCollection:
    """The result of one extraction run."""
    center: GeoPoint
    radius_km: float
    zoom: int
    features: List[NetworkFeature] = field(default_factory=list)
    bounds: BoundingBox = field(default_factory=BoundingBox)
    tiles_planned: int = 0
    tiles_skipped: int = 0

    @property
    def feature_count(self) -> int:
        return len(self.features)

    def to_feature_collection(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [feature.to_geojson() for feature in self.features],
        }

    def to_metadata(self) -> Dict[str, Any]:
        return {
            "center": {"lon": self.center.lon, "lat": self.center.lat},
            "radius_km": self.radius_km,
            "zoom": self.zoom,
            "feature_count": self.feature_count,
            "bounds": self.bounds.to_dict(),
        }
