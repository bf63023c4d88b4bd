"""
Feature Filter and Reprojector

Turns the decoded transportation layer of one tile into accepted road
features. This module performs no I/O so it can be exercised with synthetic
in-memory tiles.

Rules applied to every feature, in order:
1. only line geometries are kept
2. excluded brunnel values (tunnels by default) are dropped
3. a present `class` must be one of the allowed road classes
4. each polyline is reprojected to lon/lat and needs at least two vertices
5. at least one vertex must lie within the search radius
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Sequence

from ..geo.projection import chord_distance_m, tile_point_to_lon_lat
from ..models import GeoPoint, LonLat, NetworkFeature, RawFeature, TileCoord, TransportationLayer


ALLOWED_ROAD_CLASSES = frozenset({
    "motorway",
    "trunk",
    "primary",
    "secondary",
    "tertiary",
    "residential",
    "service",
    "unclassified",
    "living_street",
    "road",
})

# Tunnels frequently duplicate the surface way above them
EXCLUDED_BRUNNELS = frozenset({"tunnel"})


@dataclass(frozen=True)
class TransportationFilter:
    """Attribute rules deciding which transportation features are roads."""
    allowed_classes: FrozenSet[str] = ALLOWED_ROAD_CLASSES
    excluded_brunnels: FrozenSet[str] = EXCLUDED_BRUNNELS

    def rejection_reason(self, feature: RawFeature) -> Optional[str]:
        """Return why a feature is rejected, or None if it passes."""
        if feature.geom_type != "line":
            return "geometry"

        properties = feature.properties
        if properties.get("brunnel") in self.excluded_brunnels:
            return "brunnel"

        # Features without a class are kept as unknown roads
        road_class = properties.get("class")
        if road_class and road_class not in self.allowed_classes:
            return "class"

        return None


@dataclass
class TileFilterResult:
    """Accepted features of one tile plus rejection counts by reason."""
    features: List[NetworkFeature] = field(default_factory=list)
    rejected: Counter = field(default_factory=Counter)


def line_within_radius(coords: Iterable[LonLat], center: GeoPoint, radius_km: float) -> bool:
    """
    True if any vertex lies within ``radius_km`` of ``center``.

    Distances are chords through the sphere. A line that merely clips the
    circle is kept whole.
    """
    radius_m = radius_km * 1000.0
    return any(
        chord_distance_m(center, GeoPoint(lon, lat)) <= radius_m
        for lon, lat in coords
    )


def reproject_line(
    line: Sequence[Sequence[float]],
    tile: TileCoord,
    extent: int
) -> List[LonLat]:
    """Convert a tile-local polyline to lon/lat vertices."""
    return [
        tile_point_to_lon_lat(tile.x, tile.y, tile.zoom, extent, px, py).as_tuple()
        for px, py in line
    ]


def filter_tile_features(
    layer: TransportationLayer,
    tile: TileCoord,
    center: GeoPoint,
    radius_km: float,
    feature_filter: Optional[TransportationFilter] = None
) -> TileFilterResult:
    """
    Select and reproject the road polylines of one tile.

    Args:
        layer: Decoded transportation layer of the tile
        tile: Coordinates of the tile the layer came from
        center: Search circle center
        radius_km: Search circle radius in kilometres
        feature_filter: Attribute rules; defaults to TransportationFilter()

    Returns:
        TileFilterResult with features in layer order
    """
    feature_filter = feature_filter or TransportationFilter()
    result = TileFilterResult()

    for feature in layer.features:
        reason = feature_filter.rejection_reason(feature)
        if reason is not None:
            result.rejected[reason] += 1
            continue

        road_class = feature.properties.get("class") or None
        name = feature.properties.get("name") or None

        for line in feature.lines:
            coords = reproject_line(line, tile, layer.extent)
            if len(coords) < 2:
                result.rejected["too_short"] += 1
                continue
            if not line_within_radius(coords, center, radius_km):
                result.rejected["outside_radius"] += 1
                continue

            result.features.append(
                NetworkFeature.from_coordinates(coords, road_class=road_class, name=name)
            )

    return result
