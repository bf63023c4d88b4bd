"""
Tile Processing

Filtering and reprojection of transportation features, aggregation of the
accepted road network, and orchestration of a full extraction run.
"""

from .aggregator import NetworkAggregator
from .extractor import RoadNetworkExtractor
from .feature_filter import (
    ALLOWED_ROAD_CLASSES,
    EXCLUDED_BRUNNELS,
    TileFilterResult,
    TransportationFilter,
    filter_tile_features,
    line_within_radius,
    reproject_line,
)

__all__ = [
    "NetworkAggregator",
    "RoadNetworkExtractor",
    "ALLOWED_ROAD_CLASSES",
    "EXCLUDED_BRUNNELS",
    "TileFilterResult",
    "TransportationFilter",
    "filter_tile_features",
    "line_within_radius",
    "reproject_line",
]
