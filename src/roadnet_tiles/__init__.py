"""
Road Network Tile Extractor

Extracts a bounded road network around a point from OpenFreeMap vector tiles
and exports it as GeoJSON for downstream graph construction.
"""

__version__ = "1.0.0"

from . import export
from . import geo
from . import monitoring
from . import processing
from . import tile_source
from . import utils

__all__ = [
    "export",
    "geo",
    "monitoring",
    "processing",
    "tile_source",
    "utils",
]
