"""
Extractor Error Taxonomy

Exceptions raised across the road network extractor. Tile-level errors are
recovered by the orchestration layer (the tile is skipped); input and output
errors are fatal and surface as a non-zero exit status.
"""

from typing import Optional

from ..models import TileCoord


class RoadNetworkError(Exception):
    """Base class for all extractor errors."""


class InputValidationError(RoadNetworkError):
    """Malformed or out-of-range run parameters."""


class TileError(RoadNetworkError):
    """Base class for per-tile failures."""

    def __init__(self, message: str, tile: Optional[TileCoord] = None):
        super().__init__(message)
        self.tile = tile


class TileFetchError(TileError):
    """Transport failure or non-success response for one tile."""

    def __init__(
        self,
        message: str,
        tile: Optional[TileCoord] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message, tile)
        self.status_code = status_code


class TileDecodeError(TileError):
    """Tile payload could not be decoded as a vector tile."""


class MissingLayerError(TileDecodeError):
    """Decoded tile does not contain the requested layer."""

    def __init__(self, layer_name: str, tile: Optional[TileCoord] = None):
        super().__init__(f"Layer '{layer_name}' not present in tile", tile)
        self.layer_name = layer_name


class OutputWriteError(RoadNetworkError):
    """Output artifacts could not be persisted."""
