"""
Shared Utilities

Configuration handling and the error taxonomy used throughout the extractor.
"""

from .config import ExtractionParams, ExtractorConfig
from .exceptions import (
    InputValidationError,
    MissingLayerError,
    OutputWriteError,
    RoadNetworkError,
    TileDecodeError,
    TileError,
    TileFetchError,
)

__all__ = [
    "ExtractionParams",
    "ExtractorConfig",
    "InputValidationError",
    "MissingLayerError",
    "OutputWriteError",
    "RoadNetworkError",
    "TileDecodeError",
    "TileError",
    "TileFetchError",
]
