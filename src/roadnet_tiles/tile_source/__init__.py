"""
Tile Source

Access to the remote vector tile endpoint: downloading `{z}/{x}/{y}.pbf`
payloads and decoding the transportation layer.
"""

from .tile_fetcher import DEFAULT_EXTENT, TileFetcher

__all__ = [
    "DEFAULT_EXTENT",
    "TileFetcher",
]
