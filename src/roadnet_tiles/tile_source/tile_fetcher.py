"""
Tile Fetcher

Retrieves Mapbox Vector Tile payloads from an HTTP tile source and decodes
the layer the extractor works on. Failures are reported as TileFetchError /
TileDecodeError so the caller can decide to skip the tile.
"""

import gzip
import time
import zlib
from typing import Any, Dict, List, Optional, Tuple

import mapbox_vector_tile
import requests
import structlog

from ..models import RawFeature, TileCoord, TransportationLayer
from ..monitoring.metrics import MetricsCollector
from ..utils.config import ExtractorConfig
from ..utils.exceptions import MissingLayerError, TileDecodeError, TileFetchError


# Extent assumed when a layer does not declare one
DEFAULT_EXTENT = 4096

GZIP_MAGIC = b"\x1f\x8b"

_GEOMETRY_KINDS = {
    "Point": "point",
    "MultiPoint": "point",
    "LineString": "line",
    "MultiLineString": "line",
    "Polygon": "polygon",
    "MultiPolygon": "polygon",
}


class TileFetcher:
    """
    HTTP client for a `{base}/{z}/{x}/{y}.pbf` vector tile source.

    One requests session is reused for every tile of a run. Nothing is cached
    and nothing is retried.
    """

    def __init__(
        self,
        config: ExtractorConfig,
        session: Optional[requests.Session] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize the tile fetcher.

        Args:
            config: Extractor configuration (endpoint, timeout, layer name)
            session: Optional pre-configured requests session
            metrics: Optional metrics collector for request outcomes
        """
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": config.user_agent})
        self.metrics = metrics
        self.logger = structlog.get_logger(component="TileFetcher", endpoint=config.base_url)

    def tile_url(self, tile: TileCoord) -> str:
        return f"{self.config.base_url}/{tile.zoom}/{tile.x}/{tile.y}.pbf"

    def fetch(self, tile: TileCoord) -> bytes:
        """
        Download the raw payload of one tile.

        Raises:
            TileFetchError: On transport failure or a non-success response
        """
        url = self.tile_url(tile)
        start_time = time.time()

        try:
            response = self.session.get(url, timeout=self.config.request_timeout)
        except requests.RequestException as e:
            self._record_request("error", start_time)
            raise TileFetchError(f"Failed to download {url}: {e}", tile) from e

        if not response.ok:
            self._record_request("http_error", start_time)
            raise TileFetchError(
                f"Skipping {url}: {response.status_code} {response.reason}",
                tile,
                status_code=response.status_code
            )

        self._record_request("ok", start_time)
        self.logger.debug("Fetched tile", tile_id=tile.tile_id, size_bytes=len(response.content))
        return response.content

    def decode(self, payload: bytes, tile: TileCoord) -> TransportationLayer:
        """
        Decode a payload and return the configured layer.

        Raises:
            TileDecodeError: If the payload is not a valid vector tile
            MissingLayerError: If the tile has no such layer
        """
        if payload[:2] == GZIP_MAGIC:
            try:
                payload = gzip.decompress(payload)
            except (OSError, EOFError, zlib.error) as e:
                raise TileDecodeError(f"Corrupt gzip payload: {e}", tile) from e

        try:
            decoded = mapbox_vector_tile.decode(
                payload,
                default_options={"y_coord_down": True}
            )
        except Exception as e:
            raise TileDecodeError(f"Could not decode tile {tile.tile_id}: {e}", tile) from e

        layer_name = self.config.layer_name
        layer = decoded.get(layer_name)
        if layer is None:
            raise MissingLayerError(layer_name, tile)

        return _build_layer(layer_name, layer)

    def fetch_layer(self, tile: TileCoord) -> TransportationLayer:
        """Fetch and decode one tile."""
        payload = self.fetch(tile)
        return self.decode(payload, tile)

    def close(self) -> None:
        self.session.close()

    def _record_request(self, status: str, start_time: float) -> None:
        if self.metrics is None:
            return
        self.metrics.increment_counter('roadnet_tiles_requested_total', labels={'status': status})
        self.metrics.record_histogram(
            'roadnet_tile_fetch_duration_seconds',
            time.time() - start_time
        )


def _build_layer(name: str, layer: Dict[str, Any]) -> TransportationLayer:
    extent = int(layer.get("extent") or DEFAULT_EXTENT)
    features = [_build_feature(feature) for feature in layer.get("features", [])]
    return TransportationLayer(name=name, extent=extent, features=features)


def _build_feature(feature: Dict[str, Any]) -> RawFeature:
    geometry = feature.get("geometry") or {}
    geom_type = _GEOMETRY_KINDS.get(geometry.get("type"), "unknown")

    lines: List[List[Tuple[float, float]]] = []
    coordinates = geometry.get("coordinates") or []
    if geometry.get("type") == "LineString":
        lines = [_as_points(coordinates)]
    elif geometry.get("type") == "MultiLineString":
        lines = [_as_points(part) for part in coordinates]

    return RawFeature(
        geom_type=geom_type,
        properties=dict(feature.get("properties") or {}),
        lines=lines
    )


def _as_points(coordinates: List[List[float]]) -> List[Tuple[float, float]]:
    return [(point[0], point[1]) for point in coordinates]
