"""
Road Network Extractor

Orchestrates an extraction run: plans the tile range, fetches every tile,
filters its transportation layer and aggregates the accepted features.

Tiles are processed in scan order. With ``max_workers > 1`` downloads run on
a bounded thread pool, but results are still consumed in scan order so the
output is identical to a sequential run. A tile that cannot be fetched or
decoded is logged and skipped; it never aborts the run.
"""

import concurrent.futures
import time
from typing import Iterator, Optional, Tuple

import structlog

from ..geo.tile_planner import plan_tile_range
from ..models import NetworkCollection, TileCoord, TileRange, TransportationLayer
from ..monitoring.metrics import MetricsCollector
from ..tile_source.tile_fetcher import TileFetcher
from ..utils.config import ExtractionParams, ExtractorConfig
from ..utils.exceptions import MissingLayerError, TileError
from .aggregator import NetworkAggregator
from .feature_filter import TransportationFilter, filter_tile_features


class RoadNetworkExtractor:
    """
    Builds a road network around a point from remote vector tiles.
    """

    def __init__(
        self,
        config: ExtractorConfig,
        fetcher: Optional[TileFetcher] = None,
        metrics: Optional[MetricsCollector] = None,
        feature_filter: Optional[TransportationFilter] = None
    ):
        """
        Initialize the extractor.

        Args:
            config: Extractor configuration
            fetcher: Optional tile fetcher (built from config when omitted)
            metrics: Optional metrics collector
            feature_filter: Optional attribute rules for transportation features
        """
        self.config = config
        self.metrics = metrics or MetricsCollector(config.prometheus_gateway)
        self.fetcher = fetcher or TileFetcher(config, metrics=self.metrics)
        self.feature_filter = feature_filter or TransportationFilter()
        self.logger = structlog.get_logger(component="RoadNetworkExtractor")

    def extract(self, params: ExtractionParams) -> NetworkCollection:
        """
        Run one extraction.

        Args:
            params: Validated run parameters

        Returns:
            NetworkCollection with features in tile scan order
        """
        start_time = time.time()
        center = params.center

        self.logger.info(
            "Fetching transportation tiles",
            lon=round(center.lon, 5),
            lat=round(center.lat, 5),
            radius_km=params.radius_km,
            zoom=params.zoom
        )

        tile_range = plan_tile_range(center, params.radius_km, params.zoom)
        self.metrics.set_gauge('roadnet_tile_range_size', tile_range.count)

        aggregator = NetworkAggregator()
        skipped = 0

        for tile, layer in self._load_tiles(tile_range):
            if layer is None:
                skipped += 1
                continue

            result = filter_tile_features(
                layer,
                tile,
                center,
                params.radius_km,
                self.feature_filter
            )
            accepted = aggregator.add_all(result.features)

            self.metrics.increment_counter('roadnet_features_accepted_total', accepted)
            for reason, count in sorted(result.rejected.items()):
                self.metrics.increment_counter(
                    'roadnet_features_rejected_total',
                    count,
                    labels={'reason': reason}
                )

            self.logger.debug(
                "Processed tile",
                tile_id=tile.tile_id,
                accepted=accepted,
                rejected=dict(result.rejected)
            )

        collection = aggregator.collection(center, params.radius_km, params.zoom)
        collection.tiles_planned = tile_range.count
        collection.tiles_skipped = skipped

        self.logger.info(
            "Retained features inside the search radius",
            feature_count=collection.feature_count,
            tiles_planned=tile_range.count,
            tiles_skipped=skipped,
            duration_seconds=round(time.time() - start_time, 3)
        )

        return collection

    def _load_tiles(
        self,
        tile_range: TileRange
    ) -> Iterator[Tuple[TileCoord, Optional[TransportationLayer]]]:
        """Yield (tile, layer or None) pairs in scan order."""
        if self.config.max_workers <= 1:
            for index, tile in enumerate(tile_range, start=1):
                yield tile, self._load_tile(tile, index, tile_range.count)
            return

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            tiles = list(tile_range)
            layers = executor.map(
                self._load_tile,
                tiles,
                range(1, len(tiles) + 1),
                [tile_range.count] * len(tiles)
            )
            yield from zip(tiles, layers)

    def _load_tile(self, tile: TileCoord, index: int, total: int) -> Optional[TransportationLayer]:
        """Fetch and decode one tile, downgrading tile errors to None."""
        url = self.fetcher.tile_url(tile)
        self.logger.info("Downloading tile", progress=f"{index}/{total}", url=url)

        try:
            return self.fetcher.fetch_layer(tile)
        except MissingLayerError:
            self.logger.debug("Tile has no transportation layer", tile_id=tile.tile_id)
            return None
        except TileError as e:
            self.logger.warning(
                "Skipping tile",
                tile_id=tile.tile_id,
                url=url,
                status_code=getattr(e, 'status_code', None),
                error=str(e)
            )
            return None
