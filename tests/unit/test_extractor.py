"""
Unit Tests for the Road Network Extractor

Runs complete extractions against an in-memory tile source. The search
circle is centred on (0, 0) so that at zoom 6 it covers exactly the four
tiles meeting at that point.
"""

import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, Mock

import requests

from roadnet_tiles.export.exporter import NetworkExporter
from roadnet_tiles.geo.projection import chord_distance_m
from roadnet_tiles.models import GeoPoint
from roadnet_tiles.monitoring.metrics import MetricsCollector
from roadnet_tiles.processing.extractor import RoadNetworkExtractor
from roadnet_tiles.processing.feature_filter import ALLOWED_ROAD_CLASSES
from roadnet_tiles.tile_source.tile_fetcher import TileFetcher
from roadnet_tiles.utils.config import ExtractionParams, ExtractorConfig

from tile_payloads import line_feature, make_tile_payload


ENDPOINT = "https://tiles.example.org/planet"
EXTENT = 4096
TILES = [(31, 31), (31, 32), (32, 31), (32, 32)]


def corner_tile_payload(x, y):
    """Tile whose roads start exactly at the shared corner (0, 0)."""
    cx = EXTENT if x == 31 else 0
    cy = EXTENT if y == 31 else 0
    step_x = -10 if x == 31 else 10
    step_y = -10 if y == 31 else 10
    inward = [(cx, cy), (cx + step_x, cy + step_y), (cx + 2 * step_x, cy + 3 * step_y)]
    far = [(2048, 2048), (2100, 2100)]

    return make_tile_payload({
        "transportation": [
            line_feature(inward, {"class": "primary", "name": f"road-{x}-{y}"}),
            line_feature(inward, {"class": "path", "name": f"path-{x}-{y}"}),
            line_feature(inward, {"class": "primary", "brunnel": "tunnel", "name": f"tunnel-{x}-{y}"}),
            line_feature(far, {"class": "secondary", "name": f"far-{x}-{y}"}),
        ]
    })


class FakeTileServer:
    """Callable standing in for requests.Session.get."""

    def __init__(self, overrides=None):
        self.overrides = overrides or {}
        self.requested = []

    def __call__(self, url, timeout=None):
        self.requested.append(url)
        x, y = (int(part) for part in url[:-len(".pbf")].split("/")[-2:])
        override = self.overrides.get((x, y))
        if isinstance(override, Exception):
            raise override
        if override is not None:
            return override
        return Mock(ok=True, status_code=200, content=corner_tile_payload(x, y), reason="OK")


class TestRoadNetworkExtractor(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)
        self.params = ExtractionParams(center=GeoPoint(0.0, 0.0), radius_km=1.0, zoom=6)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def _extractor(self, server, max_workers=1):
        config = ExtractorConfig(endpoint=ENDPOINT, max_workers=max_workers)
        session = MagicMock()
        session.get.side_effect = server
        metrics = MetricsCollector()
        fetcher = TileFetcher(config, session=session, metrics=metrics)
        return RoadNetworkExtractor(config, fetcher=fetcher, metrics=metrics)

    def test_full_run(self):
        server = FakeTileServer()
        extractor = self._extractor(server)

        collection = extractor.extract(self.params)

        self.assertEqual(
            server.requested,
            [f"{ENDPOINT}/6/{x}/{y}.pbf" for x, y in TILES]
        )
        self.assertEqual(
            [feature.name for feature in collection.features],
            [f"road-{x}-{y}" for x, y in TILES]
        )
        self.assertEqual(collection.tiles_planned, 4)
        self.assertEqual(collection.tiles_skipped, 0)
        self.assertEqual(extractor.metrics.get_value('roadnet_features_accepted_total'), 4)
        self.assertEqual(
            extractor.metrics.get_value('roadnet_features_rejected_total', {'reason': 'brunnel'}),
            4
        )

    def test_accepted_features_satisfy_filters(self):
        collection = self._extractor(FakeTileServer()).extract(self.params)

        for feature in collection.features:
            self.assertTrue(feature.road_class is None or feature.road_class in ALLOWED_ROAD_CLASSES)
            self.assertNotEqual(feature.road_class, "path")
            distances = [
                chord_distance_m(self.params.center, GeoPoint(lon, lat))
                for lon, lat in feature.coordinates
            ]
            self.assertLessEqual(min(distances), self.params.radius_km * 1000.0)

    def test_bounds_cover_features(self):
        collection = self._extractor(FakeTileServer()).extract(self.params)

        bounds = collection.bounds
        self.assertLess(bounds.min_lon, 0.0)
        self.assertGreater(bounds.max_lon, 0.0)
        self.assertLess(bounds.min_lat, 0.0)
        self.assertGreater(bounds.max_lat, 0.0)
        for feature in collection.features:
            for lon, lat in feature.coordinates:
                self.assertTrue(bounds.min_lon <= lon <= bounds.max_lon)
                self.assertTrue(bounds.min_lat <= lat <= bounds.max_lat)

    def test_not_found_tile_is_skipped(self):
        server = FakeTileServer({(31, 32): Mock(ok=False, status_code=404, content=b"", reason="Not Found")})

        collection = self._extractor(server).extract(self.params)

        self.assertEqual(len(server.requested), 4)
        self.assertEqual(collection.feature_count, 3)
        self.assertEqual(collection.tiles_skipped, 1)
        self.assertNotIn("road-31-32", [feature.name for feature in collection.features])

    def test_transport_failure_is_skipped(self):
        server = FakeTileServer({(32, 31): requests.ConnectionError("reset by peer")})

        collection = self._extractor(server).extract(self.params)

        self.assertEqual(collection.feature_count, 3)
        self.assertEqual(collection.tiles_skipped, 1)

    def test_missing_layer_and_garbage_are_skipped(self):
        server = FakeTileServer({
            (31, 31): Mock(ok=True, status_code=200, reason="OK",
                           content=make_tile_payload({"water": [line_feature([(0, 0), (5, 5)])]})),
            (32, 32): Mock(ok=True, status_code=200, reason="OK", content=b"\xff\xff\xff\xff\xff"),
        })

        collection = self._extractor(server).extract(self.params)

        self.assertEqual(
            [feature.name for feature in collection.features],
            ["road-31-32", "road-32-31"]
        )
        self.assertEqual(collection.tiles_skipped, 2)

    def test_all_tiles_failing_yields_empty_network(self):
        failure = Mock(ok=False, status_code=503, content=b"", reason="Service Unavailable")
        server = FakeTileServer({tile: failure for tile in TILES})

        collection = self._extractor(server).extract(self.params)

        self.assertEqual(collection.feature_count, 0)
        self.assertTrue(collection.bounds.is_empty)
        self.assertEqual(collection.to_metadata()["bounds"]["minLon"], None)

    def test_larger_radius_keeps_accepted_features(self):
        small = self._extractor(FakeTileServer()).extract(self.params)
        wide_params = ExtractionParams(center=GeoPoint(0.0, 0.0), radius_km=2000.0, zoom=6)
        wide = self._extractor(FakeTileServer()).extract(wide_params)

        wide_features = set(wide.features)
        for feature in small.features:
            self.assertIn(feature, wide_features)

    def test_output_is_deterministic(self):
        outputs = []
        for run in range(2):
            collection = self._extractor(FakeTileServer()).extract(self.params)
            result = NetworkExporter(self.temp_path / f"run{run}").export(collection, "corner")
            outputs.append((result.geojson_path.read_bytes(), result.metadata_path.read_bytes()))

        self.assertEqual(outputs[0], outputs[1])

    def test_worker_pool_matches_sequential_run(self):
        sequential = self._extractor(FakeTileServer()).extract(self.params)
        pooled = self._extractor(FakeTileServer(), max_workers=4).extract(self.params)

        self.assertEqual(pooled.features, sequential.features)
        self.assertEqual(pooled.bounds, sequential.bounds)


if __name__ == '__main__':
    unittest.main()
