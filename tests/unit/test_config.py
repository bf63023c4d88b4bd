"""
Unit Tests for Configuration and Parameter Validation
"""

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from roadnet_tiles.models import GeoPoint
from roadnet_tiles.utils.config import (
    DEFAULT_ENDPOINT,
    ExtractionParams,
    ExtractorConfig,
)
from roadnet_tiles.utils.exceptions import InputValidationError


class TestExtractionParams(unittest.TestCase):

    def test_defaults(self):
        params = ExtractionParams.from_raw("13.405", "52.52", "40")

        self.assertEqual(params.center, GeoPoint(13.405, 52.52))
        self.assertEqual(params.radius_km, 40.0)
        self.assertEqual(params.zoom, 14)
        self.assertEqual(params.output_prefix, "liberty")

    def test_explicit_zoom_and_prefix(self):
        params = ExtractionParams.from_raw("-2.5879", "51.4545", "40", "15", "bristol")
        self.assertEqual(params.zoom, 15)
        self.assertEqual(params.output_prefix, "bristol")

    def test_non_numeric_values(self):
        for args in (("east", "52.5", "40"), ("13.4", "", "40"), ("13.4", "52.5", "far")):
            with self.assertRaises(InputValidationError):
                ExtractionParams.from_raw(*args)

    def test_non_finite_values(self):
        with self.assertRaises(InputValidationError):
            ExtractionParams.from_raw("nan", "52.5", "40")
        with self.assertRaises(InputValidationError):
            ExtractionParams.from_raw("13.4", "52.5", "inf")

    def test_zoom_range(self):
        for zoom in ("5", "17", "-1"):
            with self.assertRaises(InputValidationError) as context:
                ExtractionParams.from_raw("13.4", "52.5", "40", zoom)
            self.assertIn("between 6 and 16", str(context.exception))

        self.assertEqual(ExtractionParams.from_raw("13.4", "52.5", "40", "6").zoom, 6)
        self.assertEqual(ExtractionParams.from_raw("13.4", "52.5", "40", "16").zoom, 16)

    def test_fractional_zoom(self):
        with self.assertRaises(InputValidationError):
            ExtractionParams.from_raw("13.4", "52.5", "40", "14.5")

    def test_radius_must_be_positive(self):
        for radius in ("0", "-3"):
            with self.assertRaises(InputValidationError):
                ExtractionParams.from_raw("13.4", "52.5", radius)

    def test_coordinate_ranges(self):
        with self.assertRaises(InputValidationError):
            ExtractionParams.from_raw("181", "52.5", "40")
        with self.assertRaises(InputValidationError):
            ExtractionParams.from_raw("13.4", "-90.5", "40")

    def test_prefix_must_be_a_plain_name(self):
        with self.assertRaises(InputValidationError):
            ExtractionParams.from_raw("13.4", "52.5", "40", "14", "   ")
        with self.assertRaises(InputValidationError):
            ExtractionParams.from_raw("13.4", "52.5", "40", "14", "../berlin")


class TestExtractorConfig(unittest.TestCase):

    @patch.dict(os.environ, {}, clear=True)
    def test_from_env_defaults(self):
        config = ExtractorConfig.from_env()

        self.assertEqual(config.endpoint, DEFAULT_ENDPOINT)
        self.assertEqual(config.output_dir, Path("data"))
        self.assertEqual(config.max_workers, 1)
        self.assertEqual(config.layer_name, "transportation")
        self.assertIsNone(config.prometheus_gateway)

    @patch.dict(os.environ, {
        "OPENFREEMAP_ENDPOINT": "http://localhost:8080/tiles/",
        "ROADNET_OUTPUT_DIR": "/tmp/roads",
        "ROADNET_REQUEST_TIMEOUT": "2.5",
        "ROADNET_MAX_WORKERS": "4",
        "PROMETHEUS_PUSHGATEWAY": "localhost:9091",
    }, clear=True)
    def test_from_env_overrides(self):
        config = ExtractorConfig.from_env()

        self.assertEqual(config.base_url, "http://localhost:8080/tiles")
        self.assertEqual(config.output_dir, Path("/tmp/roads"))
        self.assertEqual(config.request_timeout, 2.5)
        self.assertEqual(config.max_workers, 4)
        self.assertEqual(config.prometheus_gateway, "localhost:9091")

    @patch.dict(os.environ, {"ROADNET_MAX_WORKERS": "many"}, clear=True)
    def test_from_env_invalid(self):
        with self.assertRaises(InputValidationError):
            ExtractorConfig.from_env()

    def test_with_overrides_ignores_none(self):
        config = ExtractorConfig().with_overrides(endpoint=None, output_dir="out", max_workers=None)

        self.assertEqual(config.endpoint, DEFAULT_ENDPOINT)
        self.assertEqual(config.output_dir, Path("out"))
        self.assertEqual(config.max_workers, 1)

    def test_with_overrides_validates(self):
        with self.assertRaises(InputValidationError):
            ExtractorConfig().with_overrides(max_workers=0)
        with self.assertRaises(InputValidationError):
            ExtractorConfig().with_overrides(request_timeout=-1.0)


if __name__ == '__main__':
    unittest.main()
