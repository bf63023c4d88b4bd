"""
Command Line Interface

Fetch transportation tiles from OpenFreeMap, filter the road network around
a point and export it as GeoJSON ready for conversion into a RouteSnapper
graph.
"""

import argparse
import sys
from typing import List, Optional

import structlog

from .export.exporter import NetworkExporter
from .monitoring.logging_config import configure_logging
from .monitoring.metrics import MetricsCollector
from .processing.extractor import RoadNetworkExtractor
from .utils.config import (
    DEFAULT_OUTPUT_PREFIX,
    DEFAULT_ZOOM,
    MAX_ZOOM,
    MIN_ZOOM,
    ExtractionParams,
    ExtractorConfig,
)
from .utils.exceptions import InputValidationError, OutputWriteError


EPILOG = f"""Examples:
  # Export a 40 km network around Bristol (UK) at zoom {DEFAULT_ZOOM}
  roadnet-extract -2.5879 51.4545 40

  # Export a denser network (zoom 15) around Berlin and write berlin.geojson
  roadnet-extract 13.405 52.52 40 15 berlin
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roadnet-extract",
        description=__doc__.strip().splitlines()[0],
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("lon", help="Center longitude in degrees")
    parser.add_argument("lat", help="Center latitude in degrees")
    parser.add_argument("radius_km", help="Search radius in kilometres")
    parser.add_argument(
        "zoom", nargs="?", default=None,
        help=f"Tile zoom level between {MIN_ZOOM} and {MAX_ZOOM} (default {DEFAULT_ZOOM})"
    )
    parser.add_argument(
        "output_prefix", nargs="?", default=None,
        help=f"Output file name prefix (default {DEFAULT_OUTPUT_PREFIX})"
    )
    parser.add_argument("--output-dir", help="Directory for output files (default: data)")
    parser.add_argument("--endpoint", help="Tile source base URL (overrides OPENFREEMAP_ENDPOINT)")
    parser.add_argument("--workers", type=int, help="Number of concurrent tile downloads")
    parser.add_argument("--timeout", type=float, help="Per-tile request timeout in seconds")
    parser.add_argument("--log-level", default="INFO", help="Log level (default INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument(
        "--push-metrics", action="store_true",
        help="Push run metrics to PROMETHEUS_PUSHGATEWAY when the run finishes"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the extractor; returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        configure_logging(args.log_level, json_logs=args.json_logs)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    logger = structlog.get_logger(component="cli")

    try:
        params = ExtractionParams.from_raw(
            args.lon, args.lat, args.radius_km, args.zoom, args.output_prefix
        )
        config = ExtractorConfig.from_env().with_overrides(
            endpoint=args.endpoint,
            output_dir=args.output_dir,
            max_workers=args.workers,
            request_timeout=args.timeout
        )
    except InputValidationError as e:
        logger.error("Invalid input", error=str(e))
        return 1

    metrics = MetricsCollector(config.prometheus_gateway)
    extractor = RoadNetworkExtractor(config, metrics=metrics)
    try:
        collection = extractor.extract(params)
    finally:
        extractor.fetcher.close()

    try:
        result = NetworkExporter(config.output_dir).export(collection, params.output_prefix)
    except OutputWriteError as e:
        logger.error("Failed to write output", error=str(e))
        return 1

    logger.info(
        "Extraction complete",
        feature_count=collection.feature_count,
        tiles_skipped=collection.tiles_skipped,
        geojson=str(result.geojson_path),
        metadata=str(result.metadata_path)
    )

    if args.push_metrics:
        metrics.push_to_prometheus_gateway()

    logger.info(
        "Next: convert the GeoJSON to a RouteSnapper graph",
        command=(
            "cargo run --release --bin geojson-to-route-snapper -- "
            f"{result.geojson_path} {result.snap_path}"
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
