#!/usr/bin/env python3
"""
Build Road Network

Fetch OpenFreeMap transportation tiles around a point, filter the road
network and export a GeoJSON linestring network that can be converted into a
RouteSnapper map.

Usage: scripts/build-graph.py <lon> <lat> <radius_km> [zoom] [output_prefix]
"""

import os
import sys
from pathlib import Path

from roadnet_tiles.cli import main


if __name__ == "__main__":
    # Outputs land in the repository's data/ directory unless overridden
    os.environ.setdefault("ROADNET_OUTPUT_DIR", str(Path(__file__).resolve().parent.parent / "data"))
    sys.exit(main())
