"""
Configuration

Environment-driven settings for the extractor and validated parameters for a
single extraction run.
"""

import math
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

from ..models import GeoPoint
from .exceptions import InputValidationError


DEFAULT_ENDPOINT = "https://tiles.openfreemap.org/planet"
DEFAULT_OUTPUT_DIR = "data"
DEFAULT_OUTPUT_PREFIX = "liberty"
DEFAULT_ZOOM = 14
MIN_ZOOM = 6
MAX_ZOOM = 16
TRANSPORTATION_LAYER = "transportation"


@dataclass
class ExtractorConfig:
    """Process-level settings for fetching tiles and writing outputs."""
    endpoint: str = DEFAULT_ENDPOINT
    output_dir: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT_DIR))
    request_timeout: float = 30.0
    max_workers: int = 1
    user_agent: str = "roadnet-tiles/1.0"
    layer_name: str = TRANSPORTATION_LAYER
    prometheus_gateway: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ExtractorConfig":
        """Build a configuration from environment variables."""
        try:
            config = cls(
                endpoint=os.getenv("OPENFREEMAP_ENDPOINT", DEFAULT_ENDPOINT),
                output_dir=Path(os.getenv("ROADNET_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)),
                request_timeout=float(os.getenv("ROADNET_REQUEST_TIMEOUT", "30")),
                max_workers=int(os.getenv("ROADNET_MAX_WORKERS", "1")),
                prometheus_gateway=os.getenv("PROMETHEUS_PUSHGATEWAY") or None,
            )
        except ValueError as e:
            raise InputValidationError(f"Invalid environment configuration: {e}") from e

        config.validate()
        return config

    def with_overrides(self, **overrides: Any) -> "ExtractorConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "output_dir" in changes:
            changes["output_dir"] = Path(changes["output_dir"])
        config = replace(self, **changes)
        config.validate()
        return config

    def validate(self) -> None:
        if not self.endpoint:
            raise InputValidationError("Tile endpoint must not be empty")
        if self.request_timeout <= 0:
            raise InputValidationError("Request timeout must be positive")
        if self.max_workers < 1:
            raise InputValidationError("max_workers must be at least 1")

    @property
    def base_url(self) -> str:
        return self.endpoint.rstrip("/")


@dataclass(frozen=True)
class ExtractionParams:
    """Validated inputs of one extraction run."""
    center: GeoPoint
    radius_km: float
    zoom: int = DEFAULT_ZOOM
    output_prefix: str = DEFAULT_OUTPUT_PREFIX

    @classmethod
    def from_raw(
        cls,
        lon: Any,
        lat: Any,
        radius_km: Any,
        zoom: Any = None,
        output_prefix: Optional[str] = None
    ) -> "ExtractionParams":
        """
        Parse and validate raw (typically command line) values.

        Raises:
            InputValidationError: If any value is malformed or out of range
        """
        lon_value = _parse_number("lon", lon)
        lat_value = _parse_number("lat", lat)
        radius_value = _parse_number("radius_km", radius_km)

        if not -180.0 <= lon_value <= 180.0:
            raise InputValidationError(f"lon must be within [-180, 180], got {lon_value}")
        if not -90.0 <= lat_value <= 90.0:
            raise InputValidationError(f"lat must be within [-90, 90], got {lat_value}")
        if radius_value <= 0:
            raise InputValidationError(f"radius_km must be positive, got {radius_value}")

        zoom_value = DEFAULT_ZOOM
        if zoom is not None and str(zoom).strip() != "":
            zoom_number = _parse_number("zoom", zoom)
            if not zoom_number.is_integer():
                raise InputValidationError(f"zoom must be an integer, got {zoom}")
            zoom_value = int(zoom_number)
        if not MIN_ZOOM <= zoom_value <= MAX_ZOOM:
            raise InputValidationError(
                f"zoom must be a number between {MIN_ZOOM} and {MAX_ZOOM}, got {zoom_value}"
            )

        prefix = DEFAULT_OUTPUT_PREFIX if output_prefix is None else output_prefix.strip()
        if not prefix:
            raise InputValidationError("output prefix must not be empty")
        if "/" in prefix or "\\" in prefix:
            raise InputValidationError(f"output prefix must be a plain name, got {prefix!r}")

        return cls(
            center=GeoPoint(lon=lon_value, lat=lat_value),
            radius_km=radius_value,
            zoom=zoom_value,
            output_prefix=prefix,
        )


def _parse_number(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InputValidationError(f"{name} must be a number, got {value!r}") from None

    if not math.isfinite(number):
        raise InputValidationError(f"{name} must be finite, got {value!r}")

    return number
