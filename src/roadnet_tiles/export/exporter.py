"""
Network Exporter

Writes the extracted network as `<prefix>.geojson` and the run summary as
`<prefix>.metadata.json`.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

import structlog

from ..models import NetworkCollection
from ..utils.exceptions import OutputWriteError


@dataclass(frozen=True)
class ExportResult:
    geojson_path: Path
    metadata_path: Path

    @property
    def snap_path(self) -> Path:
        """Suggested output path for the downstream graph conversion."""
        return self.geojson_path.with_name(
            self.geojson_path.name[:-len(".geojson")] + ".snap.bin"
        )


class NetworkExporter:
    """Serializes a NetworkCollection to disk as deterministic JSON."""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)
        self.logger = structlog.get_logger(component="NetworkExporter")

    def export(self, collection: NetworkCollection, prefix: str) -> ExportResult:
        """
        Write both output documents.

        Raises:
            OutputWriteError: If the directory or either file cannot be written
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputWriteError(f"Cannot create output directory {self.output_dir}: {e}") from e

        geojson_path = self.output_dir / f"{prefix}.geojson"
        metadata_path = self.output_dir / f"{prefix}.metadata.json"

        self._write_json(geojson_path, collection.to_feature_collection())
        self.logger.info("Wrote feature collection", path=str(geojson_path))

        self._write_json(metadata_path, collection.to_metadata())
        self.logger.info("Wrote metadata", path=str(metadata_path))

        return ExportResult(geojson_path=geojson_path, metadata_path=metadata_path)

    @staticmethod
    def _write_json(path: Path, document: Dict[str, Any]) -> None:
        try:
            text = json.dumps(document, indent=2, allow_nan=False)
            path.write_text(text, encoding="utf-8")
        except (OSError, ValueError) as e:
            raise OutputWriteError(f"Failed to write {path}: {e}") from e
