"""
Export

Persistence of extracted road networks as GeoJSON plus run metadata.
"""

from .exporter import ExportResult, NetworkExporter

__all__ = [
    "ExportResult",
    "NetworkExporter",
]
