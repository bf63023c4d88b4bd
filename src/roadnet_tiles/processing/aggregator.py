"""
Network Aggregator

Accumulates accepted road features and their bounding box over a run.
"""

import threading
from typing import Iterable, List

from ..models import BoundingBox, GeoPoint, NetworkCollection, NetworkFeature


class NetworkAggregator:
    """
    Append-only store of accepted features.

    Features keep their insertion order and are never deduplicated; a road
    crossing two tiles is stored once per tile. Appends are serialized so
    tiles may be processed from worker threads.
    """

    def __init__(self):
        self._features: List[NetworkFeature] = []
        self._bounds = BoundingBox()
        self._lock = threading.Lock()

    def add(self, feature: NetworkFeature) -> None:
        with self._lock:
            self._features.append(feature)
            self._bounds.extend_all(feature.coordinates)

    def add_all(self, features: Iterable[NetworkFeature]) -> int:
        """Add features in order and return how many were added."""
        added = 0
        for feature in features:
            self.add(feature)
            added += 1
        return added

    @property
    def feature_count(self) -> int:
        with self._lock:
            return len(self._features)

    @property
    def bounds(self) -> BoundingBox:
        """Snapshot of the current bounding box."""
        with self._lock:
            return self._bounds.copy()

    def collection(self, center: GeoPoint, radius_km: float, zoom: int) -> NetworkCollection:
        with self._lock:
            return NetworkCollection(
                center=center,
                radius_km=radius_km,
                zoom=zoom,
                features=list(self._features),
                bounds=self._bounds.copy(),
            )
