"""
Metrics Collection

Run-level metrics for the extractor: tile request outcomes, fetch latency and
feature acceptance. Metrics are kept in a private Prometheus registry so that
several extractor instances (and tests) never collide, and can optionally be
pushed to a Prometheus pushgateway at the end of a run.
"""

import json
import threading
from collections import defaultdict
from typing import Dict, List, Optional, Union

import structlog
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    push_to_gateway,
)


class MetricsCollector:
    """
    Thread-safe metrics collection for extraction runs.

    Every update is mirrored into a local snapshot so that run summaries can
    be logged without scraping the Prometheus registry.
    """

    def __init__(self, prometheus_gateway: Optional[str] = None):
        """
        Initialize the metrics collector.

        Args:
            prometheus_gateway: Optional pushgateway address (host:port)
        """
        self.prometheus_gateway = prometheus_gateway
        self.logger = structlog.get_logger(component="MetricsCollector")

        self.lock = threading.RLock()
        self.registry = CollectorRegistry()

        self.counters: Dict[str, Counter] = {}
        self.histograms: Dict[str, Histogram] = {}
        self.gauges: Dict[str, Gauge] = {}

        # Local snapshot: metric name -> label key -> value
        self._snapshot: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))

        self._init_metrics()

    def _init_metrics(self) -> None:
        """Register the extractor metrics."""
        self._create_metric(
            'counter', 'roadnet_tiles_requested_total',
            'Tiles requested from the tile source, by outcome',
            ['status']
        )
        self._create_metric(
            'counter', 'roadnet_features_accepted_total',
            'Road features accepted into the network'
        )
        self._create_metric(
            'counter', 'roadnet_features_rejected_total',
            'Features or polylines rejected by the filter, by reason',
            ['reason']
        )
        self._create_metric(
            'histogram', 'roadnet_tile_fetch_duration_seconds',
            'Duration of tile fetch requests'
        )
        self._create_metric(
            'gauge', 'roadnet_tile_range_size',
            'Number of tiles in the planned range'
        )

    def _create_metric(
        self,
        metric_type: str,
        name: str,
        description: str,
        labels: Optional[List[str]] = None
    ) -> None:
        labels = labels or []

        if metric_type == 'counter':
            self.counters[name] = Counter(name, description, labels, registry=self.registry)
        elif metric_type == 'histogram':
            self.histograms[name] = Histogram(name, description, labels, registry=self.registry)
        elif metric_type == 'gauge':
            self.gauges[name] = Gauge(name, description, labels, registry=self.registry)
        else:
            raise ValueError(f"Unsupported metric type: {metric_type}")

    @staticmethod
    def _label_key(labels: Optional[Dict[str, str]]) -> str:
        if not labels:
            return ""
        return ",".join(f"{key}={labels[key]}" for key in sorted(labels))

    def increment_counter(
        self,
        name: str,
        value: Union[int, float] = 1,
        labels: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Increment a counter metric.

        Args:
            name: Metric name
            value: Value to increment by
            labels: Metric labels
        """
        if name not in self.counters:
            raise KeyError(f"Unknown counter: {name}")

        with self.lock:
            counter = self.counters[name]
            if labels:
                counter.labels(**labels).inc(value)
            else:
                counter.inc(value)
            self._snapshot[name][self._label_key(labels)] += value

    def record_histogram(
        self,
        name: str,
        value: Union[int, float],
        labels: Optional[Dict[str, str]] = None
    ) -> None:
        """Record an observation on a histogram metric."""
        if name not in self.histograms:
            raise KeyError(f"Unknown histogram: {name}")

        with self.lock:
            histogram = self.histograms[name]
            if labels:
                histogram.labels(**labels).observe(value)
            else:
                histogram.observe(value)
            key = self._label_key(labels)
            self._snapshot[f"{name}_count"][key] += 1
            self._snapshot[f"{name}_sum"][key] += value

    def set_gauge(
        self,
        name: str,
        value: Union[int, float],
        labels: Optional[Dict[str, str]] = None
    ) -> None:
        """Set a gauge metric."""
        if name not in self.gauges:
            raise KeyError(f"Unknown gauge: {name}")

        with self.lock:
            gauge = self.gauges[name]
            if labels:
                gauge.labels(**labels).set(value)
            else:
                gauge.set(value)
            self._snapshot[name][self._label_key(labels)] = value

    def get_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """Current local value of a metric (0 when never updated)."""
        with self.lock:
            return self._snapshot.get(name, {}).get(self._label_key(labels), 0.0)

    def get_summary(self) -> Dict[str, Dict[str, float]]:
        """Copy of every metric value recorded so far."""
        with self.lock:
            return {name: dict(values) for name, values in self._snapshot.items()}

    def push_to_prometheus_gateway(self, job_name: str = "roadnet_extract") -> bool:
        """Push metrics to the Prometheus pushgateway, if one is configured."""
        if not self.prometheus_gateway:
            return False

        try:
            push_to_gateway(self.prometheus_gateway, job=job_name, registry=self.registry)
        except OSError as e:
            self.logger.warning(
                "Failed to push metrics to Prometheus gateway",
                gateway=self.prometheus_gateway,
                error=str(e)
            )
            return False

        self.logger.info(
            "Pushed metrics to Prometheus gateway",
            gateway=self.prometheus_gateway,
            job=job_name
        )
        return True

    def export_metrics(self, format: str = "json") -> str:
        """Export metrics as JSON (local snapshot) or Prometheus text format."""
        if format.lower() == "json":
            return json.dumps(self.get_summary(), indent=2, sort_keys=True)
        elif format.lower() == "prometheus":
            return generate_latest(self.registry).decode('utf-8')
        else:
            raise ValueError(f"Unsupported export format: {format}")
