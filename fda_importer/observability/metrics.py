"""
Prometheus metrics collection for fda-device-importer

This module provides metrics instrumentation for monitoring
fetch volume, record quality, warehouse writes and export size.
"""
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# FETCH METRICS
# =======================

records_fetched_total = Counter(
    name="importer_records_fetched_total",
    documentation="Total number of raw records fetched from the device API",
    labelnames=["category"],
    registry=REGISTRY,
)

fetch_requests_total = Counter(
    name="importer_fetch_requests_total",
    documentation="Total number of page requests sent to the device API",
    labelnames=["category", "status"],  # status: success, failure
    registry=REGISTRY,
)

# =======================
# TRANSFORM METRICS
# =======================

records_transformed_total = Counter(
    name="importer_records_transformed_total",
    documentation="Total number of raw records mapped to devices or dropped",
    labelnames=["category", "status"],  # status: mapped, dropped
    registry=REGISTRY,
)

# =======================
# WAREHOUSE METRICS
# =======================

warehouse_writes_total = Counter(
    name="importer_warehouse_writes_total",
    documentation="Total number of device rows offered to the warehouse",
    labelnames=["outcome"],  # outcome: added, skipped
    registry=REGISTRY,
)

warehouse_errors_total = Counter(
    name="importer_warehouse_errors_total",
    documentation="Total number of failed bulk inserts",
    registry=REGISTRY,
)

warehouse_write_duration_seconds = Histogram(
    name="importer_warehouse_write_duration_seconds",
    documentation="Time spent writing a device batch in seconds",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0],
    registry=REGISTRY,
)

# =======================
# EXPORT METRICS
# =======================

exported_records = Gauge(
    name="importer_exported_records",
    documentation="Number of records written by the last export",
    registry=REGISTRY,
)

# =======================
# PIPELINE METRICS
# =======================

pipeline_runs_total = Counter(
    name="importer_pipeline_runs_total",
    documentation="Total number of pipeline runs",
    labelnames=["trigger", "status"],  # trigger: cli, http
    registry=REGISTRY,
)

pipeline_duration_seconds = Histogram(
    name="importer_pipeline_duration_seconds",
    documentation="Time spent on a full pipeline run in seconds",
    labelnames=["trigger"],
    buckets=[1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """Content type for the Prometheus exposition format"""
    return CONTENT_TYPE_LATEST


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(pipeline_duration_seconds, trigger="cli"):
            # do work
            pass
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        metric = self.histogram.labels(**self.labels) if self.labels else self.histogram
        self.timer = metric.time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    """
    Set a gauge metric value

    Args:
        gauge: Prometheus Gauge metric
        value: Value to set
        **labels: Label values for the metric
    """
    if labels:
        gauge.labels(**labels).set(value)
    else:
        gauge.set(value)


def record_store_outcome(added: int, skipped: int) -> None:
    """
    Record the outcome of one bulk insert.

    Args:
        added: Rows inserted
        skipped: Rows ignored because the key already existed
    """
    if added:
        increment_counter(warehouse_writes_total, added, outcome="added")
    if skipped:
        increment_counter(warehouse_writes_total, skipped, outcome="skipped")
