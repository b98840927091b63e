"""
Prometheus metrics collection for retail-import

Import runs are short-lived batch jobs, so metrics live in a dedicated
registry that can be dumped to a node-exporter textfile after the run.
"""
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    write_to_textfile,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# PIPELINE METRICS
# =======================

import_runs_total = Counter(
    name="retail_import_runs_total",
    documentation="Total number of import runs",
    labelnames=["status"],  # status: success, error
    registry=REGISTRY,
)

rows_staged_total = Counter(
    name="retail_import_rows_staged_total",
    documentation="Total number of CSV rows written to the staging table",
    registry=REGISTRY,
)

records_loaded_total = Counter(
    name="retail_import_records_loaded_total",
    documentation="Total number of sales records written to the target table",
    registry=REGISTRY,
)

import_duration_seconds = Histogram(
    name="retail_import_duration_seconds",
    documentation="Wall-clock duration of a full import run in seconds",
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

values_nulled_total = Counter(
    name="retail_import_values_nulled_total",
    documentation="Typed values stored as NULL, by column and reason",
    labelnames=["column", "reason"],  # reason: empty, unparseable
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def export_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def write_metrics_file(path: str) -> None:
    """Write the current metrics to a textfile-collector file."""
    write_to_textfile(path, REGISTRY)


def record_null_counts(empty_values: dict[str, int], unparseable_values: dict[str, int]) -> None:
    """
    Record how many typed values were nulled per column.

    Args:
        empty_values: Column name -> count of empty cells
        unparseable_values: Column name -> count of cells that failed to parse
    """
    for column, count in empty_values.items():
        if count:
            values_nulled_total.labels(column=column, reason="empty").inc(count)
    for column, count in unparseable_values.items():
        if count:
            values_nulled_total.labels(column=column, reason="unparseable").inc(count)


def record_import_run(status: str, duration_seconds: float) -> None:
    """Record the outcome and duration of one import run."""
    import_runs_total.labels(status=status).inc()
    import_duration_seconds.observe(duration_seconds)
