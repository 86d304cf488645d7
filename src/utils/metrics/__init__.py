"""
Prometheus metric helpers

dbdiff is a one-shot CLI, so metrics are not served over HTTP; they are
written in the Prometheus text format for node_exporter's textfile collector.

Usage:
    from utils.metrics import get_or_create_metric, write_metrics_file

    NEW_ROWS = get_or_create_metric(
        lambda: Counter("dbdiff_new_rows_total", "New rows found", ["table"]),
        "dbdiff_new_rows_total",
    )
    write_metrics_file("/var/lib/node_exporter/dbdiff.prom")
"""

import logging
import os
from collections.abc import Callable
from typing import TypeVar

from prometheus_client import REGISTRY, CollectorRegistry, write_to_textfile

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_or_create_metric(
    metric_factory: Callable[[], T],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> T:
    """
    Create a metric, or return the already registered one.

    Module reloads (and test collection) would otherwise fail with
    "Duplicated timeseries in CollectorRegistry".

    Args:
        metric_factory: Callable that creates the metric (e.g., lambda: Counter(...))
        metric_name: Name of the metric for lookup if already registered
        registry: Prometheus registry to use (default: global REGISTRY)

    Returns:
        The metric instance (either newly created or existing)
    """
    try:
        return metric_factory()
    except ValueError:
        existing = registry._names_to_collectors.get(metric_name)
        if existing is not None:
            return existing
        raise


def write_metrics_file(path: str, registry: CollectorRegistry = REGISTRY) -> None:
    """
    Write all metrics of ``registry`` to ``path`` in Prometheus text format.

    The file is written atomically (temp file + rename) by prometheus_client.
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    write_to_textfile(path, registry)
    logger.info(f"Metrics written to {path}")


__all__ = [
    "get_or_create_metric",
    "write_metrics_file",
]
