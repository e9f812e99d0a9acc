"""
Prometheus metrics for the time series store.

This module defines and exports metrics for:
- Database statement latencies per operation and table
- Inserted values per series and outcome
- Dictionary cache reloads
"""

import time
from functools import wraps
from typing import Callable

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


metrics_registry = CollectorRegistry()


# ============================================================================
# Database Metrics
# ============================================================================

db_query_duration = Histogram(
    "relts_db_query_duration_seconds",
    "Database statement duration in seconds",
    ["operation", "table"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=metrics_registry,
)

# ============================================================================
# Store Metrics
# ============================================================================

values_inserted_counter = Counter(
    "relts_values_inserted_total",
    "Number of insert calls by outcome",
    ["series", "outcome"],  # outcome: stored, skipped
    registry=metrics_registry,
)

dictionary_cache_reloads_counter = Counter(
    "relts_dictionary_cache_reloads_total",
    "Number of full dictionary scans caused by cache misses",
    ["series", "kind"],
    registry=metrics_registry,
)


# ============================================================================
# Decorator Functions for Auto-Instrumentation
# ============================================================================

def track_db_query(operation: str, table: str):
    """
    Decorator to track database statement latency.

    The table label is a logical table name (locations, parameters, values,
    latest_values), not the namespaced physical one.

    Args:
        operation: Type of operation (SELECT, INSERT, DELETE)
        table: Logical table name

    Example:
        @track_db_query("SELECT", "values")
        async def fetch_range(self, ...):
            pass
    """
    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()

            try:
                return await func(*args, **kwargs)

            finally:
                duration = time.time() - start_time
                db_query_duration.labels(
                    operation=operation,
                    table=table,
                ).observe(duration)

        return wrapper
    return decorator


# ============================================================================
# Helper Functions
# ============================================================================

def record_value_inserted(series: str, stored: bool):
    """
    Record the outcome of an insert call.

    Args:
        series: Time series namespace
        stored: Whether the value was written (False when silently skipped)
    """
    outcome = "stored" if stored else "skipped"
    values_inserted_counter.labels(series=series, outcome=outcome).inc()


def record_cache_reload(series: str, kind: str):
    """
    Record a full dictionary scan.

    Args:
        series: Time series namespace
        kind: Dictionary kind (location, parameter)
    """
    dictionary_cache_reloads_counter.labels(series=series, kind=kind).inc()


def get_metrics() -> bytes:
    """
    Get Prometheus metrics in text format.

    Returns:
        Metrics data in Prometheus text format
    """
    return generate_latest(metrics_registry)
