"""
Observability module for metrics and logging.

- Prometheus metrics for statement latency, inserts and cache reloads
- Structured (JSON) logging with scoped context
"""

from relts.observability.metrics import (
    metrics_registry,
    db_query_duration,
    values_inserted_counter,
    dictionary_cache_reloads_counter,
    track_db_query,
    record_value_inserted,
    record_cache_reload,
    get_metrics,
)

from relts.observability.logging import (
    setup_logging,
    get_logger,
    log_context,
)

__all__ = [
    # Metrics
    "metrics_registry",
    "db_query_duration",
    "values_inserted_counter",
    "dictionary_cache_reloads_counter",
    "track_db_query",
    "record_value_inserted",
    "record_cache_reload",
    "get_metrics",
    # Logging
    "setup_logging",
    "get_logger",
    "log_context",
]
