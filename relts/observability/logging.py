"""
Structured logging configuration for the time series store.

Provides JSON formatting and a context variable that attaches the active
time series (or any other key) to every record logged inside a scope.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional


log_context_var: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})


# ============================================================================
# JSON Formatter
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON objects with standard fields:
    - timestamp: ISO 8601 timestamp
    - level: Log level (INFO, WARNING, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - series: Time series bound with log_context (if any)
    - context: Values bound with log_context (if any)
    - extra: Any extra fields passed to the logger
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        ctx = log_context_var.get()
        if ctx:
            if ctx.get("series"):
                log_data["series"] = ctx["series"]
            log_data["context"] = ctx

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


# ============================================================================
# Logging Setup
# ============================================================================

def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = True,
):
    """
    Setup application logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for file logging
        json_format: Use JSON formatting (True) or plain text (False)

    Example:
        setup_logging(level="INFO", log_file="/var/log/relts.log", json_format=True)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s [%(name)s:%(lineno)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # asyncpg logs every notice at DEBUG
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.info(f"Logging configured: level={level}, json={json_format}, file={log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


# ============================================================================
# Context Management
# ============================================================================

class log_context:
    """
    Context manager for adding context to all log messages within a scope.

    Example:
        with log_context(series="weather", operation="insert"):
            logger.debug("Saved value")
            # JSON output carries series="weather" and the context map
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self.token = None

    def __enter__(self):
        current_context = log_context_var.get().copy()
        current_context.update(self.context)
        self.token = log_context_var.set(current_context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        log_context_var.reset(self.token)


# Setup logging from environment variables if available
if os.getenv("LOG_LEVEL"):
    setup_logging(
        level=os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("LOG_FILE"),
        json_format=os.getenv("LOG_JSON", "true").lower() == "true",
    )
