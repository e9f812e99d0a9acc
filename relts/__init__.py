"""
Relational time series store.

Named locations and parameters, timestamped scalar values keyed by
(timestamp, location, parameter), an incrementally maintained latest-value
index, and helpers to reshape query results into wide tables.
"""

from relts.dictionary import Dictionary
from relts.query import QueryEngine
from relts.reshape import (
    from_table,
    per_location,
    tables_per_location,
    to_columns,
    to_table,
)
from relts.storage.interfaces import NotFoundError, StorageError
from relts.timeseries import TimeSeries
from relts.types import (
    EntryKind,
    LatestValue,
    Location,
    Parameter,
    ParameterReading,
    Value,
    ValueKind,
)
from relts.values import ValueStore

__version__ = "1.0.0"

__all__ = [
    "TimeSeries",
    "Dictionary",
    "ValueStore",
    "QueryEngine",
    "to_table",
    "to_columns",
    "per_location",
    "tables_per_location",
    "from_table",
    "NotFoundError",
    "StorageError",
    "EntryKind",
    "ValueKind",
    "Location",
    "Parameter",
    "Value",
    "LatestValue",
    "ParameterReading",
]
