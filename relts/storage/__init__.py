"""
Storage layer for the relational time series store.

This package provides the repository interfaces and the PostgreSQL
implementations of the dictionary and value tables.
"""

# Interface exports
from relts.storage.interfaces import (
    DictionaryRepository,
    ValueRepository,
    StorageError,
    ConnectionError,
    IntegrityError,
    NotFoundError,
)

# Concrete implementations
from relts.storage.postgres import (
    PostgreSQLConnectionPool,
    PostgreSQLLocationRepository,
    PostgreSQLParameterRepository,
    PostgreSQLValueRepository,
    TableNames,
    normalize_series_name,
)

__all__ = [
    # Interfaces
    "DictionaryRepository",
    "ValueRepository",
    # Exceptions
    "StorageError",
    "ConnectionError",
    "IntegrityError",
    "NotFoundError",
    # PostgreSQL implementations
    "PostgreSQLConnectionPool",
    "PostgreSQLLocationRepository",
    "PostgreSQLParameterRepository",
    "PostgreSQLValueRepository",
    "TableNames",
    "normalize_series_name",
]
