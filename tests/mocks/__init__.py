"""
Mock implementations for testing.

In-memory repositories that let the dictionaries, value store and query
engine run without a database.
"""

from tests.mocks.storage import (
    MockDictionaryRepository,
    MockValueRepository,
    broken_storage,
)

__all__ = [
    "MockDictionaryRepository",
    "MockValueRepository",
    "broken_storage",
]
