"""
Storage layer interface contracts.

This module defines the Protocol classes that storage backends implement for
the dictionaries (locations, parameters) and for the value tables, together
with the storage exception hierarchy.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Protocol, Sequence

from relts.types import Entry, EntryKind, Fact, LatestValue, Value


# ============================================================================
# Repository Interfaces (Protocol-based for type checking)
# ============================================================================


class DictionaryRepository(Protocol):
    """Interface for location/parameter dictionary persistence."""

    kind: EntryKind

    async def upsert(self, entry: Entry) -> None:
        """
        Create an entry or replace the stored one with the same name.

        Args:
            entry: The entry to store (its id is ignored)

        Raises:
            StorageError: If the write fails
        """
        ...

    async def fetch_all(self) -> List[Entry]:
        """
        Read every entry of the dictionary.

        Returns:
            All entries, with their ids set
        """
        ...


class ValueRepository(Protocol):
    """Interface for value history and latest-value index persistence."""

    async def save(self, fact: Fact) -> None:
        """
        Upsert a fact and fold it into the latest-value index.

        The latest entry for the fact's location and parameter is replaced
        only when the fact's timestamp is not older than the stored one.

        Args:
            fact: The fact to store

        Raises:
            StorageError: If either write fails
        """
        ...

    async def delete_older_than(self, timestamp: int) -> int:
        """
        Delete every fact with a timestamp strictly below the given one.

        Args:
            timestamp: Exclusive lower bound of the facts to keep

        Returns:
            Number of deleted facts
        """
        ...

    async def fetch_range(
        self,
        start: Optional[int],
        end: Optional[int],
        location_ids: Sequence[int],
        parameter_ids: Sequence[int],
    ) -> List[Value]:
        """
        Fetch facts joined with their names.

        Args:
            start: Inclusive lower timestamp bound (None = unbounded)
            end: Inclusive upper timestamp bound (None = unbounded)
            location_ids: Locations to include
            parameter_ids: Parameters to include

        Returns:
            Values ordered by timestamp, location name and parameter name
        """
        ...

    async def fetch_latest(
        self,
        location_ids: Sequence[int],
        parameter_ids: Sequence[int],
        min_timestamp: Optional[int] = None,
    ) -> List[LatestValue]:
        """
        Fetch entries of the latest-value index.

        Args:
            location_ids: Locations to include
            parameter_ids: Parameters to include
            min_timestamp: Optional inclusive lower timestamp bound

        Returns:
            Latest values ordered by location name and parameter name
        """
        ...


# ============================================================================
# Abstract Base Classes (for implementations)
# ============================================================================


class BaseDictionaryRepository(ABC):
    """Abstract base class for dictionary repository implementations."""

    kind: EntryKind

    @abstractmethod
    async def upsert(self, entry: Entry) -> None:
        pass

    @abstractmethod
    async def fetch_all(self) -> List[Entry]:
        pass


class BaseValueRepository(ABC):
    """Abstract base class for value repository implementations."""

    @abstractmethod
    async def save(self, fact: Fact) -> None:
        pass

    @abstractmethod
    async def delete_older_than(self, timestamp: int) -> int:
        pass

    @abstractmethod
    async def fetch_range(
        self,
        start: Optional[int],
        end: Optional[int],
        location_ids: Sequence[int],
        parameter_ids: Sequence[int],
    ) -> List[Value]:
        pass

    @abstractmethod
    async def fetch_latest(
        self,
        location_ids: Sequence[int],
        parameter_ids: Sequence[int],
        min_timestamp: Optional[int] = None,
    ) -> List[LatestValue]:
        pass


# ============================================================================
# Exceptions
# ============================================================================


class StorageError(Exception):
    """Base exception for storage operations."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class ConnectionError(StorageError):
    """Exception for connection failures."""

    pass


class IntegrityError(StorageError):
    """Exception for data integrity violations."""

    pass


class NotFoundError(StorageError):
    """Exception when a location or parameter name is unknown."""

    def __init__(self, kind: EntryKind, name: str):
        super().__init__(f"Unknown {kind.value}: '{name}'", operation="resolve")
        self.kind = kind
        self.name = name
