"""
Name registries for the location and parameter dimensions.

A :class:`Dictionary` wraps a dictionary repository and owns a cache of the
complete name -> entry mapping. The cache is loaded by a full scan on the
first read, handed out unchanged until the next write through this
dictionary, and cleared (never patched) on every upsert. Writes made by other
processes are not seen until :meth:`Dictionary.invalidate` is called.

Names are compared case-sensitively here, whatever collation the backing
table uses for its unique constraint. Under a case-insensitive collation an
upsert of "Here" updates the stored "here" entry, which keeps its name.
"""

import logging
from typing import Any, Dict, Optional

from relts.observability.metrics import record_cache_reload
from relts.storage.interfaces import DictionaryRepository, NotFoundError
from relts.types import Entry, EntryKind, Location, Parameter

logger = logging.getLogger(__name__)


class Dictionary:
    """Name -> entry registry for one dimension of a time series."""

    def __init__(
        self,
        repository: DictionaryRepository,
        series: str = "",
        cache_enabled: bool = True,
    ):
        """
        Args:
            repository: Backend holding the entries
            series: Time series namespace (used for logs and metrics)
            cache_enabled: Keep the loaded mapping between writes
        """
        self._repository = repository
        self._cache: Optional[Dict[str, Entry]] = None
        self.series = series
        self.cache_enabled = cache_enabled

    @property
    def kind(self) -> EntryKind:
        return self._repository.kind

    async def upsert(
        self,
        name: str,
        details: Optional[Dict[str, Any]] = None,
        unit: Optional[str] = None,
    ) -> None:
        """
        Create an entry, or replace the details (and unit) of an existing one.

        Args:
            name: Entry name, 1 to 128 characters
            details: Free-form metadata, stored as is
            unit: Unit of a parameter; not allowed for locations

        Raises:
            ValueError: If the name or unit is invalid
            StorageError: If the write fails
        """
        if self.kind is EntryKind.PARAMETER:
            entry: Entry = Parameter(name=name, unit=unit, details=details or {})
        else:
            if unit is not None:
                raise ValueError("Locations have no unit")
            entry = Location(name=name, details=details or {})

        try:
            await self._repository.upsert(entry)
        finally:
            self.invalidate()

    async def all(self) -> Dict[str, Entry]:
        """
        Get every entry keyed by name, in name order.

        Returns:
            Mapping of name to entry
        """
        if self._cache is not None:
            return self._cache

        entries = await self._repository.fetch_all()
        loaded = {entry.name: entry for entry in sorted(entries, key=lambda e: e.name)}
        record_cache_reload(self.series, self.kind.value)
        logger.debug(f"Loaded {len(loaded)} {self.kind.value} entries for {self.series or 'series'}")

        if self.cache_enabled:
            self._cache = loaded
        return loaded

    async def get(self, name: str) -> Optional[Entry]:
        """Get an entry by name, or None if unknown."""
        entries = await self.all()
        return entries.get(name)

    async def resolve(self, name: str) -> Entry:
        """
        Get an entry by name.

        Raises:
            NotFoundError: If the name is unknown
        """
        entry = await self.get(name)
        if entry is None:
            raise NotFoundError(self.kind, name)
        return entry

    def invalidate(self) -> None:
        """Drop the cached mapping; the next read rescans the repository."""
        self._cache = None
