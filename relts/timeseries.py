"""
Time series facade.

Wires the two dictionaries, the value store and the query engine of one
time series together over a shared set of repositories.
"""

import logging
from typing import Any, Dict, List, Optional

from asyncpg import Pool

from relts.config import get_timeseries_config
from relts.dictionary import Dictionary
from relts.query import QueryEngine
from relts.resolver import NameFilter
from relts.storage.interfaces import DictionaryRepository, ValueRepository
from relts.storage.postgres import (
    PostgreSQLLocationRepository,
    PostgreSQLParameterRepository,
    PostgreSQLValueRepository,
    TableNames,
    normalize_series_name,
)
from relts.types import Entry, LatestValue, Value, ValueKind
from relts.values import ValueStore

logger = logging.getLogger(__name__)


class TimeSeries:
    """
    One named time series: locations, parameters, values and latest values.

    Example:
        ```python
        pool = await PostgreSQLConnectionPool().connect()
        series = TimeSeries.for_postgres("weather", pool)

        await series.create_location("here", {"where": "not there"})
        await series.create_parameter("aaa", unit="mm")
        await series.insert("here", "aaa", 1514764800, 1.0)

        values = await series.range(start=1514764800)
        ```
    """

    def __init__(
        self,
        name: str,
        location_repository: DictionaryRepository,
        parameter_repository: DictionaryRepository,
        value_repository: ValueRepository,
        value_kind: ValueKind = ValueKind.FLOAT,
        cache_enabled: bool = True,
    ):
        self.name = normalize_series_name(name)
        self.value_kind = value_kind

        self.locations = Dictionary(location_repository, self.name, cache_enabled)
        self.parameters = Dictionary(parameter_repository, self.name, cache_enabled)
        self.values = ValueStore(
            self.locations, self.parameters, value_repository, value_kind, self.name
        )
        self.query = QueryEngine(self.locations, self.parameters, value_repository)

    @classmethod
    def for_postgres(
        cls,
        name: str,
        pool: Pool,
        value_kind: Optional[ValueKind] = None,
        table_prefix: Optional[str] = None,
        consistent_latest: Optional[bool] = None,
        cache_enabled: Optional[bool] = None,
    ) -> "TimeSeries":
        """
        Build a time series on PostgreSQL tables.

        Options left as None are taken from the RELTS_* settings.

        Args:
            name: Series name; characters outside [A-Za-z0-9_-] are dropped
            pool: asyncpg connection pool
            value_kind: Scalar kind of the value columns
            table_prefix: Prefix of the physical table names
            consistent_latest: Write fact and latest value in one transaction
            cache_enabled: Cache dictionaries between writes
        """
        config = get_timeseries_config()
        if value_kind is None:
            value_kind = ValueKind(config["value_kind"])
        if table_prefix is None:
            table_prefix = config["table_prefix"]
        if consistent_latest is None:
            consistent_latest = config["consistent_latest"]
        if cache_enabled is None:
            cache_enabled = config["dictionary_cache"]

        tables = TableNames(normalize_series_name(name), table_prefix)
        logger.debug(f"Using tables {tables.locations}, {tables.parameters}, {tables.values}, {tables.latest_values}")

        return cls(
            name,
            PostgreSQLLocationRepository(pool, tables),
            PostgreSQLParameterRepository(pool, tables),
            PostgreSQLValueRepository(pool, tables, value_kind, consistent_latest),
            value_kind=value_kind,
            cache_enabled=cache_enabled,
        )

    async def create_location(self, name: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Create or update a location."""
        await self.locations.upsert(name, details)

    async def create_parameter(
        self,
        name: str,
        unit: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Create or update a parameter."""
        await self.parameters.upsert(name, details, unit=unit)

    async def get_locations(self) -> Dict[str, Entry]:
        return await self.locations.all()

    async def get_parameters(self) -> Dict[str, Entry]:
        return await self.parameters.all()

    async def insert(
        self,
        location: str,
        parameter: str,
        timestamp: int,
        value: Any,
        fail_silently: bool = False,
    ) -> bool:
        """See :meth:`ValueStore.insert`."""
        return await self.values.insert(location, parameter, timestamp, value, fail_silently)

    async def range(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        locations: NameFilter = None,
        parameters: NameFilter = None,
        fail_silently: bool = True,
    ) -> List[Value]:
        """See :meth:`QueryEngine.range`."""
        return await self.query.range(start, end, locations, parameters, fail_silently)

    async def latest(
        self,
        locations: NameFilter = None,
        parameters: NameFilter = None,
        fail_silently: bool = True,
        min_timestamp: Optional[int] = None,
    ) -> List[LatestValue]:
        """See :meth:`QueryEngine.latest`."""
        return await self.query.latest(locations, parameters, fail_silently, min_timestamp)

    async def delete_older_than(self, timestamp: int) -> bool:
        """See :meth:`ValueStore.delete_older_than`."""
        return await self.values.delete_older_than(timestamp)
