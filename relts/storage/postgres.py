"""
PostgreSQL repository implementations.

This module provides asyncpg-based implementations of the dictionary and
value repositories. Every time series lives in its own set of tables whose
names are derived from the sanitized series name.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

import asyncpg
from asyncpg import Pool

from relts.config import DatabaseSettings
from relts.observability.metrics import track_db_query
from relts.storage.interfaces import (
    BaseDictionaryRepository,
    BaseValueRepository,
    ConnectionError,
    IntegrityError,
    StorageError,
)
from relts.types import (
    Entry,
    EntryKind,
    Fact,
    LatestValue,
    Location,
    Parameter,
    Scalar,
    Value,
    ValueKind,
)

logger = logging.getLogger(__name__)

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


# ============================================================================
# Connection Pool Management
# ============================================================================


class PostgreSQLConnectionPool:
    """
    Manages PostgreSQL connection pool lifecycle.

    One pool is shared by all repositories of all time series of a process.
    """

    def __init__(self, settings: Optional[DatabaseSettings] = None):
        """
        Initialize connection pool configuration.

        Args:
            settings: Connection settings (read from the environment if omitted)
        """
        self.settings = settings or DatabaseSettings.from_env()
        self._pool: Optional[Pool] = None

    async def connect(self) -> Pool:
        """
        Create and return a connection pool.

        Returns:
            asyncpg connection pool

        Raises:
            ConnectionError: If connection fails
        """
        if self._pool is not None:
            return self._pool

        s = self.settings
        try:
            self._pool = await asyncpg.create_pool(
                host=s.host,
                port=s.port,
                database=s.database,
                user=s.user,
                password=s.password,
                min_size=s.min_size,
                max_size=s.max_size,
                command_timeout=s.command_timeout,
            )
            logger.info(f"PostgreSQL connection pool created: {s.host}:{s.port}/{s.database}")
            return self._pool
        except Exception as e:
            logger.error(f"Failed to create connection pool: {e}")
            raise ConnectionError(f"Database connection failed: {e}", operation="connect") from e

    async def close(self):
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("PostgreSQL connection pool closed")

    @property
    def pool(self) -> Optional[Pool]:
        """Get the current pool instance."""
        return self._pool


# ============================================================================
# Table Naming
# ============================================================================


def normalize_series_name(name: str) -> str:
    """
    Strip every character outside [A-Za-z0-9_-] from a series name.

    Raises:
        ValueError: If nothing is left
    """
    cleaned = _INVALID_NAME_CHARS.sub("", name)
    if not cleaned:
        raise ValueError(f"Time series name {name!r} contains no usable characters")
    return cleaned


def quote_ident(identifier: str) -> str:
    """Quote an SQL identifier."""
    return '"' + identifier.replace('"', '""') + '"'


class TableNames:
    """Quoted physical table names of one time series namespace."""

    def __init__(self, namespace: str, prefix: str = "ts_"):
        self.namespace = namespace
        base = f"{prefix}{namespace}"
        self.locations = quote_ident(f"{base}_locations")
        self.parameters = quote_ident(f"{base}_parameters")
        self.values = quote_ident(f"{base}_values")
        self.latest_values = quote_ident(f"{base}_latest_values")

    def __repr__(self) -> str:
        return f"TableNames({self.namespace!r})"


# ============================================================================
# Helper Functions
# ============================================================================


def _details_to_json(details: Dict[str, Any]) -> str:
    """Serialize a details map for the text column."""
    return json.dumps(details)


def _json_to_details(raw: Any) -> Dict[str, Any]:
    """Deserialize a details column, tolerating NULL and jsonb columns."""
    if raw is None:
        return {}
    if isinstance(raw, str):
        return json.loads(raw) if raw else {}
    return raw


def _decode_scalar(raw: Any, kind: ValueKind) -> Optional[Scalar]:
    """Convert a driver value (e.g. Decimal for NUMERIC columns) to the series kind."""
    if raw is None:
        return None
    if kind is ValueKind.TEXT:
        return str(raw)
    if kind is ValueKind.INTEGER:
        return int(raw)
    return float(raw)


def _row_to_location(row: asyncpg.Record) -> Location:
    """Convert database row to Location object."""
    return Location(
        id=row["id"],
        name=row["name"],
        details=_json_to_details(row["details"]),
    )


def _row_to_parameter(row: asyncpg.Record) -> Parameter:
    """Convert database row to Parameter object."""
    return Parameter(
        id=row["id"],
        name=row["name"],
        unit=row["unit"],
        details=_json_to_details(row["details"]),
    )


def _storage_error(operation: str, e: Exception) -> StorageError:
    """Wrap a driver exception into the storage exception hierarchy."""
    if isinstance(e, (asyncpg.UniqueViolationError, asyncpg.ForeignKeyViolationError)):
        return IntegrityError(f"Failed to {operation}: {e}", operation=operation)
    return StorageError(f"Failed to {operation}: {e}", operation=operation)


# ============================================================================
# Dictionary Repositories
# ============================================================================


class PostgreSQLLocationRepository(BaseDictionaryRepository):
    """PostgreSQL implementation of the location dictionary."""

    kind = EntryKind.LOCATION

    def __init__(self, pool: Pool, tables: TableNames):
        """
        Initialize repository with a connection pool.

        Args:
            pool: asyncpg connection pool
            tables: Table names of the time series
        """
        self.pool = pool
        self.tables = tables

    @track_db_query("INSERT", "locations")
    async def upsert(self, entry: Entry) -> None:
        try:
            query = f"""
                INSERT INTO {self.tables.locations} (name, details)
                VALUES ($1, $2)
                ON CONFLICT (name) DO UPDATE SET
                    details = EXCLUDED.details
            """
            await self.pool.execute(query, entry.name, _details_to_json(entry.details))
            logger.debug(f"Saved location '{entry.name}' in {self.tables.namespace}")

        except Exception as e:
            logger.error(f"Failed to save location '{entry.name}': {e}")
            raise _storage_error("save location", e) from e

    @track_db_query("SELECT", "locations")
    async def fetch_all(self) -> List[Location]:
        try:
            query = f"SELECT id, name, details FROM {self.tables.locations}"
            rows = await self.pool.fetch(query)
            return [_row_to_location(row) for row in rows]

        except Exception as e:
            logger.error(f"Failed to load locations: {e}")
            raise _storage_error("load locations", e) from e


class PostgreSQLParameterRepository(BaseDictionaryRepository):
    """PostgreSQL implementation of the parameter dictionary."""

    kind = EntryKind.PARAMETER

    def __init__(self, pool: Pool, tables: TableNames):
        """
        Initialize repository with a connection pool.

        Args:
            pool: asyncpg connection pool
            tables: Table names of the time series
        """
        self.pool = pool
        self.tables = tables

    @track_db_query("INSERT", "parameters")
    async def upsert(self, entry: Entry) -> None:
        try:
            query = f"""
                INSERT INTO {self.tables.parameters} (name, unit, details)
                VALUES ($1, $2, $3)
                ON CONFLICT (name) DO UPDATE SET
                    unit = EXCLUDED.unit,
                    details = EXCLUDED.details
            """
            await self.pool.execute(
                query,
                entry.name,
                getattr(entry, "unit", None),
                _details_to_json(entry.details),
            )
            logger.debug(f"Saved parameter '{entry.name}' in {self.tables.namespace}")

        except Exception as e:
            logger.error(f"Failed to save parameter '{entry.name}': {e}")
            raise _storage_error("save parameter", e) from e

    @track_db_query("SELECT", "parameters")
    async def fetch_all(self) -> List[Parameter]:
        try:
            query = f"SELECT id, name, unit, details FROM {self.tables.parameters}"
            rows = await self.pool.fetch(query)
            return [_row_to_parameter(row) for row in rows]

        except Exception as e:
            logger.error(f"Failed to load parameters: {e}")
            raise _storage_error("load parameters", e) from e


# ============================================================================
# Value Repository
# ============================================================================


class PostgreSQLValueRepository(BaseValueRepository):
    """
    PostgreSQL implementation of the value history and latest-value index.

    Both tables are keyed by dictionary ids; names are joined in on read.
    """

    def __init__(
        self,
        pool: Pool,
        tables: TableNames,
        value_kind: ValueKind = ValueKind.FLOAT,
        consistent_latest: bool = False,
    ):
        """
        Initialize repository with a connection pool.

        Args:
            pool: asyncpg connection pool
            tables: Table names of the time series
            value_kind: Scalar kind of the val columns
            consistent_latest: Run the fact and latest upserts in one transaction
        """
        self.pool = pool
        self.tables = tables
        self.value_kind = value_kind
        self.consistent_latest = consistent_latest

    @property
    def _upsert_value_query(self) -> str:
        return f"""
            INSERT INTO {self.tables.values} ("timestamp", location_id, parameter_id, val)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT ("timestamp", location_id, parameter_id) DO UPDATE SET
                val = EXCLUDED.val
        """

    @property
    def _upsert_latest_query(self) -> str:
        # The WHERE clause keeps the comparison inside the statement so
        # concurrent writers cannot replace a newer entry with an older one.
        return f"""
            INSERT INTO {self.tables.latest_values} AS latest
                (location_id, parameter_id, "timestamp", val)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (location_id, parameter_id) DO UPDATE SET
                "timestamp" = EXCLUDED."timestamp",
                val = EXCLUDED.val
            WHERE latest."timestamp" <= EXCLUDED."timestamp"
        """

    @track_db_query("INSERT", "values")
    async def save(self, fact: Fact) -> None:
        try:
            value_args = (fact.timestamp, fact.location_id, fact.parameter_id, fact.value)
            latest_args = (fact.location_id, fact.parameter_id, fact.timestamp, fact.value)

            if self.consistent_latest:
                async with self.pool.acquire() as conn:
                    async with conn.transaction():
                        await conn.execute(self._upsert_value_query, *value_args)
                        await conn.execute(self._upsert_latest_query, *latest_args)
            else:
                await self.pool.execute(self._upsert_value_query, *value_args)
                await self.pool.execute(self._upsert_latest_query, *latest_args)

            logger.debug(
                f"Saved value {fact.value!r} at {fact.timestamp} "
                f"(loc={fact.location_id}, par={fact.parameter_id}) in {self.tables.namespace}"
            )

        except Exception as e:
            logger.error(f"Failed to save value at {fact.timestamp}: {e}")
            raise _storage_error("insert value", e) from e

    @track_db_query("DELETE", "values")
    async def delete_older_than(self, timestamp: int) -> int:
        try:
            query = f'DELETE FROM {self.tables.values} WHERE "timestamp" < $1'
            result = await self.pool.execute(query, timestamp)
            deleted = int(result.split()[-1])

            logger.info(f"Deleted {deleted} values older than {timestamp} from {self.tables.namespace}")
            return deleted

        except Exception as e:
            logger.error(f"Failed to delete values older than {timestamp}: {e}")
            raise _storage_error("delete values", e) from e

    @track_db_query("SELECT", "values")
    async def fetch_range(
        self,
        start: Optional[int],
        end: Optional[int],
        location_ids: Sequence[int],
        parameter_ids: Sequence[int],
    ) -> List[Value]:
        try:
            conditions = []
            params: List[Any] = []
            param_count = 0

            if start is not None:
                param_count += 1
                conditions.append(f'v."timestamp" >= ${param_count}')
                params.append(start)

            if end is not None:
                param_count += 1
                conditions.append(f'v."timestamp" <= ${param_count}')
                params.append(end)

            param_count += 1
            conditions.append(f"v.location_id = ANY(${param_count}::int[])")
            params.append(list(location_ids))

            param_count += 1
            conditions.append(f"v.parameter_id = ANY(${param_count}::int[])")
            params.append(list(parameter_ids))

            where_clause = " AND ".join(conditions)
            query = f"""
                SELECT v."timestamp", l.name AS location, p.name AS parameter, v.val
                FROM {self.tables.values} v
                JOIN {self.tables.locations} l ON v.location_id = l.id
                JOIN {self.tables.parameters} p ON v.parameter_id = p.id
                WHERE {where_clause}
                ORDER BY v."timestamp" ASC, l.name COLLATE "C" ASC, p.name COLLATE "C" ASC
            """

            rows = await self.pool.fetch(query, *params)
            return [
                Value(
                    timestamp=row["timestamp"],
                    location=row["location"],
                    parameter=row["parameter"],
                    value=_decode_scalar(row["val"], self.value_kind),
                )
                for row in rows
            ]

        except Exception as e:
            logger.error(f"Failed to fetch values: {e}")
            raise _storage_error("fetch values", e) from e

    @track_db_query("SELECT", "latest_values")
    async def fetch_latest(
        self,
        location_ids: Sequence[int],
        parameter_ids: Sequence[int],
        min_timestamp: Optional[int] = None,
    ) -> List[LatestValue]:
        try:
            conditions = [
                "lv.location_id = ANY($1::int[])",
                "lv.parameter_id = ANY($2::int[])",
            ]
            params: List[Any] = [list(location_ids), list(parameter_ids)]

            if min_timestamp is not None:
                conditions.append('lv."timestamp" >= $3')
                params.append(min_timestamp)

            where_clause = " AND ".join(conditions)
            query = f"""
                SELECT lv."timestamp", l.name AS location, p.name AS parameter, lv.val
                FROM {self.tables.latest_values} lv
                JOIN {self.tables.locations} l ON lv.location_id = l.id
                JOIN {self.tables.parameters} p ON lv.parameter_id = p.id
                WHERE {where_clause}
                ORDER BY l.name COLLATE "C" ASC, p.name COLLATE "C" ASC
            """

            rows = await self.pool.fetch(query, *params)
            return [
                LatestValue(
                    timestamp=row["timestamp"],
                    location=row["location"],
                    parameter=row["parameter"],
                    value=_decode_scalar(row["val"], self.value_kind),
                )
                for row in rows
            ]

        except Exception as e:
            logger.error(f"Failed to fetch latest values: {e}")
            raise _storage_error("fetch latest values", e) from e
