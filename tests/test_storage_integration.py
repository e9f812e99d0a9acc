"""
Integration tests for the PostgreSQL storage layer.

These tests require a running PostgreSQL server reachable with the
POSTGRES_* settings. They are skipped unless RELTS_TEST_POSTGRES=1.

Run with: RELTS_TEST_POSTGRES=1 pytest tests/test_storage_integration.py -v
"""

import os
from uuid import uuid4

import pytest
import pytest_asyncio

from relts.config import DatabaseSettings
from relts.storage.interfaces import NotFoundError
from relts.storage.postgres import PostgreSQLConnectionPool, TableNames
from relts.timeseries import TimeSeries
from relts.types import ValueKind
from tests.fixtures import minute, populate

pytestmark = pytest.mark.skipif(
    os.getenv("RELTS_TEST_POSTGRES") != "1",
    reason="PostgreSQL integration tests disabled (set RELTS_TEST_POSTGRES=1)",
)

VAL_TYPES = {
    ValueKind.FLOAT: "DOUBLE PRECISION",
    ValueKind.INTEGER: "BIGINT",
    ValueKind.TEXT: "TEXT",
}


def schema_statements(tables: TableNames, value_kind: ValueKind, name_collation=None):
    val_type = VAL_TYPES[value_kind]
    collate = f" COLLATE {name_collation}" if name_collation else ""
    return [
        f"""
        CREATE TABLE {tables.locations} (
            id SERIAL PRIMARY KEY,
            name VARCHAR(128){collate} NOT NULL UNIQUE,
            details TEXT
        )
        """,
        f"""
        CREATE TABLE {tables.parameters} (
            id SERIAL PRIMARY KEY,
            name VARCHAR(128){collate} NOT NULL UNIQUE,
            unit VARCHAR(128),
            details TEXT
        )
        """,
        f"""
        CREATE TABLE {tables.values} (
            "timestamp" BIGINT NOT NULL,
            location_id INTEGER NOT NULL REFERENCES {tables.locations} (id),
            parameter_id INTEGER NOT NULL REFERENCES {tables.parameters} (id),
            val {val_type},
            PRIMARY KEY ("timestamp", location_id, parameter_id)
        )
        """,
        f"""
        CREATE TABLE {tables.latest_values} (
            location_id INTEGER NOT NULL REFERENCES {tables.locations} (id),
            parameter_id INTEGER NOT NULL REFERENCES {tables.parameters} (id),
            "timestamp" BIGINT NOT NULL,
            val {val_type},
            PRIMARY KEY (location_id, parameter_id)
        )
        """,
    ]


# ============================================================================
# Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def db_pool():
    """Create database connection pool."""
    manager = PostgreSQLConnectionPool(DatabaseSettings.from_env())
    pool = await manager.connect()
    yield pool
    await manager.close()


async def make_series(
    pool, value_kind=ValueKind.FLOAT, consistent_latest=False, name_collation=None
):
    name = f"it{uuid4().hex[:12]}"
    tables = TableNames(name)
    for statement in schema_statements(tables, value_kind, name_collation):
        await pool.execute(statement)

    series = TimeSeries.for_postgres(
        name,
        pool,
        value_kind=value_kind,
        table_prefix="ts_",
        consistent_latest=consistent_latest,
        cache_enabled=True,
    )
    return series, tables


async def drop_tables(pool, tables: TableNames):
    await pool.execute(
        f"DROP TABLE IF EXISTS {tables.latest_values}, {tables.values}, "
        f"{tables.parameters}, {tables.locations}"
    )


@pytest_asyncio.fixture
async def series(db_pool):
    """Create a float series on fresh tables."""
    series, tables = await make_series(db_pool)
    yield series
    await drop_tables(db_pool, tables)


@pytest_asyncio.fixture
async def consistent_series(db_pool):
    """Create a float series writing latest values transactionally."""
    series, tables = await make_series(db_pool, consistent_latest=True)
    yield series
    await drop_tables(db_pool, tables)


# ============================================================================
# Dictionary Tests
# ============================================================================


@pytest.mark.asyncio
async def test_dictionary_roundtrip(series):
    """Test creating and updating locations and parameters."""
    await series.create_location("testlocation2", {"key": "value"})
    await series.create_location("testlocation")
    await series.create_parameter("testparameter1", "unit1", {"key1": "value1"})
    await series.create_parameter("testparameter1", "unit1_updated")

    locations = await series.get_locations()
    parameters = await series.get_parameters()

    assert list(locations) == ["testlocation", "testlocation2"]
    assert locations["testlocation2"].details == {"key": "value"}
    assert parameters["testparameter1"].unit == "unit1_updated"
    assert parameters["testparameter1"].details == {}


# ============================================================================
# Value Tests
# ============================================================================


@pytest.mark.asyncio
async def test_range_and_latest(series):
    """Test the sample series end to end against PostgreSQL."""
    await populate(series)

    values = await series.range(locations="here", parameters="aaa")
    assert [v.timestamp for v in values] == [minute(n) for n in range(5)]

    await series.insert("here", "aaa", minute(0), -1.0)
    latest = await series.latest(locations="here", parameters="aaa")
    assert (latest[0].timestamp, latest[0].value) == (minute(4), -3.0)

    values = await series.range(start=minute(1), end=minute(1))
    assert [(v.location, v.parameter) for v in values] == [
        ("here", "aaa"),
        ("there", "aaa"),
        ("there", "bbb"),
    ]


@pytest.mark.asyncio
async def test_consistent_latest(consistent_series):
    await populate(consistent_series)

    latest = await consistent_series.latest()

    assert [(v.location, v.parameter, v.value) for v in latest] == [
        ("here", "aaa", -3.0),
        ("there", "aaa", 1.49),
        ("there", "bbb", 1.51),
    ]


@pytest.mark.asyncio
async def test_delete_older_than(series):
    await populate(series)

    assert await series.delete_older_than(minute(3)) is True

    values = await series.range()
    assert [v.timestamp for v in values] == [minute(3), minute(4)]
    assert len(await series.latest()) == 3


@pytest.mark.asyncio
async def test_strict_query_raises(series):
    await populate(series)

    with pytest.raises(NotFoundError):
        await series.range(locations="nowhere", fail_silently=False)


@pytest.mark.asyncio
async def test_text_values(db_pool):
    series, tables = await make_series(db_pool, ValueKind.TEXT)
    try:
        await series.create_location("here")
        await series.create_parameter("sky")
        await series.insert("here", "sky", minute(0), "cloudy")
        await series.insert("here", "sky", minute(1), "sunny")

        latest = await series.latest()
        assert latest[0].value == "sunny"
    finally:
        await drop_tables(db_pool, tables)


# ============================================================================
# Collation Tests
# ============================================================================


@pytest.mark.asyncio
async def test_case_insensitive_collation_updates_stored_name(db_pool):
    """Test a case variant under a nondeterministic ICU collation on name."""
    await db_pool.execute(
        "CREATE COLLATION IF NOT EXISTS relts_case_insensitive "
        "(provider = icu, locale = 'und-u-ks-level2', deterministic = false)"
    )
    series, tables = await make_series(db_pool, name_collation="relts_case_insensitive")
    try:
        await series.create_location("here", {"where": "not there"})
        await series.create_location("Here", {"where": "elsewhere"})

        locations = await series.get_locations()
        assert list(locations) == ["here"]
        assert await series.locations.get("Here") is None
        assert locations["here"].details == {"where": "elsewhere"}
    finally:
        await drop_tables(db_pool, tables)
