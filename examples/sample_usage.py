"""
Time Series Demo

This script demonstrates the store against a PostgreSQL database:
- Creating locations and parameters
- Inserting values out of timestamp order
- Range and latest-value queries
- Reshaping results into wide tables
- Deleting old values

The tables of the "demo" series (ts_demo_*) must already exist.
Connection settings are read from the POSTGRES_* environment variables.
"""

import asyncio
import logging
from datetime import datetime, timezone

from relts import TimeSeries, tables_per_location, to_table
from relts.storage import PostgreSQLConnectionPool

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

T0 = int(datetime(2018, 1, 1, tzinfo=timezone.utc).timestamp())


def minute(n: int) -> int:
    return T0 + 60 * n


async def demo_dictionaries(series: TimeSeries):
    """Demonstrate location and parameter dictionaries."""
    logger.info("=" * 60)
    logger.info("DICTIONARIES DEMO")
    logger.info("=" * 60)

    await series.create_location("here", {"where": "not there"})
    await series.create_location("there", {"where": "exactly there"})
    await series.create_parameter("aaa", "mm")
    await series.create_parameter("bbb", "potatoes")

    for name, location in (await series.get_locations()).items():
        logger.info(f"Location {name}: {location.details}")
    for name, parameter in (await series.get_parameters()).items():
        logger.info(f"Parameter {name} [{parameter.unit}]")


async def demo_values(series: TimeSeries):
    """Demonstrate inserts and queries."""
    logger.info("\n" + "=" * 60)
    logger.info("VALUES DEMO")
    logger.info("=" * 60)

    for n, value in [(0, 1.0), (4, -3.0), (2, 1.567), (3, 1.56789), (1, 1.5)]:
        await series.insert("here", "aaa", minute(n), value)
    await series.insert("there", "bbb", minute(1), 1.51)

    # Older value: history changes, latest does not
    await series.insert("here", "aaa", minute(0), -1.0)

    # Unknown names are skipped when failing silently
    stored = await series.insert("nowhere", "aaa", minute(0), 0.0, fail_silently=True)
    logger.info(f"Value for unknown location stored: {stored}")

    values = await series.range(start=minute(0), end=minute(2))
    logger.info(f"{len(values)} values between minute 0 and 2")

    for latest in await series.latest():
        logger.info(f"Latest {latest.location}/{latest.parameter}: {latest.value} at {latest.timestamp}")

    logger.info("\nWide table:")
    for row in to_table(await series.range()):
        logger.info(f"  {row}")

    for location, table in tables_per_location(await series.range()).items():
        logger.info(f"{location}: {len(table)} rows, columns {list(table[0])}")


async def demo_retention(series: TimeSeries):
    """Demonstrate deleting old values."""
    logger.info("\n" + "=" * 60)
    logger.info("RETENTION DEMO")
    logger.info("=" * 60)

    await series.delete_older_than(minute(3))
    logger.info(f"{len(await series.range())} values left after retention")
    logger.info(f"{len(await series.latest())} latest values kept")


async def main():
    """Run all demos."""
    manager = PostgreSQLConnectionPool()
    pool = await manager.connect()

    try:
        series = TimeSeries.for_postgres("demo", pool)
        await demo_dictionaries(series)
        await demo_values(series)
        await demo_retention(series)
    finally:
        await manager.close()


if __name__ == "__main__":
    asyncio.run(main())
