"""
Test fixtures and sample data.

Timestamps are seconds since the Unix epoch; the sample day starts at
2018-01-01 00:00:00 UTC.
"""

from relts.types import Value

T0 = 1514764800  # 2018-01-01 00:00:00 UTC
MINUTE = 60


def minute(n: int) -> int:
    """Timestamp n minutes after T0."""
    return T0 + n * MINUTE


# Values of (here, aaa) in insertion order, out of timestamp order
HERE_AAA_INSERTS = [
    (minute(0), 1.0),
    (minute(4), -3.0),
    (minute(2), 1.567),
    (minute(3), 1.56789),
    (minute(1), 1.5),
]


# Values of (here, aaa) in timestamp order
HERE_AAA_IN_ORDER = [
    (minute(0), 1.0),
    (minute(1), 1.5),
    (minute(2), 1.567),
    (minute(3), 1.56789),
    (minute(4), -3.0),
]


def create_sample_values() -> list[Value]:
    """Long rows for two locations and three parameters, unsorted."""
    return [
        Value(timestamp=minute(1), location="there", parameter="bbb", value=1.51),
        Value(timestamp=minute(0), location="here", parameter="aaa", value=-1.0),
        Value(timestamp=minute(1), location="here", parameter="aaa", value=1.5),
        Value(timestamp=minute(1), location="there", parameter="aaa", value=1.49),
        Value(timestamp=minute(2), location="here", parameter="aaa", value=1.567),
        Value(timestamp=minute(2), location="here", parameter="ccc", value=7.0),
    ]


async def populate(series) -> None:
    """Create the sample dictionaries and values in a time series."""
    await series.create_location("here")
    await series.create_location("there", {"where": "exactly there"})
    await series.create_parameter("aaa")
    await series.create_parameter("bbb", "potatoes")
    await series.create_parameter("ccc", "kg", {"si": True})

    for timestamp, value in HERE_AAA_INSERTS:
        await series.insert("here", "aaa", timestamp, value)

    await series.insert("there", "bbb", minute(1), 1.51)
    await series.insert("there", "aaa", minute(1), 1.49)
