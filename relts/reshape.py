"""
In-memory reshaping of query results.

Query results are long: one :class:`~relts.types.Value` per timestamp,
location and parameter. The functions here turn them into

* wide tables, one row per timestamp and one column per location/parameter
  pair (:func:`to_table`),
* column-major series (:func:`to_columns`),
* per-location groups of rows (:func:`per_location`) or of wide tables
  (:func:`tables_per_location`).

Row and column order only depends on the values, never on input order.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from relts.types import ParameterReading, Value

TIMESTAMP_COLUMN = "timestamp"

Row = Union[Value, ParameterReading]


def to_table(
    rows: Iterable[Row],
    separator: str = "|",
    override_location: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Pivot long rows into one row per timestamp.

    Every row of the result holds a ``timestamp`` cell followed by one cell
    per location/parameter pair seen anywhere in the input, keyed
    ``location + separator + parameter``. Pairs without a value at a
    timestamp are None. Timestamps and pairs are sorted ascending.

    With ``override_location`` the cells are keyed by parameter alone and
    rows without a location (see :func:`per_location`) are attributed to it.

    Args:
        rows: Values or parameter readings
        separator: Joins location and parameter in column keys
        override_location: Fixed location of all rows

    Returns:
        Wide table rows

    Raises:
        ValueError: If a row has no location and no override is given
    """
    cells: Dict[int, Dict[Tuple[str, str], Any]] = {}
    pairs = set()

    for row in rows:
        location = getattr(row, "location", None) or override_location
        if location is None:
            raise ValueError("Rows without a location need an override_location")

        pair = (location, row.parameter)
        pairs.add(pair)
        cells.setdefault(row.timestamp, {})[pair] = row.value

    columns = sorted(pairs)
    table = []
    for timestamp in sorted(cells):
        values = cells[timestamp]
        table_row: Dict[str, Any] = {TIMESTAMP_COLUMN: timestamp}
        for location, parameter in columns:
            key = parameter if override_location else f"{location}{separator}{parameter}"
            table_row[key] = values.get((location, parameter))
        table.append(table_row)

    return table


def to_columns(rows: Iterable[Value], separator: str = "|") -> Dict[str, List[Any]]:
    """
    Pivot long rows and return the table column by column.

    The result maps ``timestamp`` and every column key of :func:`to_table`
    to the list of that column's cells, in timestamp order. An empty input
    gives an empty mapping.
    """
    table = to_table(rows, separator)
    if not table:
        return {}

    keys = list(table[0])
    return {key: [row[key] for row in table] for key in keys}


def per_location(rows: Iterable[Value]) -> Dict[str, List[ParameterReading]]:
    """
    Group rows by location, dropping the location from each row.

    Locations appear in the order they are first seen; rows keep their
    relative order.
    """
    groups: Dict[str, List[ParameterReading]] = {}
    for row in rows:
        groups.setdefault(row.location, []).append(
            ParameterReading(timestamp=row.timestamp, parameter=row.parameter, value=row.value)
        )
    return groups


def tables_per_location(rows: Iterable[Value]) -> Dict[str, List[Dict[str, Any]]]:
    """Group rows by location and pivot each group, keying columns by parameter."""
    return {
        location: to_table(readings, override_location=location)
        for location, readings in per_location(rows).items()
    }


def from_table(table: Sequence[Dict[str, Any]], separator: str = "|") -> List[Value]:
    """
    Flatten a wide table from :func:`to_table` back into long rows.

    Empty cells are dropped. A fact stored with a NULL value pivots to the
    same None cell as a missing one, so it does not come back. Column keys
    are split at the first separator, so location names must not contain it.

    Returns:
        Values ordered by timestamp, location and parameter
    """
    values = []
    for row in table:
        timestamp = row[TIMESTAMP_COLUMN]
        for key, value in row.items():
            if key == TIMESTAMP_COLUMN or value is None:
                continue
            location, _, parameter = key.partition(separator)
            values.append(
                Value(timestamp=timestamp, location=location, parameter=parameter, value=value)
            )

    values.sort(key=lambda v: (v.timestamp, v.location, v.parameter))
    return values
