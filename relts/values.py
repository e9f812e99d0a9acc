"""
Value store: writes facts and maintains the latest-value index.
"""

import logging
from typing import Any, Iterable, Tuple

from relts.dictionary import Dictionary
from relts.observability.logging import log_context
from relts.observability.metrics import record_value_inserted
from relts.storage.interfaces import NotFoundError, ValueRepository
from relts.types import Fact, ValueKind

logger = logging.getLogger(__name__)


class ValueStore:
    """
    Inserts values by location and parameter name.

    Each insert writes two statements: the fact upsert and the conditional
    latest-value upsert. Unless the repository was built with
    ``consistent_latest``, a crash between them leaves the latest index
    behind the history; it is a best-effort index.
    """

    def __init__(
        self,
        locations: Dictionary,
        parameters: Dictionary,
        repository: ValueRepository,
        value_kind: ValueKind = ValueKind.FLOAT,
        series: str = "",
    ):
        self.locations = locations
        self.parameters = parameters
        self._repository = repository
        self.value_kind = value_kind
        self.series = series

    async def insert(
        self,
        location: str,
        parameter: str,
        timestamp: int,
        value: Any,
        fail_silently: bool = False,
    ) -> bool:
        """
        Insert or overwrite the value of a location and parameter at a timestamp.

        Args:
            location: Location name
            parameter: Parameter name
            timestamp: Seconds since the caller's epoch
            value: Scalar matching the series' value kind
            fail_silently: Return False on unknown names instead of raising

        Returns:
            True if the value was stored, False if skipped

        Raises:
            NotFoundError: On an unknown location or parameter (unless failing silently)
            ValueError: If the value does not match the series' value kind
            StorageError: If a write fails
        """
        with log_context(series=self.series, operation="insert"):
            loc = await self.locations.get(location)
            if loc is None:
                return self._unknown(self.locations, location, fail_silently)

            par = await self.parameters.get(parameter)
            if par is None:
                return self._unknown(self.parameters, parameter, fail_silently)

            fact = Fact(
                timestamp=timestamp,
                location_id=loc.id,
                parameter_id=par.id,
                value=self.value_kind.coerce(value),
            )
            await self._repository.save(fact)

        record_value_inserted(self.series, stored=True)
        return True

    def _unknown(self, dictionary: Dictionary, name: str, fail_silently: bool) -> bool:
        if not fail_silently:
            raise NotFoundError(dictionary.kind, name)

        logger.debug(f"Skipped value for unknown {dictionary.kind.value} '{name}'")
        record_value_inserted(self.series, stored=False)
        return False

    async def insert_many(
        self,
        rows: Iterable[Tuple[str, str, int, Any]],
        fail_silently: bool = False,
    ) -> int:
        """
        Insert (location, parameter, timestamp, value) rows one by one.

        Stops at the first error; rows written before it stay written.

        Returns:
            Number of rows stored
        """
        stored = 0
        for location, parameter, timestamp, value in rows:
            if await self.insert(location, parameter, timestamp, value, fail_silently):
                stored += 1

        logger.debug(f"Stored {stored} values in {self.series or 'series'}")
        return stored

    async def delete_older_than(self, timestamp: int) -> bool:
        """
        Delete every value with a timestamp strictly below the given one.

        The latest-value index is left as is, even when its entries point at
        deleted values.

        Returns:
            True on success

        Raises:
            StorageError: If the delete fails
        """
        with log_context(series=self.series, operation="delete"):
            await self._repository.delete_older_than(timestamp)
        return True
