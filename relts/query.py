"""
Query engine: time range and latest-value queries with dimension filters.
"""

import logging
from typing import List, Optional

from relts.dictionary import Dictionary
from relts.observability.logging import log_context
from relts.resolver import NameFilter, resolve_set
from relts.storage.interfaces import ValueRepository
from relts.types import LatestValue, Value

logger = logging.getLogger(__name__)


class QueryEngine:
    """Reads values of a time series, filtered by time and by names."""

    def __init__(
        self,
        locations: Dictionary,
        parameters: Dictionary,
        repository: ValueRepository,
    ):
        self.locations = locations
        self.parameters = parameters
        self._repository = repository

    async def _resolve(self, locations: NameFilter, parameters: NameFilter, fail_silently: bool):
        location_ids = resolve_set(
            locations, await self.locations.all(), self.locations.kind, fail_silently
        )
        parameter_ids = resolve_set(
            parameters, await self.parameters.all(), self.parameters.kind, fail_silently
        )
        return location_ids, parameter_ids

    async def range(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        locations: NameFilter = None,
        parameters: NameFilter = None,
        fail_silently: bool = True,
    ) -> List[Value]:
        """
        Fetch values between two timestamps.

        Without bounds the whole series is returned; each bound is inclusive
        and may be omitted independently.

        Args:
            start: Inclusive lower timestamp bound
            end: Inclusive upper timestamp bound
            locations: None for all, a name, or a collection of names
            parameters: None for all, a name, or a collection of names
            fail_silently: Ignore unknown names instead of raising

        Returns:
            Values ordered by timestamp, location name and parameter name

        Raises:
            NotFoundError: On an unknown name when not failing silently
        """
        with log_context(series=self.locations.series, operation="range"):
            location_ids, parameter_ids = await self._resolve(locations, parameters, fail_silently)
            if not location_ids or not parameter_ids:
                logger.debug("Range filter matches no location or parameter")
                return []

            return await self._repository.fetch_range(start, end, location_ids, parameter_ids)

    async def latest(
        self,
        locations: NameFilter = None,
        parameters: NameFilter = None,
        fail_silently: bool = True,
        min_timestamp: Optional[int] = None,
    ) -> List[LatestValue]:
        """
        Fetch the latest value of every matching location and parameter.

        Reads the latest-value index, so entries survive deletion of the
        values they were taken from.

        Args:
            locations: None for all, a name, or a collection of names
            parameters: None for all, a name, or a collection of names
            fail_silently: Ignore unknown names instead of raising
            min_timestamp: Leave out entries older than this timestamp

        Returns:
            One value per pair that has one, ordered by location and parameter name

        Raises:
            NotFoundError: On an unknown name when not failing silently
        """
        with log_context(series=self.locations.series, operation="latest"):
            location_ids, parameter_ids = await self._resolve(locations, parameters, fail_silently)
            if not location_ids or not parameter_ids:
                logger.debug("Latest filter matches no location or parameter")
                return []

            return await self._repository.fetch_latest(location_ids, parameter_ids, min_timestamp)
