"""
Shared type definitions for the relational time series store.

These models are the contract between the dictionaries, the value store,
the query engine and the reshape functions.
"""

from enum import Enum
from numbers import Integral, Real
from typing import Any, ClassVar, Dict, Optional, Union

from pydantic import BaseModel, Field


Scalar = Union[int, float, str]

MAX_NAME_LENGTH = 128


# ============================================================================
# Enums
# ============================================================================


class EntryKind(str, Enum):
    """Dimension a dictionary entry belongs to."""

    LOCATION = "location"
    PARAMETER = "parameter"


class ValueKind(str, Enum):
    """Scalar kind stored in a time series, fixed when the series is set up."""

    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"

    def coerce(self, value: Any) -> Scalar:
        """
        Validate a Python value against this kind.

        Args:
            value: Value supplied by the caller

        Returns:
            The value converted to the kind's Python type

        Raises:
            ValueError: If the value does not belong to this kind
        """
        if isinstance(value, bool):
            raise ValueError(f"Booleans are not valid {self.value} values")

        if self is ValueKind.TEXT:
            if not isinstance(value, str):
                raise ValueError(f"Expected a text value, got {type(value).__name__}")
            return value

        if self is ValueKind.INTEGER:
            if isinstance(value, Integral):
                return int(value)
            if isinstance(value, Real) and float(value).is_integer():
                return int(value)
            raise ValueError(f"Expected an integer value, got {value!r}")

        if isinstance(value, Real):
            return float(value)
        raise ValueError(f"Expected a numeric value, got {type(value).__name__}")


# ============================================================================
# Dictionary Entries
# ============================================================================


class Location(BaseModel):
    """A named location of a time series."""

    id: Optional[int] = None
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    details: Dict[str, Any] = Field(default_factory=dict)

    kind: ClassVar[EntryKind] = EntryKind.LOCATION

    class Config:
        frozen = True


class Parameter(BaseModel):
    """A named parameter (measured quantity) of a time series."""

    id: Optional[int] = None
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    unit: Optional[str] = Field(default=None, max_length=MAX_NAME_LENGTH)
    details: Dict[str, Any] = Field(default_factory=dict)

    kind: ClassVar[EntryKind] = EntryKind.PARAMETER

    class Config:
        frozen = True


Entry = Union[Location, Parameter]


# ============================================================================
# Values
# ============================================================================


class Fact(BaseModel):
    """A single observation keyed by resolved dictionary ids."""

    timestamp: int
    location_id: int
    parameter_id: int
    value: Scalar

    class Config:
        frozen = True


class Value(BaseModel):
    """A stored observation joined with its location and parameter names."""

    timestamp: int
    location: str
    parameter: str
    value: Optional[Scalar] = None

    class Config:
        frozen = True


class LatestValue(Value):
    """Entry of the latest-value index for one location and parameter."""

    pass


class ParameterReading(BaseModel):
    """A value with its location stripped, as grouped per location."""

    timestamp: int
    parameter: str
    value: Optional[Scalar] = None

    class Config:
        frozen = True
