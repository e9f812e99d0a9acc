"""
Unit tests for shared types: value kinds and dictionary entry validation.
"""

import pytest
from pydantic import ValidationError

from relts.types import (
    EntryKind,
    Location,
    Parameter,
    Value,
    ValueKind,
)


# ============================================================================
# ValueKind Tests
# ============================================================================


class TestValueKind:
    """Tests for scalar kind coercion."""

    def test_float_accepts_ints_and_floats(self):
        assert ValueKind.FLOAT.coerce(1) == 1.0
        assert isinstance(ValueKind.FLOAT.coerce(1), float)
        assert ValueKind.FLOAT.coerce(-3.25) == -3.25

    def test_float_rejects_text(self):
        with pytest.raises(ValueError):
            ValueKind.FLOAT.coerce("1.5")

    def test_integer_accepts_integral_values(self):
        assert ValueKind.INTEGER.coerce(7) == 7
        assert ValueKind.INTEGER.coerce(7.0) == 7
        assert isinstance(ValueKind.INTEGER.coerce(7.0), int)

    def test_integer_rejects_fractions(self):
        with pytest.raises(ValueError, match="integer"):
            ValueKind.INTEGER.coerce(1.5)

    def test_text_accepts_only_strings(self):
        assert ValueKind.TEXT.coerce("sunny") == "sunny"
        with pytest.raises(ValueError):
            ValueKind.TEXT.coerce(3)

    @pytest.mark.parametrize("kind", list(ValueKind))
    def test_booleans_are_rejected(self, kind):
        with pytest.raises(ValueError, match="Booleans"):
            kind.coerce(True)

    def test_kind_from_setting_string(self):
        assert ValueKind("integer") is ValueKind.INTEGER


# ============================================================================
# Entry Tests
# ============================================================================


class TestEntries:
    """Tests for location and parameter models."""

    def test_entry_kinds(self):
        assert Location(name="here").kind is EntryKind.LOCATION
        assert Parameter(name="aaa").kind is EntryKind.PARAMETER

    def test_name_length_limit(self):
        Location(name="x" * 128)
        with pytest.raises(ValidationError):
            Location(name="x" * 129)

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            Parameter(name="")

    def test_details_default_to_empty(self):
        assert Location(name="here").details == {}
        assert Parameter(name="aaa").unit is None

    def test_value_keeps_scalar_type(self):
        assert Value(timestamp=1, location="a", parameter="b", value=3).value == 3
        assert isinstance(Value(timestamp=1, location="a", parameter="b", value=3).value, int)
        assert Value(timestamp=1, location="a", parameter="b", value="x").value == "x"
