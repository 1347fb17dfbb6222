"""
Tests for tagged values, conversion and scheduler state.
"""

import pytest
from asyncua import ua

from uatestserver.types import (
    FailurePolicy,
    ScheduleState,
    TaggedValue,
    TypeConverter,
    ValueKind,
    wrap_int32,
)


class TestTaggedValue:
    """Test construction checks of the closed value type."""

    def test_constructors(self):
        assert TaggedValue.int32(1).kind == ValueKind.INT32
        assert TaggedValue.uint32(1).kind == ValueKind.UINT32
        assert TaggedValue.double(1.5).kind == ValueKind.DOUBLE
        assert TaggedValue.boolean(False).kind == ValueKind.BOOLEAN
        assert TaggedValue.string("x").kind == ValueKind.STRING
        assert TaggedValue.int32_array([1, 2]).value == (1, 2)

    def test_double_accepts_int(self):
        value = TaggedValue.double(8)

        assert value.value == 8.0
        assert isinstance(value.value, float)

    @pytest.mark.parametrize("kind,value", [
        (ValueKind.INT32, True),
        (ValueKind.INT32, "1"),
        (ValueKind.INT32, 2 ** 31),
        (ValueKind.INT32, -2 ** 31 - 1),
        (ValueKind.UINT32, -1),
        (ValueKind.UINT32, 2 ** 32),
        (ValueKind.BOOLEAN, 1),
        (ValueKind.STRING, b"bytes"),
        (ValueKind.INT32_ARRAY, [1, "2"]),
        (ValueKind.INT32_ARRAY, [1, 2 ** 31]),
        (ValueKind.DOUBLE, None),
    ])
    def test_rejects_mismatched_values(self, kind, value):
        with pytest.raises(TypeError):
            TaggedValue(kind, value)

    def test_int32_limits_accepted(self):
        assert TaggedValue.int32(2 ** 31 - 1).value == 2147483647
        assert TaggedValue.int32(-2 ** 31).value == -2147483648


class TestWrapInt32:
    """Test signed 32-bit wrap-around."""

    @pytest.mark.parametrize("value,expected", [
        (0, 0),
        (2147483647, 2147483647),
        (2147483648, -2147483648),
        (-2147483649, 2147483647),
        (2 ** 32 + 5, 5),
    ])
    def test_wrap(self, value, expected):
        assert wrap_int32(value) == expected


class TestTypeConverter:
    """Test conversion to and from OPC UA variants."""

    @pytest.mark.parametrize("value,variant_type", [
        (TaggedValue.int32(5), ua.VariantType.Int32),
        (TaggedValue.uint32(5), ua.VariantType.UInt32),
        (TaggedValue.double(8.8), ua.VariantType.Double),
        (TaggedValue.boolean(True), ua.VariantType.Boolean),
        (TaggedValue.string("empty"), ua.VariantType.String),
    ])
    def test_scalar_variants(self, value, variant_type):
        variant = TypeConverter.to_variant(value)

        assert variant.VariantType == variant_type
        assert variant.Value == value.value

    def test_array_variant(self):
        variant = TypeConverter.to_variant(TaggedValue.int32_array([1, 2, 3]))

        assert variant.VariantType == ua.VariantType.Int32
        assert variant.Value == [1, 2, 3]

    def test_every_kind_is_mapped(self):
        for kind in ValueKind:
            assert isinstance(TypeConverter.to_opcua_type(kind), ua.VariantType)

    def test_from_opcua_value(self):
        assert TypeConverter.from_opcua_value(ValueKind.INT32, 7) == TaggedValue.int32(7)
        assert TypeConverter.from_opcua_value(
            ValueKind.INT32, ua.Variant(7, ua.VariantType.Int32)
        ) == TaggedValue.int32(7)
        assert TypeConverter.from_opcua_value(ValueKind.INT32_ARRAY, [1, 2]).value == (1, 2)

    def test_from_opcua_value_mismatch(self):
        with pytest.raises(TypeError):
            TypeConverter.from_opcua_value(ValueKind.INT32, "seven")


class TestScheduleState:
    """Test state transitions."""

    def test_counter_wraps(self):
        state = ScheduleState(counter=2 ** 32 - 1)

        assert state.advance_counter() == 0

    def test_array_length_kept(self):
        state = ScheduleState()

        for _ in range(3):
            state.advance_array()

        assert state.array_values == [4, 5, 6, 7, 8]

    def test_array_elements_wrap(self):
        state = ScheduleState(array_values=[2 ** 31 - 1, 0])

        assert state.advance_array() == [-2 ** 31, 1]

    def test_toggle(self):
        state = ScheduleState()

        assert state.flip_toggle() is False
        assert state.flip_toggle() is True


class TestFailurePolicy:

    def test_from_string(self):
        assert FailurePolicy.from_string("fail_fast") == FailurePolicy.FAIL_FAST
        assert FailurePolicy.from_string("Log-And-Continue") == FailurePolicy.LOG_AND_CONTINUE

    def test_unknown(self):
        with pytest.raises(ValueError):
            FailurePolicy.from_string("retry")
