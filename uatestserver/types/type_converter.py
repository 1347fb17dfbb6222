"""
Tagged value to OPC UA type conversion.

This module maps the closed set of value kinds used by the server onto
OPC UA variant types and converts values in both directions.
"""

from typing import Any

from asyncua import ua

from .models import TaggedValue, ValueKind


class TypeConverter:
    """
    Converts between TaggedValue and OPC UA types.

    Every kind in ValueKind has an entry in KIND_TO_OPCUA; a kind without
    one is a programming error and raises instead of falling back to a
    generic Variant.
    """

    KIND_TO_OPCUA: dict[ValueKind, ua.VariantType] = {
        ValueKind.INT32: ua.VariantType.Int32,
        ValueKind.UINT32: ua.VariantType.UInt32,
        ValueKind.DOUBLE: ua.VariantType.Double,
        ValueKind.BOOLEAN: ua.VariantType.Boolean,
        ValueKind.STRING: ua.VariantType.String,
        ValueKind.INT32_ARRAY: ua.VariantType.Int32,
    }

    @classmethod
    def to_opcua_type(cls, kind: ValueKind) -> ua.VariantType:
        """
        Get the OPC UA variant type for a value kind.

        Args:
            kind: Value kind

        Returns:
            Corresponding VariantType (element type for arrays)

        Raises:
            ValueError: If the kind has no mapping
        """
        try:
            return cls.KIND_TO_OPCUA[kind]
        except KeyError:
            raise ValueError(f"No OPC UA type for value kind: {kind}")

    @classmethod
    def to_variant(cls, value: TaggedValue) -> ua.Variant:
        """Build a typed Variant from a tagged value."""
        opcua_type = cls.to_opcua_type(value.kind)

        if value.kind == ValueKind.INT32_ARRAY:
            return ua.Variant(list(value.value), opcua_type)
        return ua.Variant(value.value, opcua_type)

    @classmethod
    def from_opcua_value(cls, kind: ValueKind, raw: Any) -> TaggedValue:
        """
        Wrap a raw value read from a node into a tagged value.

        Args:
            kind: Kind the node was created with
            raw: Value as returned by Node.read_value(), or a Variant

        Returns:
            TaggedValue of the given kind

        Raises:
            TypeError: If the raw value does not fit the kind
        """
        if isinstance(raw, ua.Variant):
            raw = raw.Value

        if kind == ValueKind.INT32_ARRAY:
            if raw is None:
                raw = []
            return TaggedValue(kind, tuple(raw))
        if kind == ValueKind.DOUBLE and isinstance(raw, int) and not isinstance(raw, bool):
            raw = float(raw)
        return TaggedValue(kind, raw)
