"""
Type definitions and converters.

This package provides:
- The tagged value variants stored in server variables
- Value conversion to and from OPC UA variants
- Data models for address space handles and scheduler state
"""

from .models import (
    AccessMode,
    BulkVariableTable,
    FailurePolicy,
    FixedNodes,
    ScheduleState,
    TaggedValue,
    ValueKind,
    VariableDescriptor,
    VariableNode,
    wrap_int32,
)
from .type_converter import TypeConverter

__all__ = [
    'AccessMode',
    'BulkVariableTable',
    'FailurePolicy',
    'FixedNodes',
    'ScheduleState',
    'TaggedValue',
    'TypeConverter',
    'ValueKind',
    'VariableDescriptor',
    'VariableNode',
    'wrap_int32',
]
