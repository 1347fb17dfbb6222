"""
Data models for the test server.

This module defines the internal data structures used for the address
space handles, the tagged values written to them and the state advanced
by the update scheduler.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence
from enum import Enum

from asyncua.common.node import Node


UINT32_MODULUS = 2 ** 32
INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1


def wrap_int32(value: int) -> int:
    """Wrap an integer into the signed 32-bit range, two's complement style."""
    return ((value - INT32_MIN) % UINT32_MODULUS) + INT32_MIN


def _is_int32(value) -> bool:
    return (
        isinstance(value, int) and not isinstance(value, bool)
        and INT32_MIN <= value <= INT32_MAX
    )


class AccessMode(Enum):
    """Access mode for OPC UA variables."""
    READ_ONLY = "readonly"
    READ_WRITE = "readwrite"


class FailurePolicy(Enum):
    """What the update scheduler does when a tick-time write fails."""
    FAIL_FAST = "fail_fast"
    LOG_AND_CONTINUE = "log_and_continue"

    @classmethod
    def from_string(cls, value: str) -> 'FailurePolicy':
        """
        Parse a policy name, case-insensitive.

        Raises:
            ValueError: If the name is not a known policy
        """
        normalized = value.strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown failure policy: {value}")


class ValueKind(Enum):
    """Closed set of value variants the server stores in its variables."""
    INT32 = "int32"
    UINT32 = "uint32"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    STRING = "string"
    INT32_ARRAY = "int32_array"


@dataclass(frozen=True)
class TaggedValue:
    """
    A value together with the variant it belongs to.

    The constructor checks that the Python value matches the kind, so a
    TaggedValue that exists is always writable as its declared type.
    """
    kind: ValueKind
    value: Any

    def __post_init__(self):
        kind = self.kind
        value = self.value

        if kind == ValueKind.BOOLEAN:
            ok = isinstance(value, bool)
        elif kind == ValueKind.INT32:
            ok = _is_int32(value)
        elif kind == ValueKind.UINT32:
            ok = (
                isinstance(value, int) and not isinstance(value, bool)
                and 0 <= value < UINT32_MODULUS
            )
        elif kind == ValueKind.DOUBLE:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
            if ok:
                object.__setattr__(self, "value", float(value))
        elif kind == ValueKind.STRING:
            ok = isinstance(value, str)
        elif kind == ValueKind.INT32_ARRAY:
            ok = isinstance(value, (list, tuple)) and all(_is_int32(v) for v in value)
            if ok:
                object.__setattr__(self, "value", tuple(value))
        else:
            raise ValueError(f"Unsupported value kind: {kind}")

        if not ok:
            raise TypeError(f"Value {value!r} is not a valid {kind.value}")

    @classmethod
    def int32(cls, value: int) -> 'TaggedValue':
        return cls(ValueKind.INT32, value)

    @classmethod
    def uint32(cls, value: int) -> 'TaggedValue':
        return cls(ValueKind.UINT32, value)

    @classmethod
    def double(cls, value: float) -> 'TaggedValue':
        return cls(ValueKind.DOUBLE, value)

    @classmethod
    def boolean(cls, value: bool) -> 'TaggedValue':
        return cls(ValueKind.BOOLEAN, value)

    @classmethod
    def string(cls, value: str) -> 'TaggedValue':
        return cls(ValueKind.STRING, value)

    @classmethod
    def int32_array(cls, values: Sequence[int]) -> 'TaggedValue':
        return cls(ValueKind.INT32_ARRAY, tuple(values))


@dataclass(frozen=True)
class VariableDescriptor:
    """Configuration-time definition of a variable before its node exists."""
    name: str
    namespace_index: int
    initial_value: TaggedValue
    access: AccessMode = AccessMode.READ_ONLY


@dataclass(eq=False)
class VariableNode:
    """
    Handle to one OPC UA variable created by this server.

    Every component that needs the variable holds the same instance, so
    the access mode seen by the builder and the scheduler never diverges.
    """
    node: Node
    descriptor: VariableDescriptor
    access_mode: AccessMode = AccessMode.READ_ONLY

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def kind(self) -> ValueKind:
        return self.descriptor.initial_value.kind

    @property
    def is_writable(self) -> bool:
        """Check if this node allows client writes."""
        return self.access_mode == AccessMode.READ_WRITE

    async def grant_read_write(self) -> None:
        """Set AccessLevel and UserAccessLevel to read-write."""
        await self.node.set_writable()
        self.access_mode = AccessMode.READ_WRITE


@dataclass
class FixedNodes:
    """The hand-authored part of the address space."""
    parent: Node
    string_var: VariableNode
    int_var: VariableNode
    float_prop: VariableNode
    bool_var: VariableNode
    array_var: VariableNode

    def all(self) -> list[VariableNode]:
        return [
            self.string_var,
            self.int_var,
            self.float_prop,
            self.bool_var,
            self.array_var,
        ]


class BulkVariableTable:
    """
    Ordered, fixed-size table of the bulk variables.

    Index i always holds the variable named ``var{i+1}``. The table is
    built once and offers no way to insert or remove entries.
    """

    NAME_PREFIX = "var"

    def __init__(self, parent: Optional[Node], nodes: Sequence[VariableNode]):
        self.parent = parent
        self._nodes: tuple[VariableNode, ...] = tuple(nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, index: int) -> VariableNode:
        return self._nodes[index]

    def __iter__(self) -> Iterator[VariableNode]:
        return iter(self._nodes)

    @classmethod
    def name_of(cls, index: int) -> str:
        """External browse name of the variable stored at ``index``."""
        return f"{cls.NAME_PREFIX}{index + 1}"


@dataclass
class ScheduleState:
    """
    State advanced by the update scheduler, once per tick.

    counter is an unsigned 32-bit value that wraps; array_values keeps its
    length for the whole run and its elements wrap like Int32.
    """
    counter: int = 0
    array_values: list[int] = field(default_factory=lambda: [1, 2, 3, 4, 5])
    toggle: bool = True
    ticks: int = 0

    def advance_counter(self) -> int:
        self.counter = (self.counter + 1) % UINT32_MODULUS
        return self.counter

    def advance_array(self) -> list[int]:
        for i, value in enumerate(self.array_values):
            self.array_values[i] = wrap_int32(value + 1)
        return self.array_values

    def flip_toggle(self) -> bool:
        self.toggle = not self.toggle
        return self.toggle
