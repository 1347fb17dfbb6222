"""
Address space builder for the test server.

This module creates the fixed, hand-authored part of the address space:
one object with a string, an integer, a float, a boolean and an integer
array variable.
"""

from typing import Optional

from asyncua import Server, ua
from asyncua.common.node import Node

from ..errors import DuplicateNodeError, StartupFailure
from ..logging import log_info, log_debug
from ..types import (
    AccessMode,
    FixedNodes,
    TaggedValue,
    TypeConverter,
    VariableDescriptor,
    VariableNode,
)


FIXED_OBJECT_NAME = "NewObject"
DEFAULT_FIXED_OBJECT_ID = 99


class AddressSpaceBuilder:
    """
    Builds the fixed part of the OPC UA address space.

    Creates:
    - NewObject (numeric NodeId 99 in the server namespace)
    - MyStringVar, MyVariable, MyProperty, MyBool, MyArrayVar beneath it
    """

    def __init__(
        self,
        server: Server,
        namespace_uri: str,
        fixed_object_id: int = DEFAULT_FIXED_OBJECT_ID
    ):
        """
        Initialize address space builder.

        Args:
            server: asyncua Server instance, already initialized
            namespace_uri: Namespace URI for created nodes
            fixed_object_id: Numeric identifier of the NewObject node
        """
        self.server = server
        self.namespace_uri = namespace_uri
        self.fixed_object_id = fixed_object_id
        self.namespace_idx: Optional[int] = None

    async def initialize(self) -> int:
        """
        Register the server namespace.

        Returns:
            The namespace index

        Raises:
            StartupFailure: If the namespace cannot be registered
        """
        try:
            self.namespace_idx = await self.server.register_namespace(self.namespace_uri)
        except Exception as e:
            raise StartupFailure(f"Failed to register namespace: {e}") from e
        log_info(f"Registered namespace '{self.namespace_uri}' (index: {self.namespace_idx})")
        return self.namespace_idx

    def fixed_descriptors(self, namespace_index: int) -> list[VariableDescriptor]:
        """Descriptors of the five fixed variables, in creation order."""
        return [
            VariableDescriptor("MyStringVar", namespace_index, TaggedValue.string("empty")),
            VariableDescriptor("MyVariable", namespace_index, TaggedValue.uint32(8)),
            VariableDescriptor(
                "MyProperty", namespace_index, TaggedValue.double(8.8), AccessMode.READ_WRITE
            ),
            VariableDescriptor(
                "MyBool", namespace_index, TaggedValue.boolean(True), AccessMode.READ_WRITE
            ),
            VariableDescriptor(
                "MyArrayVar", namespace_index, TaggedValue.int32_array([1, 2, 3, 4, 5])
            ),
        ]

    async def create_fixed_hierarchy(
        self,
        root: Optional[Node] = None,
        namespace_index: Optional[int] = None
    ) -> FixedNodes:
        """
        Create NewObject and its five variables.

        Args:
            root: Parent node, defaults to the Objects folder
            namespace_index: Namespace for the nodes, defaults to the
                registered one

        Returns:
            Handles of the created nodes

        Raises:
            DuplicateNodeError: If NewObject already exists
            StartupFailure: If any node cannot be created
        """
        if namespace_index is None:
            namespace_index = self.namespace_idx
        if namespace_index is None:
            raise StartupFailure("Address space builder not initialized")
        if root is None:
            root = self.server.nodes.objects

        parent = await create_object(
            root, self.fixed_object_id, namespace_index, FIXED_OBJECT_NAME
        )

        handles = []
        for descriptor in self.fixed_descriptors(namespace_index):
            handles.append(await create_variable(parent, descriptor, FIXED_OBJECT_NAME))

        string_var, int_var, float_prop, bool_var, array_var = handles
        log_info(f"Created {FIXED_OBJECT_NAME} with {len(handles)} variables")

        return FixedNodes(
            parent=parent,
            string_var=string_var,
            int_var=int_var,
            float_prop=float_prop,
            bool_var=bool_var,
            array_var=array_var,
        )

    async def log_root_children(self) -> list[Node]:
        """Browse the Root node and log it and its children."""
        root = self.server.nodes.root
        children = await root.get_children()
        log_info(f"Root node is: {root}")
        log_info("Childs are:")
        for child in children:
            log_info(f"    {child}")
        return children


async def create_object(
    parent: Node,
    identifier: int,
    namespace_index: int,
    name: str
) -> Node:
    """
    Create an object with a fixed numeric identifier.

    Raises:
        DuplicateNodeError: If the identifier is already taken
        StartupFailure: On any other creation error
    """
    node_id = ua.NodeId(identifier, namespace_index)
    try:
        node = await parent.add_object(node_id, ua.QualifiedName(name, namespace_index))
    except ua.UaStatusCodeError as e:
        if e.code == ua.StatusCodes.BadNodeIdExists:
            raise DuplicateNodeError(node_id.to_string()) from e
        raise StartupFailure(f"Failed to create object '{name}': {e}") from e
    log_debug(f"Created object {name} ({node_id.to_string()})")
    return node


async def create_variable(
    parent: Node,
    descriptor: VariableDescriptor,
    parent_name: str
) -> VariableNode:
    """
    Create a variable from its descriptor and apply its access mode.

    The variable gets the string NodeId ``{parent_name}.{name}``, so no
    numeric identifier is ever generated in the server namespace and the
    numeric ids reserved for the objects stay free.

    Raises:
        StartupFailure: If the node cannot be created or configured
    """
    value = descriptor.initial_value
    try:
        node = await parent.add_variable(
            variable_node_id(parent_name, descriptor),
            descriptor.name,
            TypeConverter.to_variant(value),
            datatype=_datatype_id(value)
        )
        var_node = VariableNode(node=node, descriptor=descriptor)
        if descriptor.access == AccessMode.READ_WRITE:
            await var_node.grant_read_write()
    except ua.UaStatusCodeError as e:
        if e.code == ua.StatusCodes.BadNodeIdExists:
            raise DuplicateNodeError(variable_node_id(parent_name, descriptor).to_string()) from e
        raise StartupFailure(f"Failed to create variable '{descriptor.name}': {e}") from e
    except ua.UaError as e:
        raise StartupFailure(f"Failed to create variable '{descriptor.name}': {e}") from e
    return var_node


def variable_node_id(parent_name: str, descriptor: VariableDescriptor) -> ua.NodeId:
    return ua.NodeId(f"{parent_name}.{descriptor.name}", descriptor.namespace_index)


def _datatype_id(value: TaggedValue) -> ua.NodeId:
    """DataType NodeId matching the variant type of ``value``."""
    return ua.NodeId(TypeConverter.to_opcua_type(value.kind).value)
