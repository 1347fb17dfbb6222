"""
Bulk variable factory.

Creates the ManyObjects object and N identical integer variables beneath
it, returning them as a positional table for the update scheduler.
"""

from asyncua.common.node import Node

from ..errors import StartupFailure
from ..logging import log_info, log_warn, log_debug
from ..types import (
    AccessMode,
    BulkVariableTable,
    TaggedValue,
    VariableDescriptor,
)
from .address_space_builder import create_object, create_variable


BULK_OBJECT_NAME = "ManyObjects"
DEFAULT_BULK_OBJECT_ID = 100
PROGRESS_INTERVAL = 1000


class BulkVariableFactory:
    """
    Creates ManyObjects.var1 .. ManyObjects.varN.

    Each variable starts at its 1-based position and is writable by
    clients.
    """

    def __init__(self, object_id: int = DEFAULT_BULK_OBJECT_ID):
        self.object_id = object_id

    async def create_many(
        self,
        parent: Node,
        count: int,
        namespace_index: int
    ) -> BulkVariableTable:
        """
        Create the bulk object and its variables.

        Args:
            parent: Node to create ManyObjects under
            count: Number of variables, 0 gives an empty table
            namespace_index: Namespace for the created nodes

        Returns:
            Table where index i holds var{i+1}

        Raises:
            ValueError: If count is negative
            StartupFailure: If a node cannot be created. Variables created
                before the failure stay in the address space.
        """
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")

        bulk_object = await create_object(
            parent, self.object_id, namespace_index, BULK_OBJECT_NAME
        )

        nodes = []
        for i in range(count):
            descriptor = VariableDescriptor(
                name=BulkVariableTable.name_of(i),
                namespace_index=namespace_index,
                initial_value=TaggedValue.int32(i + 1),
                access=AccessMode.READ_WRITE,
            )
            try:
                nodes.append(await create_variable(bulk_object, descriptor, BULK_OBJECT_NAME))
            except StartupFailure as e:
                log_warn(
                    f"{BULK_OBJECT_NAME}: {len(nodes)} variables were created "
                    f"before the failure and are not removed"
                )
                raise StartupFailure(
                    f"Creating {descriptor.name} failed after {len(nodes)} of {count} variables: {e}"
                ) from e

            if (i + 1) % PROGRESS_INTERVAL == 0:
                log_debug(f"{BULK_OBJECT_NAME}: created {i + 1} of {count} variables")

        log_info(f"Created {BULK_OBJECT_NAME} with {count} variables")
        return BulkVariableTable(bulk_object, nodes)
