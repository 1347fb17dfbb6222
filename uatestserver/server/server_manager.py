"""
Test Server Manager.

This module provides the main server lifecycle management,
using asyncua's native context manager pattern.
"""

import asyncio
from datetime import datetime
from typing import Optional

from asyncua import Server

from .. import __version__
from ..logging import log_info, log_warn, log_error
from ..types import BulkVariableTable, FailurePolicy, FixedNodes
from .address_space_builder import AddressSpaceBuilder
from .bulk_factory import BulkVariableFactory
from .subscription import DataChangeLogger
from .update_scheduler import UpdateScheduler


class ServerManager:
    """
    Manages the test server lifecycle.

    Uses asyncua's native patterns for:
    - Server initialization and configuration
    - Address space creation
    - Running the update scheduler while the endpoint is open
    """

    def __init__(self, config: dict):
        """
        Initialize server manager.

        Args:
            config: Complete configuration dictionary
        """
        self.config = config

        # Server components (initialized during setup)
        self.server: Optional[Server] = None
        self.address_space_builder: Optional[AddressSpaceBuilder] = None
        self.fixed_nodes: Optional[FixedNodes] = None
        self.bulk_table: Optional[BulkVariableTable] = None
        self.scheduler: Optional[UpdateScheduler] = None
        self.data_change_logger: Optional[DataChangeLogger] = None

        self._is_setup = False

    @property
    def namespace_idx(self) -> Optional[int]:
        if self.address_space_builder is None:
            return None
        return self.address_space_builder.namespace_idx

    async def run(self) -> None:
        """
        Run the test server.

        Builds the address space if needed, opens the endpoint and ticks
        until stopped or cancelled.
        """
        try:
            if not self._is_setup:
                await self.setup()

            async with self.server:
                log_info(f"Server listening on {self.config['server']['endpoint_url']}")

                if self.config["update"].get("log_data_changes"):
                    await self._subscribe_data_changes()

                await self.scheduler.initialize()
                log_info("Ctrl-C to exit")
                await self.scheduler.run()

        except asyncio.CancelledError:
            log_info("Server shutdown requested")
            raise
        except Exception as e:
            log_error(f"Server error: {e}")
            raise

    def stop(self) -> None:
        """Request a cooperative shutdown after the current tick."""
        if self.scheduler:
            self.scheduler.stop()

    async def setup(self) -> None:
        """
        Create and initialize the server and build the address space.

        The endpoint is not opened, so this can be used on its own to
        exercise the address space in-process.
        """
        server_config = self.config.get("server", {})
        address_space_config = self.config.get("address_space", {})
        update_config = self.config.get("update", {})

        self.server = Server()

        # Configure server BEFORE init
        self._configure_server(server_config)

        await self.server.init()
        log_info("Server initialized")

        await self.server.set_application_uri(
            server_config.get("application_uri", "urn://exampleserver.freeopcua.github.io")
        )

        # Set build info AFTER init
        await self._set_build_info(server_config)

        await self._build_address_space(address_space_config)

        self.scheduler = UpdateScheduler(
            fixed_nodes=self.fixed_nodes,
            bulk_table=self.bulk_table,
            cycle_time_ms=update_config.get("cycle_time_ms", 2000),
            failure_policy=FailurePolicy.from_string(
                update_config.get("failure_policy", FailurePolicy.FAIL_FAST.value)
            ),
        )
        self._is_setup = True

    def _configure_server(self, server_config: dict) -> None:
        """Configure server settings before initialization."""
        endpoint_url = server_config.get("endpoint_url", "opc.tcp://0.0.0.0:4841/freeopcua/server")
        self.server.set_endpoint(endpoint_url)
        log_info(f"Endpoint: {endpoint_url}")

        self.server.set_server_name(server_config.get("name", "FreeOpcUa Test Server"))

    async def _set_build_info(self, server_config: dict) -> None:
        """Set server build information."""
        product_uri = server_config.get("product_uri", "urn://exampleserver.freeopcua.github.io")

        await self.server.set_build_info(
            product_uri=product_uri,
            manufacturer_name="FreeOpcUa",
            product_name="uatestserver",
            software_version=__version__,
            build_number=__version__,
            build_date=datetime.now()
        )

    async def _build_address_space(self, address_space_config: dict) -> None:
        """Build the fixed nodes and the bulk variables."""
        self.address_space_builder = AddressSpaceBuilder(
            server=self.server,
            namespace_uri=address_space_config.get(
                "namespace_uri", "http://examples.freeopcua.github.io"
            ),
            fixed_object_id=address_space_config.get("fixed_object_id", 99)
        )
        namespace_idx = await self.address_space_builder.initialize()
        expected_idx = address_space_config.get("namespace_index", namespace_idx)
        if expected_idx != namespace_idx:
            log_warn(
                f"Namespace registered at index {namespace_idx} but namespace_index is "
                f"{expected_idx}; exported record links will not resolve"
            )

        objects = self.server.nodes.objects
        self.fixed_nodes = await self.address_space_builder.create_fixed_hierarchy(
            objects, namespace_idx
        )
        await self.address_space_builder.log_root_children()

        factory = BulkVariableFactory(address_space_config.get("bulk_object_id", 100))
        self.bulk_table = await factory.create_many(
            objects,
            address_space_config.get("object_count", 1000),
            namespace_idx
        )

    async def _subscribe_data_changes(self) -> None:
        """Watch MyVariable from inside the server."""
        self.data_change_logger = DataChangeLogger()
        subscription = await self.server.create_subscription(
            self.config["update"].get("cycle_time_ms", 2000),
            self.data_change_logger
        )
        await subscription.subscribe_data_change(self.fixed_nodes.int_var.node)
        log_info("Logging data changes of MyVariable")
