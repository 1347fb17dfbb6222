"""Shared fixtures: an initialized, non-listening asyncua server."""

import pytest
import pytest_asyncio
from asyncua import Server

from uatestserver.config import get_default_config
from uatestserver.logging import ServerLogger
from uatestserver.server import AddressSpaceBuilder, BulkVariableFactory


NAMESPACE_URI = "http://examples.freeopcua.github.io"


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    ServerLogger.reset()


@pytest_asyncio.fixture
async def server():
    server = Server()
    await server.init()
    yield server


@pytest_asyncio.fixture
async def builder(server):
    builder = AddressSpaceBuilder(server, NAMESPACE_URI)
    await builder.initialize()
    return builder


@pytest_asyncio.fixture
async def fixed_nodes(builder):
    return await builder.create_fixed_hierarchy()


@pytest_asyncio.fixture
async def make_bulk_table(server, builder):
    async def _make(count):
        return await BulkVariableFactory().create_many(
            server.nodes.objects, count, builder.namespace_idx
        )
    return _make


@pytest.fixture
def config():
    config = get_default_config()
    config["address_space"]["object_count"] = 3
    config["update"]["cycle_time_ms"] = 0
    return config
