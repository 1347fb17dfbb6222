"""
Error taxonomy for the test server.

Startup and write failures terminate the server; export failures are
reported but never prevent the server from running.
"""

from typing import Optional


class ServerError(Exception):
    """Base class for all server errors."""


class StartupFailure(ServerError):
    """Address space construction failed."""


class DuplicateNodeError(StartupFailure):
    """A node with the requested identifier already exists."""

    def __init__(self, node_id: str):
        super().__init__(f"Node already exists: {node_id}")
        self.node_id = node_id


class WriteFailure(ServerError):
    """Reading or writing a value during a tick failed."""

    def __init__(self, node_name: str, cause: Optional[BaseException] = None):
        message = f"Write to '{node_name}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.node_name = node_name
        self.cause = cause


class ExportIOFailure(ServerError):
    """The static export file could not be written."""
