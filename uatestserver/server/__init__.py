"""
Test server core components.

This package provides:
- Server lifecycle management
- Address space building, fixed and bulk
- The periodic update scheduler
"""

from .server_manager import ServerManager
from .address_space_builder import AddressSpaceBuilder
from .bulk_factory import BulkVariableFactory
from .update_scheduler import UpdateScheduler
from .subscription import DataChangeLogger

__all__ = [
    'ServerManager',
    'AddressSpaceBuilder',
    'BulkVariableFactory',
    'UpdateScheduler',
    'DataChangeLogger',
]
