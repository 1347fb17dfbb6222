"""
Synthetic OPC UA test server.

This package serves a fixed set of test variables plus N bulk variables
over OPC UA and changes every value on a fixed cycle, using the asyncua
library.

Architecture:
    - cli.py: Command line entry point
    - config.py: Configuration loading and validation
    - logging.py: Centralized logging
    - errors.py: Error taxonomy
    - export.py: EPICS database export for the bulk variables
    - types/: Tagged values, handles and scheduler state
    - server/: Server lifecycle, address space and update scheduler
"""

__version__ = "1.0.0"

from .cli import main

__all__ = ['main', '__version__']
