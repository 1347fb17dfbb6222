"""
Centralized logging module for the test server.

This module provides a singleton logger on top of the standard logging
package, writing to standard output so operators see startup messages and
failures in the same stream.
"""

from typing import Optional
import logging
import sys


LOGGER_NAME = "uatestserver"
LOG_FORMAT = '[%(levelname)s] %(asctime)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'


class ServerLogger:
    """
    Singleton logger for the test server.

    Wraps a stdlib logger and maps the command line verbosity onto
    logger levels for this package and for asyncua.
    """

    _instance: Optional['ServerLogger'] = None

    def __init__(self):
        self._logger = logging.getLogger(LOGGER_NAME)
        self._handler: Optional[logging.Handler] = None
        self.verbosity = 0

    @classmethod
    def get_instance(cls) -> 'ServerLogger':
        """Get the singleton logger instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance. Useful for testing."""
        if cls._instance is not None and cls._instance._handler is not None:
            cls._instance._logger.removeHandler(cls._instance._handler)
        cls._instance = None

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def configure(self, verbosity: int = 0, stream=None) -> None:
        """
        Attach the stdout handler and apply the verbosity level.

        Args:
            verbosity: 0 logs info and above, 1 adds debug output from this
                package, anything above 1 also enables asyncua debug tracing
            stream: Output stream, defaults to sys.stdout
        """
        self.verbosity = verbosity

        if self._handler is not None:
            self._logger.removeHandler(self._handler)
        self._handler = logging.StreamHandler(stream or sys.stdout)
        self._handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        self._logger.addHandler(self._handler)
        self._logger.propagate = False

        self._logger.setLevel(logging.DEBUG if verbosity >= 1 else logging.INFO)

        lib_level = logging.DEBUG if verbosity > 1 else logging.WARNING
        logging.getLogger("asyncua").setLevel(lib_level)

    def debug(self, message: str) -> None:
        self._logger.debug(message)

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warn(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)


# Module-level convenience functions
def get_logger() -> ServerLogger:
    """Get the singleton logger instance."""
    return ServerLogger.get_instance()


def configure_logging(verbosity: int = 0, stream=None) -> None:
    get_logger().configure(verbosity, stream)


def log_debug(message: str) -> None:
    get_logger().debug(message)


def log_info(message: str) -> None:
    """Log an informational message."""
    get_logger().info(message)


def log_warn(message: str) -> None:
    """Log a warning message."""
    get_logger().warn(message)


def log_error(message: str) -> None:
    """Log an error message."""
    get_logger().error(message)
