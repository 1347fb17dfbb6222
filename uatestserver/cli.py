"""
Command line entry point.

Options follow the original getopt interface: unknown options are
ignored and numeric values are read like C ``atoi``.
"""

import argparse
import asyncio
import re
import signal
from typing import Optional, Sequence

from .config import apply_cli_overrides, load_config
from .errors import ExportIOFailure
from .export import ExportEmitter
from .logging import configure_logging, log_info, log_error
from .server import ServerManager


HELP = (
    "testServer [OPTIONS]\n"
    "-h:   show help\n"
    "-n N: number of opcua items for ManyObjects (1000)\n"
    "-t N: Update time (2000ms)\n"
    "-v N: verbosity, >1 enables OPC UA stack debug output (0)\n"
    "-e:   create testServer.db file for ManyObjects\n"
    "-c F: JSON configuration file\n"
    "Test variables:\n"
    "  NewObject.MyStringVar\n"
    "  NewObject.MyVariable\n"
    "  NewObject.MyProperty\n"
    "  NewObject.MyArrayVar\n"
    "  NewObject.MyBool\n"
    "  ManyObjects.var1 ... ManyObjects.varN\n"
)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def atoi(text: str) -> int:
    """Parse the leading integer of ``text``, 0 if there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="testServer", add_help=False)
    parser.add_argument("-h", dest="help", action="store_true")
    parser.add_argument("-n", dest="count", type=atoi, nargs="?", const=None)
    parser.add_argument("-t", dest="cycle_ms", type=atoi, nargs="?", const=None)
    parser.add_argument("-v", dest="verbose", type=atoi, nargs="?", const=None)
    parser.add_argument("-e", dest="export", action="store_true")
    parser.add_argument("-c", dest="config", nargs="?", const=None)
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse known options, silently dropping everything else."""
    args, _unknown = build_parser().parse_known_args(argv)
    return args


async def _serve(manager: ServerManager) -> None:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGTERM, manager.stop)
    except (NotImplementedError, RuntimeError):
        pass
    await manager.run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the test server.

    Returns:
        Always 0, failures are reported on stdout
    """
    args = parse_args(argv)
    if args.help:
        print(HELP, end="")
        return 0

    configure_logging(args.verbose or 0)

    config = load_config(args.config)
    if config is None:
        log_error("Failed to load configuration")
        return 0
    apply_cli_overrides(config, args)
    configure_logging(config["verbosity"])

    count = config["address_space"]["object_count"]
    log_info(f"Create ManyObjects:var1 to ManyObjects:var{count}")
    log_info(f"Update (ms): {config['update']['cycle_time_ms']}")

    export_config = config["export"]
    if export_config.get("enabled"):
        emitter = ExportEmitter(config["address_space"].get("namespace_index", 2))
        try:
            emitter.write_file(count, export_config.get("path", "testServer.db"))
        except ExportIOFailure as e:
            log_error(str(e))

    manager = ServerManager(config)
    try:
        asyncio.run(_serve(manager))
    except KeyboardInterrupt:
        log_info("Server stopped")
    except Exception as exc:
        log_error(f"Catch:{exc}")
    return 0
