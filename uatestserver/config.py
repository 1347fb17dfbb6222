"""
Test server configuration loader.

Configuration is a plain dictionary. Defaults reproduce the behavior of
the command line server; an optional JSON file is merged over them and
command line options are applied last.
"""

import copy
import json
from pathlib import Path
from typing import Any, Optional

from .logging import log_info, log_error
from .types import FailurePolicy


def get_default_config() -> dict:
    """
    Get default configuration.

    Returns:
        Default configuration dictionary
    """
    return {
        "server": {
            "name": "FreeOpcUa Test Server",
            "endpoint_url": "opc.tcp://0.0.0.0:4841/freeopcua/server",
            "application_uri": "urn://exampleserver.freeopcua.github.io",
            "product_uri": "urn://exampleserver.freeopcua.github.io",
        },
        "address_space": {
            "namespace_uri": "http://examples.freeopcua.github.io",
            "namespace_index": 2,
            "fixed_object_id": 99,
            "bulk_object_id": 100,
            "object_count": 1000,
        },
        "update": {
            "cycle_time_ms": 2000,
            "failure_policy": FailurePolicy.FAIL_FAST.value,
            "log_data_changes": False,
        },
        "export": {
            "enabled": False,
            "path": "testServer.db",
        },
        "verbosity": 0,
    }


def load_config(config_path: Optional[str] = None) -> Optional[dict]:
    """
    Load configuration, optionally merging a JSON file over the defaults.

    Args:
        config_path: Path to configuration file, or None for defaults only

    Returns:
        Configuration dictionary or None if loading fails
    """
    config = get_default_config()
    if config_path is None:
        return config

    try:
        path = Path(config_path)
        if not path.exists():
            log_error(f"Configuration file not found: {config_path}")
            return None

        with open(path, 'r') as f:
            raw_config = json.load(f)

        if not isinstance(raw_config, dict):
            log_error("Configuration file must contain a JSON object")
            return None

        _merge(config, raw_config)

        if not validate_config(config):
            return None

        log_info(f"Configuration loaded from {config_path}")
        return config

    except json.JSONDecodeError as e:
        log_error(f"Invalid JSON in configuration file: {e}")
        return None
    except OSError as e:
        log_error(f"Failed to load configuration: {e}")
        return None


def _merge(base: dict, override: dict) -> None:
    """Recursively merge ``override`` into ``base`` in place."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)


def validate_config(config: dict) -> bool:
    """
    Validate configuration structure and values.

    Returns:
        True if configuration is valid
    """
    required_sections = ["server", "address_space", "update", "export"]

    for section in required_sections:
        if not isinstance(config.get(section), dict):
            log_error(f"Missing required configuration section: {section}")
            return False

    if not config["server"].get("endpoint_url"):
        log_error("Missing server.endpoint_url in configuration")
        return False

    address_space = config["address_space"]
    if not address_space.get("namespace_uri"):
        log_error("Missing address_space.namespace_uri in configuration")
        return False

    if not _is_int(address_space.get("object_count")) or address_space["object_count"] < 0:
        log_error("address_space.object_count must be a non-negative integer")
        return False

    if address_space.get("fixed_object_id") == address_space.get("bulk_object_id"):
        log_error("address_space.fixed_object_id and bulk_object_id must differ")
        return False

    update = config["update"]
    if not _is_int(update.get("cycle_time_ms")) or update["cycle_time_ms"] < 0:
        log_error("update.cycle_time_ms must be a non-negative integer")
        return False

    try:
        FailurePolicy.from_string(str(update.get("failure_policy", "")))
    except ValueError as e:
        log_error(str(e))
        return False

    return True


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def apply_cli_overrides(config: dict, args: Any) -> dict:
    """
    Apply parsed command line options to a configuration.

    Only options that were given on the command line (not None) override
    the configuration.

    Args:
        config: Configuration dictionary, modified in place
        args: Namespace from the CLI parser

    Returns:
        The updated configuration
    """
    if getattr(args, "count", None) is not None:
        config["address_space"]["object_count"] = max(args.count, 0)
    if getattr(args, "cycle_ms", None) is not None:
        config["update"]["cycle_time_ms"] = max(args.cycle_ms, 0)
    if getattr(args, "verbose", None) is not None:
        config["verbosity"] = args.verbose
    if getattr(args, "export", False):
        config["export"]["enabled"] = True
    return config
