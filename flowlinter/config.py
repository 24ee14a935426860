"""
Configuration loading for the flow linter.

Supports YAML and JSON configuration files. The loaded mapping is passed
to the evaluation engine as is; see ``FlowEngine`` for the keys it reads.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from flowlinter.errors import ConfigError

logger = logging.getLogger(__name__)


# Default configuration file names to search for
CONFIG_FILE_NAMES = [
    ".flow-linter.yml",
    ".flow-linter.yaml",
    ".flow-linter.json",
    ".flowlinter.yml",
    ".flowlinter.yaml",
    ".flowlinter.json",
]

DEFAULT_CONFIG_FILE = ".flow-linter.yml"


def load_config(path: str) -> Dict[str, Any]:
    """
    Load configuration from a file.

    Raises ConfigError if the file is missing, cannot be parsed, or does not
    hold a mapping.
    """
    config_path = Path(path)

    if not config_path.is_file():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {config_path}: {e}") from e

    try:
        if config_path.suffix == ".json":
            data = json.loads(content)
        else:
            # YAML is a superset of JSON, so unknown suffixes go through it
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid configuration file {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")
    return data


def find_config(start_path: str = ".") -> Optional[str]:
    """
    Find a configuration file by searching up the directory tree.

    Returns the path to the first config file found, or None.
    """
    current = Path(start_path).resolve()

    while True:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.is_file():
                return str(config_path)
        if current == current.parent:
            return None
        current = current.parent


def load_scanner_options(path: Optional[str] = None, start_dir: str = ".") -> Dict[str, Any]:
    """
    Resolve the scanner options for a run.

    An explicit path must exist. Without one, the nearest config file above
    ``start_dir`` is used, and an empty mapping when there is none.
    """
    if path is None:
        path = find_config(start_dir)
        if path is None:
            logger.debug("No configuration file found, using engine defaults")
            return {}

    logger.debug("Loading configuration from %s", path)
    return load_config(path)


def create_default_config() -> str:
    """
    Create a default configuration file content.
    """
    config = {
        "rules": {
            "APIVersion": {"severity": "warning", "expression": ">=50"},
            "CopyAPIName": {"severity": "warning"},
            "DMLStatementInLoop": {"severity": "error"},
            "FlowDescription": {"severity": "warning"},
            "HardcodedId": {"severity": "error"},
            "MissingFaultPath": {"severity": "warning"},
            "SOQLQueryInLoop": {"severity": "error"},
            "UnusedVariable": {"severity": "note"},
        },
        "exceptions": {},
    }
    return yaml.safe_dump(config, default_flow_style=False, sort_keys=False)
