"""
Shared utilities for CLI commands.
"""

import logging

from fskit.config.parser import FskitConfig, load_config

logger = logging.getLogger(__name__)


def get_config(args) -> FskitConfig:
    """
    Load the configuration selected by the global --config option.

    Args:
        args: Parsed command-line arguments

    Returns:
        Configuration from --config, ./fskit.yaml, or defaults

    Raises:
        ConfigError: If the configuration file is missing or invalid
    """
    config_path = getattr(args, "config", None)
    config = load_config(config_path)
    logger.debug(f"Loaded configuration: {config}")
    return config


def decode_escapes(value: str) -> str:
    """Decode backslash escapes such as '\\r\\n' typed on the command line."""
    return value.encode("latin-1", "backslashreplace").decode("unicode_escape")
