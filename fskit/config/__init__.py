"""Configuration module for fskit.

This module provides YAML configuration parsing and validation for fskit.yaml.
"""

from fskit.config.parser import (
    TempConfig,
    ReaderConfig,
    HasherConfig,
    FskitConfig,
    ConfigError,
    parse_config,
    load_config,
    create_registry,
)

__all__ = [
    "TempConfig",
    "ReaderConfig",
    "HasherConfig",
    "FskitConfig",
    "ConfigError",
    "parse_config",
    "load_config",
    "create_registry",
]
