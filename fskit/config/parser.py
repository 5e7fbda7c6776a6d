"""YAML configuration parser for fskit.

This module provides parsing and validation for fskit.yaml configuration files.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from fskit.core.exceptions import ConfigurationError
from fskit.core.hasher import DEFAULT_ALGORITHM, check_algorithm
from fskit.core.reverse_reader import DEFAULT_CHUNK_SIZE
from fskit.core.temp import DEFAULT_MAX_ATTEMPTS, DEFAULT_PREFIX, TempRegistry

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "fskit.yaml"


class ConfigError(ConfigurationError):
    """Configuration parsing or validation error."""

    pass


@dataclass
class TempConfig:
    """Temp registry configuration."""

    dir: Optional[str] = None  # None means the system temp dir
    prefix: str = DEFAULT_PREFIX
    max_attempts: int = DEFAULT_MAX_ATTEMPTS


@dataclass
class ReaderConfig:
    """Reverse reader configuration."""

    newline: str = "\n"
    chunk_size: int = DEFAULT_CHUNK_SIZE


@dataclass
class HasherConfig:
    """Directory hasher configuration."""

    algorithm: str = DEFAULT_ALGORITHM


@dataclass
class FskitConfig:
    """Complete fskit configuration."""

    version: int = 1
    temp: TempConfig = field(default_factory=TempConfig)
    reader: ReaderConfig = field(default_factory=ReaderConfig)
    hasher: HasherConfig = field(default_factory=HasherConfig)


def parse_config(config_path: Path) -> FskitConfig:
    """
    Parse fskit.yaml configuration file.

    Args:
        config_path: Path to fskit.yaml

    Returns:
        Parsed and validated configuration; an empty file yields defaults

    Raises:
        ConfigError: If configuration is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        logger.debug(f"Configuration file {config_path} is empty, using defaults")
        return FskitConfig()

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    return _parse_and_validate(data)


def load_config(config_path: Optional[Path] = None) -> FskitConfig:
    """
    Load configuration from an explicit path or ./fskit.yaml.

    An explicit path must exist. Without one, ./fskit.yaml is used when
    present and defaults otherwise.
    """
    if config_path is not None:
        return parse_config(Path(config_path))

    default_path = Path.cwd() / DEFAULT_CONFIG_NAME
    if default_path.exists():
        return parse_config(default_path)

    logger.debug("No config file found, using defaults")
    return FskitConfig()


def create_registry(config: FskitConfig) -> TempRegistry:
    """Create a temp registry honoring the temp section of the configuration."""
    try:
        return TempRegistry(
            base_dir=config.temp.dir,
            prefix=config.temp.prefix,
            max_attempts=config.temp.max_attempts,
        )
    except ConfigurationError as e:
        raise ConfigError(f"temp.dir: {e}") from e


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _positive_int(section: dict, key: str, default: int, where: str) -> int:
    value = section.get(key, default)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{where}.{key} must be a positive integer, got {value!r}")
    return value


def _parse_and_validate(data: dict) -> FskitConfig:
    """Parse and validate configuration data."""
    version = data.get("version", 1)
    if version != 1:
        raise ConfigError(f"Unsupported version: {version} (expected 1)")

    temp_data = _section(data, "temp")
    temp_dir = temp_data.get("dir")
    if temp_dir is not None and not isinstance(temp_dir, str):
        raise ConfigError(f"temp.dir must be a string, got {temp_dir!r}")
    prefix = temp_data.get("prefix", DEFAULT_PREFIX)
    if not isinstance(prefix, str) or not prefix:
        raise ConfigError(f"temp.prefix must be a non-empty string, got {prefix!r}")
    temp = TempConfig(
        dir=temp_dir,
        prefix=prefix,
        max_attempts=_positive_int(
            temp_data, "max_attempts", DEFAULT_MAX_ATTEMPTS, "temp"
        ),
    )

    reader_data = _section(data, "reader")
    newline = reader_data.get("newline", "\n")
    if not isinstance(newline, str) or not newline:
        raise ConfigError(f"reader.newline must be a non-empty string, got {newline!r}")
    reader = ReaderConfig(
        newline=newline,
        chunk_size=_positive_int(reader_data, "chunk_size", DEFAULT_CHUNK_SIZE, "reader"),
    )

    hasher_data = _section(data, "hasher")
    algorithm = hasher_data.get("algorithm", DEFAULT_ALGORITHM)
    if not isinstance(algorithm, str):
        raise ConfigError(f"hasher.algorithm must be a string, got {algorithm!r}")
    try:
        check_algorithm(algorithm)
    except ConfigurationError as e:
        raise ConfigError(f"hasher.algorithm is not supported: {algorithm!r}") from e
    hasher = HasherConfig(algorithm=algorithm)

    return FskitConfig(version=version, temp=temp, reader=reader, hasher=hasher)
