"""
Core functionality for fskit.

This package contains the path algorithms, filesystem entities, reverse
reader, directory hasher and temp registry.
"""

from .exceptions import (
    FskitError,
    ConfigurationError,
    EnvironmentUnavailableError,
    EntityError,
    EntityReadError,
    EntityWriteError,
    EntityRemovalError,
    EntityCreationError,
    ResourceExhaustedError,
    NameGenerationExhaustedError,
    IntegrityError,
    DuplicateFileError,
)

from .paths import (
    normalize,
    normalize_to,
    is_absolute,
    get_parent,
    relative_path,
    dirname,
    basename,
    sanitize_name,
    split_name,
    get_extension,
    format_size,
)

from .entity import (
    Check,
    CheckResult,
    check_path,
    DirectoryEntry,
    Entity,
    FileEntity,
    DirEntity,
    file_entity,
    dir_entity,
    entity_from_entry,
)

from .reverse_reader import ReverseReader

from .hasher import DirectoryHasher, check_algorithm, compute_file_hash, hash_directory

from .temp import TempRegistry, get_default_registry

from .locator import GenericLocator

__all__ = [
    "FskitError",
    "ConfigurationError",
    "EnvironmentUnavailableError",
    "EntityError",
    "EntityReadError",
    "EntityWriteError",
    "EntityRemovalError",
    "EntityCreationError",
    "ResourceExhaustedError",
    "NameGenerationExhaustedError",
    "IntegrityError",
    "DuplicateFileError",
    "normalize",
    "normalize_to",
    "is_absolute",
    "get_parent",
    "relative_path",
    "dirname",
    "basename",
    "sanitize_name",
    "split_name",
    "get_extension",
    "format_size",
    "Check",
    "CheckResult",
    "check_path",
    "DirectoryEntry",
    "Entity",
    "FileEntity",
    "DirEntity",
    "file_entity",
    "dir_entity",
    "entity_from_entry",
    "ReverseReader",
    "DirectoryHasher",
    "compute_file_hash",
    "hash_directory",
    "TempRegistry",
    "get_default_registry",
    "GenericLocator",
]
