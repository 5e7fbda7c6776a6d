"""
Centralized exception hierarchy for fskit.

This module defines all custom exceptions used across the codebase
to provide clear exception semantics for filesystem entities, temporary
resources, directory hashing and configuration.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class FskitError(Exception):
    """Base exception for all fskit errors."""

    pass


class ConfigurationError(FskitError):
    """Raised when a caller supplies an unusable setting or callback."""

    pass


class EnvironmentUnavailableError(FskitError):
    """Raised when the process environment cannot be queried (e.g. cwd)."""

    pass


# ============================================================================
# Entity Exceptions
# ============================================================================


class EntityError(FskitError):
    """Base exception for operations on a file or directory entity."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class EntityReadError(EntityError):
    """Raised when an entity cannot be read, stat'ed or listed."""

    pass


class EntityWriteError(EntityError):
    """Raised when an entity cannot be written or prepared for writing."""

    pass


class EntityRemovalError(EntityError):
    """Raised when an entity cannot be removed."""

    pass


class EntityCreationError(EntityError):
    """Raised when a new entity cannot be created."""

    pass


# ============================================================================
# Resource Exhaustion
# ============================================================================


class ResourceExhaustedError(FskitError):
    """Base exception for bounded operations that ran out of attempts."""

    pass


class NameGenerationExhaustedError(ResourceExhaustedError):
    """Raised when no unique temp name was found within the attempt limit."""

    def __init__(self, kind: str, prefix: str, attempts: int):
        self.kind = kind
        self.prefix = prefix
        self.attempts = attempts
        super().__init__(
            f"failed to create temp {kind} '{prefix}'; "
            f"reached max number ({attempts}) of attempts"
        )


# ============================================================================
# Integrity Exceptions
# ============================================================================


class IntegrityError(FskitError):
    """Base exception for data that violates a uniqueness guarantee."""

    pass


class DuplicateFileError(IntegrityError):
    """Raised when two files map to the same case-folded hash key."""

    def __init__(self, path: str, other_path: str, key: str):
        self.path = path
        self.other_path = other_path
        self.key = key
        super().__init__(
            f"duplicate file encountered: {path} collides with {other_path} ({key})"
        )
