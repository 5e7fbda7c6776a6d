"""
Temporary file and directory management.

``TempRegistry`` creates uniquely named temp files and directories and
tracks every one of them so they can be removed in a single sweep. The
first registration installs an at-exit hook that runs the sweep once
during normal interpreter shutdown; callers can also run it explicitly
(or use the registry as a context manager) at a controlled point.

The registry is not thread-safe. Hosts sharing one registry between
threads must serialize ``register_entity`` and ``cleanup`` themselves.
"""

import atexit
import logging
import os
import secrets
import string
import tempfile
from typing import Callable, Dict, List, Optional, Union

from fskit.core import paths
from fskit.core.entity import Check, DirEntity, Entity, FileEntity
from fskit.core.exceptions import (
    ConfigurationError,
    EntityCreationError,
    EntityError,
    NameGenerationExhaustedError,
)
from fskit.core.paths import PathArg

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_PREFIX = "tmp"
TOKEN_LENGTH = 10

_TOKEN_ALPHABET = string.ascii_letters + string.digits


def random_token(length: int = TOKEN_LENGTH) -> str:
    """Generate a random alphanumeric token."""
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


class TempRegistry:
    """
    Creates and tracks temporary entities for guaranteed removal.

    Example:
        >>> registry = TempRegistry()
        >>> workdir = registry.create_dir("build")
        >>> report = registry.create_file("report.txt")
        >>> report.write("done")
        >>> registry.cleanup()
        True
    """

    def __init__(
        self,
        base_dir: Optional[PathArg] = None,
        token_factory: Callable[[], str] = random_token,
        prefix: str = DEFAULT_PREFIX,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """
        Initialize registry.

        Args:
            base_dir: Directory to create entities in (default: system temp dir)
            token_factory: Produces the random part of generated names
            prefix: Default prefix for create_dir
            max_attempts: Default number of names to try per creation

        Raises:
            ConfigurationError: If base_dir is not a readable, writable directory
        """
        self._base_dir = ""
        self._entities: Dict[str, Entity] = {}
        self._hook_installed = False
        self._last_errors: Dict[str, str] = {}
        self.token_factory = token_factory
        self.prefix = prefix
        self.max_attempts = max_attempts
        self.set_base_dir(base_dir)

    # ------------------------------------------------------------------
    # Base directory
    # ------------------------------------------------------------------

    def set_base_dir(self, path: Optional[PathArg] = None) -> None:
        """
        Override the directory temp entities are created in.

        Args:
            path: Directory to use, or None to use the system temp dir

        Raises:
            ConfigurationError: If path is not a readable, writable directory
        """
        if path is None or os.fspath(path) == "":
            self._base_dir = ""
            return

        directory = DirEntity(path)
        result = directory.test(Check.EXISTS | Check.READABLE | Check.WRITABLE)
        if not result:
            raise ConfigurationError(f"invalid temp directory; {result.error}")
        self._base_dir = directory.path
        logger.debug(f"Temp base directory set to {self._base_dir}")

    def get_base_dir(self) -> str:
        """Get the directory temp entities are created in."""
        return self._base_dir or tempfile.gettempdir()

    @property
    def base_dir(self) -> str:
        return self.get_base_dir()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _candidate(self, name: str) -> str:
        base = self.get_base_dir().rstrip(paths.SEPARATOR)
        return f"{base}{paths.SEPARATOR}{name}"

    def create_dir(
        self,
        prefix: Optional[str] = None,
        mode: int = 0o777,
        max_attempts: Optional[int] = None,
    ) -> DirEntity:
        """
        Create a uniquely named temp directory.

        Args:
            prefix: Directory name prefix (sanitized; default: registry prefix)
            mode: Permissions for the new directory
            max_attempts: Number of names to try (default: registry setting)

        Returns:
            The registered directory entity

        Raises:
            NameGenerationExhaustedError: If every candidate name was taken
            EntityCreationError: If creation fails for another reason
        """
        prefix = paths.sanitize_name(self.prefix if prefix is None else prefix)
        if max_attempts is None:
            max_attempts = self.max_attempts
        for attempt in range(1, max_attempts + 1):
            path = self._candidate(f"{prefix}-{self.token_factory()}")
            try:
                os.mkdir(path, mode)
            except FileExistsError:
                logger.debug(f"Temp dir name collision on attempt {attempt}: {path}")
                continue
            except OSError as e:
                raise EntityCreationError(
                    f"failed to create temp directory '{path}'; {e.strerror}", path
                ) from e

            directory = DirEntity(path)
            self.register_entity(directory)
            return directory

        raise NameGenerationExhaustedError("directory", prefix, max_attempts)

    def create_file(
        self, name: str, max_attempts: Optional[int] = None
    ) -> FileEntity:
        """
        Create a uniquely named, empty temp file.

        The random token goes between the stem and the extension, e.g.
        ``report.txt`` becomes ``report-Xy12AbC9zq.txt``. An existing file
        is never reused; a taken name counts as a failed attempt.

        Args:
            name: Filename to derive the temp name from (sanitized)
            max_attempts: Number of names to try (default: registry setting)

        Returns:
            The registered file entity

        Raises:
            NameGenerationExhaustedError: If every candidate name was taken
            EntityCreationError: If creation fails for another reason
        """
        name = paths.sanitize_name(name)
        if max_attempts is None:
            max_attempts = self.max_attempts
        head, sep, base = name.rpartition(paths.SEPARATOR)
        stem, extension = paths.split_name(base)
        if extension:
            extension = "." + extension

        for attempt in range(1, max_attempts + 1):
            path = self._candidate(
                f"{head}{sep}{stem}-{self.token_factory()}{extension}"
            )
            try:
                fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o666)
            except FileExistsError:
                logger.debug(f"Temp file name collision on attempt {attempt}: {path}")
                continue
            except OSError as e:
                raise EntityCreationError(
                    f"failed to create temp file '{path}'; {e.strerror}", path
                ) from e
            os.close(fd)

            file = FileEntity(path)
            self.register_entity(file)
            return file

        raise NameGenerationExhaustedError("file", name, max_attempts)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_entity(self, entity: Entity) -> None:
        """
        Track an entity for removal during cleanup.

        Registering a path again replaces the previous entity. The first
        registration installs the at-exit cleanup hook.
        """
        if not self._hook_installed:
            atexit.register(self.cleanup)
            self._hook_installed = True
            logger.debug("Installed temp cleanup hook")
        self._entities[entity.path] = entity
        logger.debug(f"Registered temp entity {entity.path}")

    def unregister(self, entity: Union[Entity, PathArg]) -> bool:
        """Stop tracking an entity without removing it."""
        return self._entities.pop(os.fspath(entity), None) is not None

    def remove(self, entity: Union[Entity, PathArg]) -> None:
        """
        Remove a tracked entity now and stop tracking it.

        Raises:
            KeyError: If the entity is not tracked
            EntityRemovalError: If removal fails (the entity stays tracked)
        """
        path = os.fspath(entity)
        self._entities[path].remove()
        del self._entities[path]

    @property
    def registered_paths(self) -> List[str]:
        return list(self._entities)

    @property
    def last_errors(self) -> Dict[str, str]:
        """Failure messages from the most recent cleanup, keyed by path."""
        return dict(self._last_errors)

    def __len__(self):
        return len(self._entities)

    def __contains__(self, entity):
        return os.fspath(entity) in self._entities

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def cleanup(self) -> bool:
        """
        Remove all tracked entities.

        Every entity is attempted even if an earlier one fails. The
        registry is empty afterwards regardless of the outcome.

        Returns:
            True if every entity was removed
        """
        success = True
        errors: Dict[str, str] = {}
        for path, entity in self._entities.items():
            try:
                entity.remove()
            except EntityError as e:
                logger.warning(f"Failed to remove temp entity {path}: {e}")
                errors[path] = str(e)
                success = False

        if self._entities:
            logger.debug(
                f"Temp cleanup removed {len(self._entities) - len(errors)} "
                f"of {len(self._entities)} entities"
            )
        self._entities = {}
        self._last_errors = errors
        return success

    def close(self) -> bool:
        """Run cleanup and uninstall the at-exit hook."""
        result = self.cleanup()
        if self._hook_installed:
            atexit.unregister(self.cleanup)
            self._hook_installed = False
        return result

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


_default_registry: Optional[TempRegistry] = None


def get_default_registry() -> TempRegistry:
    """Get a lazily created registry shared by callers that do not inject one."""
    global _default_registry
    if _default_registry is None:
        _default_registry = TempRegistry()
    return _default_registry
