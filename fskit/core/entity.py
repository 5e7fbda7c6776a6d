"""
Filesystem entities for fskit.

A file or directory is represented by an entity wrapping its path. Entities
never cache existence or metadata; every query goes back to the operating
system. The two concrete variants share the ``Entity`` base contract:

- ``FileEntity``: byte size, read/write/append/prepend, line counting
- ``DirEntity``: listing, traversal, recursive removal

Failures of fallible operations are raised as ``EntityError`` subclasses.
Permission and type checks (``test``, ``can_write``) return values instead.
"""

import enum
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from fskit.core import paths
from fskit.core.exceptions import (
    EntityReadError,
    EntityRemovalError,
    EntityWriteError,
)
from fskit.core.paths import PathArg
from fskit.core.reverse_reader import DEFAULT_CHUNK_SIZE, ReverseReader

logger = logging.getLogger(__name__)

Contents = Union[str, bytes]


# ============================================================================
# Entity Testing
# ============================================================================


class Check(enum.IntFlag):
    """Predicates understood by ``check_path`` and ``Entity.test``."""

    EXISTS = 1
    DIR = 2
    FILE = 4
    READABLE = 8
    WRITABLE = 16
    EXECUTABLE = 32


class CheckResult:
    """Result of testing a path against a set of predicates."""

    def __init__(self, passed: bool, error: Optional[str] = None):
        self.passed = passed
        self.error = error

    def __bool__(self):
        """Allow using result in boolean context."""
        return self.passed

    def __str__(self):
        return "passed" if self.passed else f"failed: {self.error}"

    def __repr__(self):
        return f"CheckResult(passed={self.passed!r}, error={self.error!r})"


def check_path(path: PathArg, opts: Check) -> CheckResult:
    """
    Test a path against type and permission predicates.

    Predicates are evaluated in a fixed order (exists, file, directory,
    readable, writable, executable) and the first failing one is reported.

    Args:
        path: Path to test
        opts: Combination of ``Check`` flags

    Returns:
        CheckResult describing the first failure, if any

    Example:
        >>> result = check_path("/etc/hosts", Check.EXISTS | Check.WRITABLE)
        >>> if not result:
        ...     print(result.error)
    """
    path = os.fspath(path)
    if opts & Check.EXISTS and not os.path.exists(path):
        return CheckResult(False, f"'{path}' does not exist")
    if opts & Check.FILE and not os.path.isfile(path):
        return CheckResult(False, f"'{path}' is not a file")
    if opts & Check.DIR and not os.path.isdir(path):
        return CheckResult(False, f"'{path}' is not a directory")
    if opts & Check.READABLE and not os.access(path, os.R_OK):
        return CheckResult(False, f"'{path}' is not readable")
    if opts & Check.WRITABLE and not os.access(path, os.W_OK):
        return CheckResult(False, f"'{path}' is not writable")
    if opts & Check.EXECUTABLE and not os.access(path, os.X_OK):
        return CheckResult(False, f"'{path}' is not executable")
    return CheckResult(True)


# ============================================================================
# Directory Listing
# ============================================================================


@dataclass(frozen=True)
class DirectoryEntry:
    """
    A single child found while listing a directory.

    ``path`` is built from ``parent`` and ``name``; ``real_path`` is the
    fully resolved location. The two differ for symlinked entries.
    """

    path: str
    parent: str
    name: str
    is_file: bool
    is_dir: bool
    is_symlink: bool
    real_path: str


def _join(parent: str, name: str) -> str:
    if parent.endswith(paths.SEPARATOR):
        return parent + name
    return f"{parent}{paths.SEPARATOR}{name}"


# ============================================================================
# Entities
# ============================================================================


class Entity(ABC):
    """Base class for filesystem entities."""

    # Predicate implied by the entity type when testing
    implied_check = Check(0)

    def __init__(self, path: PathArg):
        self._path = os.fspath(path)

    @property
    def path(self) -> str:
        """The path as provided to the constructor."""
        return self._path

    @property
    def dirname(self) -> str:
        return paths.dirname(self._path)

    @property
    def basename(self) -> str:
        return paths.basename(self._path)

    def __str__(self):
        return self._path

    def __fspath__(self):
        return self._path

    def __repr__(self):
        return f"{type(self).__name__}({self._path!r})"

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._path == other._path

    def __hash__(self):
        return hash((type(self).__name__, self._path))

    def is_dir(self) -> bool:
        return isinstance(self, DirEntity)

    def is_file(self) -> bool:
        return isinstance(self, FileEntity)

    def exists(self) -> bool:
        return os.path.exists(self._path)

    def is_absolute(self) -> bool:
        return paths.is_absolute(self._path)

    def test(self, opts: Check) -> CheckResult:
        """
        Perform type/permission tests on the entity.

        The entity type adds its own predicate, so a ``FileEntity`` fails
        when the path is a directory and vice versa.
        """
        return check_path(self._path, opts | self.implied_check)

    def get_parent(self) -> Optional["DirEntity"]:
        """Get the parent directory, or None for the root and bare names."""
        parent = paths.get_parent(self._path)
        if parent is None:
            return None
        return DirEntity(parent)

    def normalize(self):
        """Return a new entity of the same type with a normalized path."""
        return type(self)(paths.normalize(self._path))

    def normalize_to(self, base_dir: PathArg):
        """Return a new entity whose relative path is resolved against base_dir."""
        return type(self)(paths.normalize_to(self._path, base_dir))

    def get_relative_path(self, to_path: PathArg) -> str:
        """Get the relative path from this entity to another path."""
        return paths.relative_path(self._path, to_path)

    @abstractmethod
    def can_write(self) -> bool:
        """Determine whether the entity could be written to."""
        pass

    @abstractmethod
    def prepare_write(self, mode: int = 0o775) -> None:
        """
        Ensure the entity can be written, creating parent directories.

        Raises:
            EntityWriteError: If the entity cannot be prepared
        """
        pass

    @abstractmethod
    def remove(self) -> None:
        """
        Remove the entity from the filesystem.

        Raises:
            EntityRemovalError: If removal fails
        """
        pass


class FileEntity(Entity):
    """A regular file."""

    implied_check = Check.FILE

    def get_dir(self) -> "DirEntity":
        """Get the directory containing the file."""
        return self.get_parent() or DirEntity(paths.CURRENT_DIR)

    def can_write(self) -> bool:
        if os.path.exists(self._path):
            return bool(self.test(Check.WRITABLE))
        return self.get_dir().can_write()

    def prepare_write(self, mode: int = 0o775) -> None:
        if os.path.exists(self._path):
            result = self.test(Check.WRITABLE)
            if not result:
                raise EntityWriteError(
                    f"failed to prepare '{self._path}' for writing; {result.error}",
                    self._path,
                )
            return

        try:
            self.get_dir().prepare_write(mode)
        except EntityWriteError as e:
            raise EntityWriteError(
                f"failed to prepare '{self._path}' for writing; {e}", self._path
            ) from e

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def get_extension(self, default: str = "") -> str:
        return paths.get_extension(self._path, default)

    def has_extension(self, extension: str) -> bool:
        """Case-insensitive extension comparison."""
        return self.get_extension().lower() == extension.lower()

    def split_name(self, default_extension: str = "") -> Tuple[str, str]:
        return paths.split_name(self._path, default_extension)

    # ------------------------------------------------------------------
    # Size
    # ------------------------------------------------------------------

    def get_byte_size(self) -> int:
        """
        Get the size of the file in bytes.

        Raises:
            EntityReadError: If the file is missing or unreadable
        """
        result = self.test(Check.EXISTS | Check.READABLE)
        if not result:
            raise EntityReadError(
                f"failed to stat filesize; {result.error}", self._path
            )
        try:
            return os.path.getsize(self._path)
        except OSError as e:
            raise EntityReadError(
                f"failed to stat filesize for '{self._path}'; {e.strerror}",
                self._path,
            ) from e

    def get_size(self, precision: int = 0, point: str = ".", sep: str = ",") -> str:
        """Get the file size as a human readable string."""
        return paths.format_size(self.get_byte_size(), precision, point, sep)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_bytes(self, offset: int = 0) -> bytes:
        """
        Read the raw contents of the file starting at a byte offset.

        Raises:
            EntityReadError: If the file cannot be read
        """
        result = self.test(Check.EXISTS | Check.READABLE)
        if not result:
            raise EntityReadError(f"failed to read file; {result.error}", self._path)
        try:
            with open(self._path, "rb") as f:
                if offset:
                    f.seek(offset)
                return f.read()
        except OSError as e:
            raise EntityReadError(
                f"read operation failed on '{self._path}'; {e.strerror}", self._path
            ) from e

    def read(self, offset: int = 0, encoding: str = "utf-8") -> str:
        """Read the contents of the file as text."""
        return self.read_bytes(offset).decode(encoding)

    def get_line_count(self, newline: Contents = b"\n", chunk_size: int = 8192) -> int:
        """
        Count the newline sequences in the file.

        The file is scanned in chunks, so multi-character newlines that
        straddle a chunk boundary are still counted once.
        """
        if isinstance(newline, str):
            newline = newline.encode("utf-8")
        overlap = len(newline) - 1

        count = 0
        tail = b""
        try:
            with open(self._path, "rb") as f:
                while chunk := f.read(chunk_size):
                    window = tail + chunk
                    count += window.count(newline)
                    tail = window[-overlap:] if overlap else b""
        except OSError as e:
            raise EntityReadError(
                f"failed to count lines in '{self._path}'; {e.strerror}", self._path
            ) from e
        return count

    def reverse_lines(
        self,
        newline: str = "\n",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        encoding: Optional[str] = "utf-8",
    ) -> ReverseReader:
        """Create a reader yielding the file's lines from last to first."""
        return ReverseReader(self._path, newline, chunk_size, encoding)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    @staticmethod
    def _encode(contents: Contents, encoding: str) -> bytes:
        if isinstance(contents, str):
            return contents.encode(encoding)
        return contents

    def _write(self, data: bytes, mode: str) -> None:
        try:
            with open(self._path, mode) as f:
                f.write(data)
        except OSError as e:
            raise EntityWriteError(
                f"failed to write '{self._path}'; {e.strerror}", self._path
            ) from e

    def write(self, contents: Contents, encoding: str = "utf-8") -> None:
        """
        Prepare the parent directory and replace the file's contents.

        Raises:
            EntityWriteError: If the file cannot be written
        """
        try:
            self.prepare_write()
        except EntityWriteError as e:
            raise EntityWriteError(
                f"failed to write '{self._path}'; {e}", self._path
            ) from e
        self._write(self._encode(contents, encoding), "wb")

    def append(self, contents: Contents, encoding: str = "utf-8") -> None:
        """Append to the file, creating it if needed."""
        try:
            self.prepare_write()
        except EntityWriteError as e:
            raise EntityWriteError(
                f"failed to append to '{self._path}'; {e}", self._path
            ) from e
        self._write(self._encode(contents, encoding), "ab")

    def prepend(
        self, contents: Contents, max_memory: int = 8096, encoding: str = "utf-8"
    ) -> None:
        """
        Insert contents at the start of an existing file.

        When the resulting file would exceed ``max_memory`` bytes, the file
        is streamed into a sibling temp file which then replaces the
        original, so the old contents are never fully held in memory.

        Raises:
            EntityWriteError: If the file is missing, unreadable or unwritable
        """
        result = self.test(Check.EXISTS | Check.READABLE | Check.WRITABLE)
        if not result:
            raise EntityWriteError(
                f"failed to prepend file; {result.error}", self._path
            )

        data = self._encode(contents, encoding)
        if len(data) + os.path.getsize(self._path) > max_memory:
            self._prepend_streaming(data)
            return

        self._write(data + self.read_bytes(), "wb")

    def _prepend_streaming(self, data: bytes) -> None:
        target = Path(self._path)
        # Same directory so the final rename stays on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        temp_path = Path(temp_path_str)
        try:
            with open(temp_fd, "wb") as out, target.open("rb") as src:
                out.write(data)
                shutil.copyfileobj(src, out)
            shutil.copymode(target, temp_path)
            temp_path.replace(target)
        except OSError as e:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                logger.warning(f"Could not remove temp file {temp_path}")
            raise EntityWriteError(
                f"failed to prepend '{self._path}'; {e.strerror}", self._path
            ) from e

    def remove(self) -> None:
        try:
            os.unlink(self._path)
        except OSError as e:
            raise EntityRemovalError(
                f"failed to delete '{self._path}'; {e.strerror}", self._path
            ) from e
        logger.debug(f"Removed file {self._path}")


class DirEntity(Entity):
    """A directory."""

    implied_check = Check.DIR

    def can_write(self) -> bool:
        """Check whether the nearest existing ancestor is writable."""
        path = self._path or paths.CURRENT_DIR
        while not os.path.exists(path):
            parent = paths.dirname(path)
            if parent == path:
                break
            path = parent
        return bool(DirEntity(path).test(Check.WRITABLE))

    def prepare_write(self, mode: int = 0o775) -> None:
        if os.path.exists(self._path):
            result = self.test(Check.WRITABLE)
            if not result:
                raise EntityWriteError(
                    f"failed to prepare '{self._path}' for writing; {result.error}",
                    self._path,
                )
            return

        try:
            os.makedirs(self._path, mode, exist_ok=True)
        except OSError as e:
            raise EntityWriteError(
                f"failed to create directory '{self._path}'; {e.strerror}",
                self._path,
            ) from e
        logger.debug(f"Created directory {self._path}")

    def get_file(self, name: str) -> FileEntity:
        """Get a file entity for a name inside this directory."""
        return FileEntity(_join(self._path, name))

    def get_dir(self, name: str) -> "DirEntity":
        """Get a directory entity for a name inside this directory."""
        return DirEntity(_join(self._path, name))

    def is_empty(self) -> bool:
        """
        Determine whether the directory has no children.

        Raises:
            EntityReadError: If the directory does not exist or is unreadable
        """
        result = self.test(Check.EXISTS | Check.READABLE)
        if not result:
            raise EntityReadError(
                f"failed to determine if a directory is empty; {result.error}",
                self._path,
            )
        return next(Path(self._path).iterdir(), None) is None

    def list_names(self) -> List[str]:
        """Get the sorted names of the directory's children."""
        try:
            return sorted(child.name for child in Path(self._path).iterdir())
        except OSError as e:
            raise EntityReadError(
                f"failed to list '{self._path}'; {e.strerror}", self._path
            ) from e

    def get_list(self) -> List[Entity]:
        """Get the directory's children as entities."""
        children: List[Entity] = []
        for name in self.list_names():
            child = _join(self._path, name)
            if os.path.isdir(child):
                children.append(DirEntity(child))
            else:
                children.append(FileEntity(child))
        return children

    def iter_entries(self, recursive: bool = False) -> Iterator[DirectoryEntry]:
        """
        Iterate over the directory's children.

        Entries are produced in name order, each directory before its own
        children. Symlinked directories are reported but not descended into.

        Raises:
            EntityReadError: If a directory cannot be listed
        """
        directory = Path(self._path)
        try:
            children = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise EntityReadError(
                f"failed to list '{self._path}'; {e.strerror}", self._path
            ) from e

        for child in children:
            path = _join(self._path, child.name)
            is_dir = child.is_dir()
            is_symlink = child.is_symlink()
            yield DirectoryEntry(
                path=path,
                parent=self._path,
                name=child.name,
                is_file=child.is_file(),
                is_dir=is_dir,
                is_symlink=is_symlink,
                real_path=os.path.realpath(child),
            )
            if recursive and is_dir and not is_symlink:
                yield from DirEntity(path).iter_entries(recursive=True)

    def remove(self) -> None:
        """
        Recursively remove the directory.

        Children are removed first. A symlink is unlinked without touching
        its target. Removal stops at the first failure, leaving whatever
        was already removed gone.
        """
        if os.path.islink(self._path):
            try:
                os.unlink(self._path)
            except OSError as e:
                raise EntityRemovalError(
                    f"failed to remove link '{self._path}'; {e.strerror}", self._path
                ) from e
            return

        result = self.test(Check.EXISTS | Check.READABLE | Check.WRITABLE)
        if not result:
            raise EntityRemovalError(
                f"failed to remove directory; {result.error}", self._path
            )

        for child in self.get_list():
            child.remove()

        try:
            os.rmdir(self._path)
        except OSError as e:
            raise EntityRemovalError(
                f"failed to remove directory '{self._path}'; {e.strerror}",
                self._path,
            ) from e
        logger.debug(f"Removed directory {self._path}")


# ============================================================================
# Factories
# ============================================================================


def file_entity(path: PathArg) -> FileEntity:
    """Get a file entity with a normalized path."""
    return FileEntity(paths.normalize(path))


def dir_entity(path: PathArg) -> DirEntity:
    """Get a directory entity with a normalized path."""
    return DirEntity(paths.normalize(path))


def entity_from_entry(entry: DirectoryEntry) -> Entity:
    """Create an entity for the resolved location of a listing entry."""
    if entry.is_dir:
        return DirEntity(entry.real_path)
    return FileEntity(entry.real_path)
