"""
Directory content hashing.

This module computes a reproducible fingerprint of every regular file below
a directory:

- Each file is digested individually and keyed by its lowercased path
  relative to the root, so two names differing only by case are rejected
  instead of silently merged
- Symlinked entries (whose resolved path differs from the traversal path)
  are skipped
- The sorted map is serialized as JSON and digested again to produce a
  single hash for the whole tree
"""

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Optional

from fskit.core.entity import Check, DirectoryEntry, DirEntity, dir_entity
from fskit.core.exceptions import (
    ConfigurationError,
    DuplicateFileError,
    EntityReadError,
)
from fskit.core.paths import PathArg, SEPARATOR

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "sha1"


def _new_digest(algorithm: str):
    try:
        digest = hashlib.new(algorithm)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Unsupported hash algorithm: {algorithm}") from e

    # shake_* digests need an output length for hexdigest()
    if digest.digest_size == 0:
        raise ConfigurationError(
            f"Unsupported hash algorithm: {algorithm} (variable-length digest)"
        )
    return digest


def check_algorithm(algorithm: str) -> None:
    """
    Verify that an algorithm can be used for file and directory hashes.

    Raises:
        ConfigurationError: If hashlib does not know the algorithm or its
            digest has no fixed length
    """
    _new_digest(algorithm)


def compute_file_hash(
    file_path: PathArg, algorithm: str = DEFAULT_ALGORITHM, chunk_size: int = 8192
) -> str:
    """
    Compute hash of a file.

    Memory-efficient implementation that reads file in chunks.

    Args:
        file_path: Path to file
        algorithm: Any algorithm known to hashlib ('sha1', 'sha256', 'md5')
        chunk_size: Number of bytes to read at once

    Returns:
        Hex digest of the hash

    Raises:
        ConfigurationError: If the algorithm is not supported
        EntityReadError: If the file cannot be read

    Example:
        >>> compute_file_hash('download.tar.gz', 'sha256')
        'a3d5f6e8...'
    """
    file_path = Path(file_path)
    hasher = _new_digest(algorithm)
    try:
        with file_path.open("rb") as f:
            while chunk := f.read(chunk_size):
                hasher.update(chunk)
    except OSError as e:
        raise EntityReadError(
            f"failed to hash '{file_path}'; {e.strerror}", str(file_path)
        ) from e

    return hasher.hexdigest()


class DirectoryHasher:
    """
    Computes per-file and whole-tree hashes for a directory.

    The per-file map is computed once per instance and reused by
    ``get_hashes`` and ``get_hash``.

    Example:
        >>> hasher = DirectoryHasher("/srv/app/assets")
        >>> hasher.get_hash()
        '06c3a47dc82d048059a8aefbfd2a95db50e434ed'
    """

    def __init__(self, directory: PathArg, algorithm: str = DEFAULT_ALGORITHM):
        """
        Initialize hasher for a directory.

        Args:
            directory: Directory to hash
            algorithm: Digest algorithm for files and for the combined hash

        Raises:
            ConfigurationError: If the algorithm is not supported
            EntityReadError: If the directory does not exist or is unreadable
        """
        _new_digest(algorithm)
        self.algorithm = algorithm

        root = dir_entity(directory)
        result = root.test(Check.EXISTS | Check.READABLE)
        if not result:
            raise EntityReadError(
                f"failed to hash directory; {result.error}", root.path
            )

        # Resolve the root so that only entries below it can be aliases
        self.directory = os.path.realpath(root.path)
        self._hashes: Optional[Dict[str, str]] = None

    def compute_hashes(self) -> Dict[str, str]:
        """
        Get a map of lowercased relative path to file digest.

        Returns:
            Copy of the map, sorted by key

        Raises:
            DuplicateFileError: If two files share a lowercased path
        """
        if self._hashes is None:
            self._hashes = self._generate_hashes(self._iter_entries())
        return dict(self._hashes)

    def get_hashes(self) -> str:
        """Get all file hashes encoded as pretty printed JSON."""
        return json.dumps(self.compute_hashes(), indent=4, ensure_ascii=False)

    def get_hash(self) -> str:
        """Get a single hash for all files in the directory."""
        digest = _new_digest(self.algorithm)
        # Undecodable POSIX file names arrive as surrogate escapes
        digest.update(self.get_hashes().encode("utf-8", "surrogateescape"))
        return digest.hexdigest()

    def _iter_entries(self) -> Iterable[DirectoryEntry]:
        return DirEntity(self.directory).iter_entries(recursive=True)

    def _relative(self, path: str) -> str:
        prefix = self.directory.rstrip(SEPARATOR) + SEPARATOR
        if path.startswith(prefix):
            return path[len(prefix) :]
        return path

    def _generate_hashes(self, entries: Iterable[DirectoryEntry]) -> Dict[str, str]:
        hashes: Dict[str, str] = {}
        originals: Dict[str, str] = {}

        for entry in entries:
            if not entry.is_file:
                continue

            expected = entry.parent.rstrip(SEPARATOR) + SEPARATOR + entry.name
            if entry.real_path != expected:
                logger.debug(f"Skipping alias {expected} -> {entry.real_path}")
                continue

            relative = self._relative(entry.real_path)
            key = relative.lower()
            if key in hashes:
                logger.error(f"Duplicate file in {self.directory}: {relative}")
                raise DuplicateFileError(relative, originals[key], key)

            hashes[key] = compute_file_hash(entry.real_path, self.algorithm)
            originals[key] = relative

        logger.debug(f"Hashed {len(hashes)} files in {self.directory}")
        return dict(sorted(hashes.items()))


def hash_directory(directory: PathArg, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Convenience wrapper returning the combined hash of a directory."""
    return DirectoryHasher(directory, algorithm).get_hash()
