"""
Lexical path utilities for fskit.

This module provides string-level path operations including:
- Normalization (removing '.' and resolving '..' without touching the disk)
- Relative path computation between two paths
- dirname/basename with the conventional '.' "no parent" marker
- Name helpers (sanitizing, extension splitting) and byte-size formatting

Only the forward slash is treated as a separator. The only I/O performed
here is reading the current working directory when a path starts with a
'.' or '..' reference.
"""

import os
import re
from typing import Optional, Tuple, Union

from fskit.core.exceptions import EnvironmentUnavailableError

PathArg = Union[str, "os.PathLike[str]"]

SEPARATOR = "/"

# Marker returned by dirname() for a path with no separator
CURRENT_DIR = "."

SIZE_UNITS = ["bytes", "KB", "MB", "GB", "TB", "PB", "EB"]

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9\-_.]")


# ============================================================================
# Components
# ============================================================================


def dirname(path: PathArg) -> str:
    """
    Get the directory component of a path.

    Trailing separators are ignored, a path without a separator yields
    '.', and a path directly under the root yields '/'.

    Args:
        path: Path to inspect

    Returns:
        Directory portion of the path

    Example:
        >>> dirname("/one/two/")
        '/one'
        >>> dirname("file.txt")
        '.'
    """
    path = os.fspath(path)
    if not path:
        return CURRENT_DIR

    stripped = path.rstrip(SEPARATOR)
    if not stripped:
        return SEPARATOR

    head, sep, _ = stripped.rpartition(SEPARATOR)
    if not sep:
        return CURRENT_DIR

    return head.rstrip(SEPARATOR) or SEPARATOR


def basename(path: PathArg) -> str:
    """Get the last component of a path, ignoring trailing separators."""
    stripped = os.fspath(path).rstrip(SEPARATOR)
    return stripped.rpartition(SEPARATOR)[2]


def is_absolute(path: PathArg) -> bool:
    """Return True if the path starts with the separator."""
    return os.fspath(path)[:1] == SEPARATOR


# ============================================================================
# Normalization
# ============================================================================


def _getcwd() -> str:
    try:
        return os.getcwd()
    except OSError as e:
        raise EnvironmentUnavailableError(
            f"Cannot determine the current working directory: {e}"
        ) from e


def _resolve_leading_dots(path: str) -> str:
    """
    Expand a leading working-directory reference.

    Only '.', '..', './' and '../' count as references; names such as
    '.hidden' or '..data' are returned unchanged.
    """
    if path == ".":
        return _getcwd()
    if path == "..":
        return dirname(_getcwd())
    if path.startswith("./"):
        return _getcwd() + path[1:]
    if path.startswith("../"):
        return dirname(_getcwd()) + path[2:]
    return path


def normalize(path: PathArg) -> str:
    """
    Lexically normalize a path.

    Removes empty and '.' segments and resolves '..' against the segments
    that precede it. A '..' with nothing left to remove is dropped. Paths
    starting with a working-directory reference ('.', '..', './x', '../x')
    are first made absolute using the current working directory.

    Args:
        path: Path to normalize

    Returns:
        Normalized path; absolute if the (resolved) input was absolute

    Raises:
        EnvironmentUnavailableError: If the cwd is needed but unavailable

    Example:
        >>> normalize("/one/./two/../three/")
        '/one/three'
        >>> normalize("a/../../b")
        'b'
    """
    original = os.fspath(path)
    path = original.rstrip(SEPARATOR)
    if path.startswith("."):
        path = _resolve_leading_dots(path)

    # The root itself is trimmed to '' above
    absolute = is_absolute(original) or is_absolute(path)

    segments = []
    for part in path.split(SEPARATOR):
        if part in ("", "."):
            continue
        if part == "..":
            if segments:
                segments.pop()
            continue
        segments.append(part)

    joined = SEPARATOR.join(segments)
    return SEPARATOR + joined if absolute else joined


def normalize_to(path: PathArg, base_dir: PathArg) -> str:
    """
    Normalize a path relative to a base directory.

    Absolute paths are returned unchanged.

    Example:
        >>> normalize_to("../lib/x.py", "/srv/app/bin")
        '/srv/app/lib/x.py'
    """
    path = os.fspath(path)
    if is_absolute(path):
        return path
    return normalize(f"{os.fspath(base_dir)}{SEPARATOR}{path}")


def get_parent(path: PathArg) -> Optional[str]:
    """
    Get the parent directory of a path.

    Returns:
        Parent path, or None for the root and for bare names
    """
    path = os.fspath(path)
    if path == SEPARATOR:
        return None

    parent = dirname(path)
    if parent == CURRENT_DIR:
        return None
    return parent


# ============================================================================
# Relative Paths
# ============================================================================


def _is_trailing_empty(parts: list, index: int) -> bool:
    return index > 0 and index == len(parts) - 1 and parts[index] == ""


def relative_path(from_path: PathArg, to_path: PathArg) -> str:
    """
    Compute the path leading from one path to another.

    ``from_path`` is treated as a file path unless it ends with a
    separator, i.e. the result is relative to its directory.

    Args:
        from_path: Starting path
        to_path: Destination path

    Returns:
        Relative path ('' when both paths are the same)

    Example:
        >>> relative_path("/one/two/file.txt", "/one/file.txt")
        '../file.txt'
        >>> relative_path("/a/b/c", "/a/b/c/d/e/f")
        'd/e/f'
    """
    from_parts = os.fspath(from_path).split(SEPARATOR)
    to_parts = os.fspath(to_path).split(SEPARATOR)

    limit = min(len(from_parts), len(to_parts))
    i = 0
    while (
        i < limit
        and from_parts[i] == to_parts[i]
        and not _is_trailing_empty(from_parts, i)
        and not _is_trailing_empty(to_parts, i)
    ):
        i += 1

    ups = max(len(from_parts) - i - 1, 0)
    return "../" * ups + SEPARATOR.join(to_parts[i:])


# ============================================================================
# Names and Sizes
# ============================================================================


def sanitize_name(name: str) -> str:
    """
    Replace characters outside [a-zA-Z0-9-_.] in the last path component.

    The directory part, if any, is preserved as-is.

    Example:
        >>> sanitize_name("dir/my file?.txt")
        'dir/my_file_.txt'
    """
    base = basename(name)
    clean = _UNSAFE_NAME_CHARS.sub("_", base)
    if base == name:
        return clean

    parent = dirname(name)
    if parent.endswith(SEPARATOR):
        return parent + clean
    return f"{parent}{SEPARATOR}{clean}"


def split_name(path: PathArg, default_extension: str = "") -> Tuple[str, str]:
    """
    Separate a filename into name and extension.

    A name whose only dot is the leading one (e.g. '.bashrc') has no
    extension.

    Returns:
        Tuple of (name, extension) where extension excludes the dot

    Example:
        >>> split_name("/path/to/archive.tar.gz")
        ('archive.tar', 'gz')
    """
    filename = basename(path)
    pos = filename.rfind(".")
    if pos <= 0:
        return filename, default_extension
    return filename[:pos], filename[pos + 1 :]


def get_extension(path: PathArg, default: str = "") -> str:
    """Get the extension of a filename without the leading dot."""
    return split_name(path, default)[1]


def format_size(
    num_bytes: int, precision: int = 0, point: str = ".", sep: str = ","
) -> str:
    """
    Format a byte count as a human readable string.

    Precision is ignored for values below one KB.

    Example:
        >>> format_size(1536, 1)
        '1.5 KB'
        >>> format_size(1000)
        '1,000 bytes'
    """
    value = float(num_bytes)
    unit = 0
    while value > 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1

    if unit == 0:
        precision = 0

    formatted = f"{value:,.{precision}f}"
    formatted = formatted.replace(",", "\0").replace(".", point).replace("\0", sep)
    return f"{formatted} {SIZE_UNITS[unit]}"
