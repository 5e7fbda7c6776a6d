"""
Reverse line-by-line file reading.

``ReverseReader`` iterates over the lines of a file from the last line to
the first while holding at most a few chunks of the file in memory. The
newline delimiter is matched literally, so multi-character and unusual
delimiters (e.g. '\\r\\n' or '---') work as well as '\\n'.

A file ending with the delimiter yields an empty string as its first line,
so the reversed output always equals ``content.split(newline)``. The one
exception is a delimiter that can overlap itself: a run such as six dashes
with newline '---' may be split at a different offset than a forward scan.
"""

import logging
import os
from typing import Iterator, List, Optional, Tuple, Union

from fskit.core.exceptions import EntityReadError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192

Line = Union[str, bytes]


class ReverseReader:
    """
    A file reader that iterates over its contents line by line in reverse.

    Each call to ``iter()`` restarts from the end of the file. Line numbers
    count from the end: the last line of the file is line 0.

    Example:
        >>> with ReverseReader("/var/log/app.log", newline="\\n") as reader:
        ...     for line in reader:
        ...         if "ERROR" in line:
        ...             print(line)
        ...             break
    """

    def __init__(
        self,
        path: Union[str, "os.PathLike[str]"],
        newline: Union[str, bytes] = os.linesep,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        encoding: Optional[str] = "utf-8",
    ):
        """
        Open a file for reverse reading.

        Args:
            path: Path to the file
            newline: Delimiter separating lines, matched literally
            chunk_size: Number of bytes to read per seek
            encoding: Encoding used to decode lines; None yields bytes

        Raises:
            ValueError: If newline is empty or chunk_size is not positive
            EntityReadError: If the file cannot be opened
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if not newline:
            raise ValueError("newline must not be empty")

        self.path = os.fspath(path)
        self.newline = newline
        self.chunk_size = chunk_size
        self.encoding = encoding
        if isinstance(newline, str):
            self._delimiter = newline.encode(encoding or "utf-8")
        else:
            self._delimiter = newline

        try:
            self._fp = open(self.path, "rb")
            self.filesize = os.fstat(self._fp.fileno()).st_size
        except OSError as e:
            raise EntityReadError(
                f"failed to open '{self.path}' for reading; {e.strerror}", self.path
            ) from e

        self._pos = -1
        self._buffer: List[bytes] = []
        self.line_number = -1
        self.current: Optional[Line] = None

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Line]:
        self.rewind()
        while self.current is not None:
            yield self.current
            self.advance()

    def items(self) -> Iterator[Tuple[int, Line]]:
        """Iterate over (line_number, line) pairs, starting at the last line."""
        self.rewind()
        while self.current is not None:
            yield self.line_number, self.current
            self.advance()

    def rewind(self) -> None:
        """Move back to the end of the file and load the last line."""
        self._pos = self.filesize
        self._buffer = []
        self.line_number = -1
        self.current = None
        if self.filesize == 0:
            return

        # The first read takes the odd-sized remainder so every later read
        # is a full chunk ending exactly at offset 0
        remainder = self.filesize % self.chunk_size
        self._buffer = self._read(remainder or self.chunk_size).split(self._delimiter)
        self.advance()

    def advance(self) -> None:
        """Load the next line (the one preceding the current line)."""
        self.line_number += 1
        line = self._readline()
        if line is None:
            self.current = None
        elif self.encoding is None:
            self.current = line
        else:
            try:
                self.current = line.decode(self.encoding)
            except UnicodeDecodeError as e:
                self.current = None
                raise EntityReadError(
                    f"cannot decode line {self.line_number} of '{self.path}' "
                    f"as {self.encoding}; {e.reason}",
                    self.path,
                ) from e

    @property
    def exhausted(self) -> bool:
        return self.current is None

    # ------------------------------------------------------------------
    # Buffer management
    # ------------------------------------------------------------------

    def _read(self, size: int) -> bytes:
        self._pos -= size
        try:
            self._fp.seek(self._pos)
            data = self._fp.read(size)
        except OSError as e:
            raise EntityReadError(
                f"read failed on '{self.path}' at offset {self._pos}; {e.strerror}",
                self.path,
            ) from e

        if len(data) != size:
            raise EntityReadError(
                f"short read on '{self.path}' at offset {self._pos}: "
                f"expected {size} bytes, got {len(data)}",
                self.path,
            )
        return data

    def _readline(self) -> Optional[bytes]:
        # Two fragments mean a delimiter separates a complete trailing line
        # from a leading remainder that may continue in earlier chunks
        while self._pos != 0 and len(self._buffer) < 2:
            head = self._buffer[0] if self._buffer else b""
            self._buffer = (self._read(self.chunk_size) + head).split(self._delimiter)

        if not self._buffer:
            return None
        return self._buffer.pop()

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    def close(self) -> None:
        if not self._fp.closed:
            self._fp.close()
            logger.debug(f"Closed reverse reader for {self.path}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
