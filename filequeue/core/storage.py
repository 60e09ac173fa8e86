"""
Durable byte-addressable storage for queue files.

A StorageHandle wraps a raw OS file descriptor. Reads and writes loop until the
requested byte count is transferred or the file makes no further progress, in
which case a ShortRead or ShortWrite is raised.
"""

import os
from pathlib import Path
from typing import Optional, Union

from filequeue.core.errors import OpenFailure, SeekFailure, ShortRead, ShortWrite
from filequeue.utils.logging import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


class StorageHandle:
    """
    A seekable handle on a single queue file.

    Attributes:
        path: Path of the underlying file
        writable: Whether the handle was opened for appending
    """

    FILE_MODE = 0o644

    def __init__(self, fd: int, path: PathLike, writable: bool = False):
        """
        Wrap an already open file descriptor.

        Args:
            fd: Open OS file descriptor, owned by this handle from now on
            path: Path the descriptor was opened from
            writable: Whether the descriptor was opened for writing
        """
        self.path = Path(path)
        self.writable = writable
        self._fd: Optional[int] = fd

    @property
    def closed(self) -> bool:
        return self._fd is None

    def fileno(self) -> int:
        """
        Get the underlying file descriptor.

        Raises:
            ValueError: If the handle is closed
        """
        if self._fd is None:
            raise ValueError(f"I/O operation on closed handle: {self.path}")
        return self._fd

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """
        Move the handle's cursor.

        Args:
            offset: Byte offset relative to whence
            whence: os.SEEK_SET, os.SEEK_CUR or os.SEEK_END

        Returns:
            The new absolute position

        Raises:
            SeekFailure: If the position is invalid
        """
        fd = self.fileno()
        if whence == os.SEEK_SET and offset < 0:
            raise SeekFailure(offset, whence, "negative position")
        try:
            return os.lseek(fd, offset, whence)
        except OSError as e:
            raise SeekFailure(offset, whence, str(e)) from e

    def tell(self) -> int:
        """Get the current cursor position."""
        return self.seek(0, os.SEEK_CUR)

    def size(self) -> int:
        """Get the current file size in bytes."""
        return os.fstat(self.fileno()).st_size

    def read_exact(self, n: int) -> bytes:
        """
        Read exactly n bytes from the cursor.

        Raises:
            ShortRead: If end of file is reached first
        """
        fd = self.fileno()
        chunks = []
        remaining = n
        while remaining > 0:
            chunk = os.read(fd, remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)

        data = b"".join(chunks)
        if len(data) != n:
            raise ShortRead(expected=n, actual=len(data))
        return data

    def read_exact_at(self, position: int, n: int) -> bytes:
        """
        Read exactly n bytes at an absolute position without moving the cursor.

        Positional reads let several readers share one handle without
        interfering with each other's seeks.

        Args:
            position: Absolute byte position
            n: Number of bytes to read

        Returns:
            The bytes read

        Raises:
            SeekFailure: If position is negative
            ShortRead: If end of file is reached first
        """
        fd = self.fileno()
        if position < 0:
            raise SeekFailure(position, os.SEEK_SET, "negative position")

        chunks = []
        remaining = n
        current = position
        while remaining > 0:
            chunk = os.pread(fd, remaining, current)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
            current += len(chunk)

        data = b"".join(chunks)
        if len(data) != n:
            raise ShortRead(expected=n, actual=len(data), position=position)
        return data

    def write_exact(self, data: bytes) -> None:
        """
        Write all of data at the handle's write position.

        Raises:
            ShortWrite: If the OS reports an error or stops making progress
        """
        fd = self.fileno()
        view = memoryview(data)
        written = 0
        while written < len(data):
            try:
                n = os.write(fd, view[written:])
            except OSError as e:
                raise ShortWrite(expected=len(data), actual=written, reason=str(e)) from e
            if n == 0:
                raise ShortWrite(expected=len(data), actual=written)
            written += n

    def truncate(self, size: int) -> None:
        """Truncate the file to size bytes."""
        os.ftruncate(self.fileno(), size)

    def sync(self) -> None:
        """Force written data to physical storage."""
        os.fsync(self.fileno())

    def close(self) -> None:
        """Close the handle. Safe to call more than once; never raises."""
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            os.close(fd)
        except OSError as e:
            logger.warning("Error closing storage handle", path=str(self.path), error=str(e))

    def __enter__(self) -> "StorageHandle":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        mode = "append" if self.writable else "read"
        return f"StorageHandle(path={str(self.path)!r}, mode={mode}, closed={self.closed})"


def open_for_append(path: PathLike) -> StorageHandle:
    """
    Open a file for appending, creating it if absent.

    Args:
        path: File path

    Returns:
        Writable StorageHandle

    Raises:
        OpenFailure: If the file cannot be opened
    """
    flags = os.O_WRONLY | os.O_CREAT | os.O_APPEND
    try:
        fd = os.open(path, flags, StorageHandle.FILE_MODE)
    except OSError as e:
        raise OpenFailure(str(path), e.strerror or str(e)) from e

    logger.debug("Opened file for append", path=str(path))
    return StorageHandle(fd, path, writable=True)


def open_for_read(path: PathLike) -> StorageHandle:
    """
    Open an existing file for reading.

    Args:
        path: File path

    Returns:
        Read-only StorageHandle

    Raises:
        OpenFailure: If the file cannot be opened (including when missing)
    """
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError as e:
        raise OpenFailure(str(path), e.strerror or str(e)) from e

    logger.debug("Opened file for read", path=str(path))
    return StorageHandle(fd, path)
