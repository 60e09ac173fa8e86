"""
Error types raised by the queue.

Storage failures form a closed set (ShortRead, ShortWrite, SeekFailure) so that
the writer and reader can translate them deterministically into the queue level
errors callers handle.
"""

from typing import Optional


class QueueError(Exception):
    """Base class for all queue errors."""
    pass


class OpenFailure(QueueError):
    """Raised when a queue file cannot be opened."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot open {path}: {reason}")
        self.path = path
        self.reason = reason


class WriteFailure(QueueError):
    """
    Raised when an append does not complete.

    Attributes:
        stage: Which part of the append failed ("frame" or "index")
    """

    def __init__(self, stage: str, reason: str):
        super().__init__(f"Write failed at {stage} stage: {reason}")
        self.stage = stage
        self.reason = reason


class EndOfStream(QueueError):
    """Raised when no record exists at the requested sequence number yet."""

    def __init__(self, sequence: int):
        super().__init__(f"No record at sequence {sequence}")
        self.sequence = sequence


class CorruptFrame(QueueError):
    """Raised when an index entry points at a frame that cannot be read in full."""

    def __init__(self, sequence: int, position: int, reason: str):
        super().__init__(
            f"Corrupt frame for sequence {sequence} at log position {position}: {reason}"
        )
        self.sequence = sequence
        self.position = position
        self.reason = reason


class StorageError(QueueError):
    """Base class for storage level failures."""
    pass


class ShortRead(StorageError):
    """Raised when end of file is reached before the requested bytes were read."""

    def __init__(self, expected: int, actual: int, position: Optional[int] = None):
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Short read{where}: expected {expected} bytes, got {actual}")
        self.expected = expected
        self.actual = actual
        self.position = position


class ShortWrite(StorageError):
    """Raised when fewer bytes than requested reached the file."""

    def __init__(self, expected: int, actual: int, reason: str = ""):
        message = f"Short write: expected {expected} bytes, wrote {actual}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class SeekFailure(StorageError):
    """Raised when a handle cannot be positioned."""

    def __init__(self, offset: int, whence: int, reason: str):
        super().__init__(f"Cannot seek to {offset} (whence={whence}): {reason}")
        self.offset = offset
        self.whence = whence
