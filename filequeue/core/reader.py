"""
Queue reader for random-access reads by sequence number.

A sequence number is resolved to a log position through the index, then the
frame at that position is read from the log. Each reader keeps its own cursor;
readers never coordinate with the writer or with each other.
"""

import threading
from pathlib import Path
from typing import Iterator, Union

from filequeue.core.errors import CorruptFrame, EndOfStream, ShortRead
from filequeue.core.format import (
    INT64_MAX,
    INT64_SIZE,
    decode_int64,
    frame_size,
    index_path,
    index_position,
    log_path,
)
from filequeue.core.storage import StorageHandle, open_for_read
from filequeue.utils.logging import get_logger

logger = get_logger(__name__)


class QueueReader:
    """
    Reads records from a queue.

    The cursor is the next sequence number to read. A successful read advances
    it by one; a failed read leaves it where it was. Calls on one reader are
    serialized by an internal lock.

    Handles may be shared between readers: all reads are positional, so they
    never depend on a handle's seek position.

    Attributes:
        path: Path of the log file
    """

    def __init__(
        self,
        log: StorageHandle,
        index: StorageHandle,
        owns_handles: bool = False,
    ):
        """
        Initialize a reader over open handles.

        Args:
            log: Readable handle on the log file
            index: Readable handle on the index file
            owns_handles: Whether close() should close the handles
        """
        self.path = log.path

        self._log = log
        self._index = index
        self._owns_handles = owns_handles
        self._offset = 0
        self._lock = threading.Lock()

    @classmethod
    def open(cls, name: Union[str, Path]) -> "QueueReader":
        """
        Open a queue for reading.

        Args:
            name: Path of the log file; the index is the same path plus ".index"

        Returns:
            QueueReader owning its handles

        Raises:
            OpenFailure: If either file cannot be opened
        """
        log = open_for_read(log_path(name))
        try:
            index = open_for_read(index_path(name))
        except Exception:
            log.close()
            raise

        logger.info("Opened queue reader", path=str(log.path))

        return cls(log, index, owns_handles=True)

    @property
    def offset(self) -> int:
        """The next sequence number this reader will read."""
        return self._offset

    def read(self) -> bytes:
        """
        Read the record at the cursor and advance the cursor.

        Returns:
            Record payload

        Raises:
            EndOfStream: If no record has been written at the cursor yet
            CorruptFrame: If the record's frame cannot be read in full
        """
        with self._lock:
            return self._read()

    def read_at(self, sequence: int) -> bytes:
        """
        Read the record at a sequence number.

        On success the cursor is left at sequence + 1. On failure it keeps the
        value it had before the call.

        Args:
            sequence: Sequence number to read

        Returns:
            Record payload

        Raises:
            ValueError: If sequence is negative
            EndOfStream: If no record has been written at sequence yet
            CorruptFrame: If the record's frame cannot be read in full
        """
        if sequence < 0:
            raise ValueError(f"Sequence must be non-negative, got {sequence}")

        with self._lock:
            original = self._offset
            self._offset = sequence
            try:
                return self._read()
            except Exception:
                self._offset = original
                raise

    def _read(self) -> bytes:
        sequence = self._offset
        position = self._log_position(sequence)

        try:
            length = decode_int64(self._log.read_exact_at(position, INT64_SIZE))
        except ShortRead as e:
            raise CorruptFrame(sequence, position, "length field truncated") from e

        if length < 0:
            raise CorruptFrame(sequence, position, f"negative length {length}")

        log_size = self._log.size()
        if position + frame_size(length) > log_size:
            logger.warning(
                "Frame extends past end of log",
                path=str(self.path),
                sequence=sequence,
                position=position,
                length=length,
                log_size=log_size,
            )
            raise CorruptFrame(
                sequence, position, f"length {length} extends past end of log ({log_size} bytes)"
            )

        try:
            payload = self._log.read_exact_at(position + INT64_SIZE, length)
        except ShortRead as e:
            raise CorruptFrame(sequence, position, "payload truncated") from e

        self._offset = sequence + 1

        logger.debug(
            "Read record",
            path=str(self.path),
            sequence=sequence,
            position=position,
            size=length,
        )

        return payload

    def _log_position(self, sequence: int) -> int:
        """
        Resolve a sequence number to a log position through the index.

        Raises:
            EndOfStream: If the index has no complete entry for sequence
            CorruptFrame: If the entry holds a negative position
        """
        entry = index_position(sequence)
        if entry + INT64_SIZE > INT64_MAX:
            raise EndOfStream(sequence)

        try:
            data = self._index.read_exact_at(entry, INT64_SIZE)
        except ShortRead as e:
            raise EndOfStream(sequence) from e

        position = decode_int64(data)
        if position < 0:
            raise CorruptFrame(sequence, position, "negative log position in index")
        return position

    def count(self) -> int:
        """
        Get the number of records currently visible in the index.

        Returns:
            Record count
        """
        return self._index.size() // INT64_SIZE

    def __iter__(self) -> Iterator[bytes]:
        """
        Yield records from the cursor until the end of the stream.

        Yields:
            Record payloads in sequence order

        Raises:
            CorruptFrame: If a record cannot be read in full
        """
        while True:
            try:
                yield self.read()
            except EndOfStream:
                return

    def close(self) -> None:
        """Close the handles if this reader opened them. Never raises."""
        if not self._owns_handles:
            return
        with self._lock:
            self._log.close()
            self._index.close()
        logger.debug("Closed queue reader", path=str(self.path))

    def __enter__(self) -> "QueueReader":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        return f"QueueReader(path={str(self.path)!r}, offset={self._offset})"
