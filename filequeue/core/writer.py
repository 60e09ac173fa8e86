"""
Queue writer: appends frames to the log and their offsets to the index.

The frame is written to the log before its offset is written to the index, so
an index entry only ever exists once the record it points at is complete. If
either write fails, both files are truncated back to their size before the
append.
"""

import os
import threading
from pathlib import Path
from typing import Optional, Union

from filequeue.core.errors import StorageError, WriteFailure
from filequeue.core.format import INT64_SIZE, encode_frame, encode_int64, index_path, log_path
from filequeue.core.storage import StorageHandle, open_for_append
from filequeue.utils.logging import get_logger

logger = get_logger(__name__)


class QueueWriter:
    """
    Appends records to a queue.

    All appends from one process go through a single lock, which gives every
    record a unique sequence number equal to the number of records appended
    before it. Concurrent writers in different processes are not supported.

    Attributes:
        path: Path of the log file
        fsync_on_write: Whether each append is fsynced before returning
    """

    def __init__(
        self,
        log: StorageHandle,
        index: StorageHandle,
        fsync_on_write: bool = False,
    ):
        """
        Initialize a writer over open append handles.

        The writer takes ownership of both handles.

        Args:
            log: Log file handle opened for append
            index: Index file handle opened for append
            fsync_on_write: Whether to fsync after each append
        """
        self.path = log.path
        self.fsync_on_write = fsync_on_write

        self._log = log
        self._index = index
        self._lock = threading.Lock()

    @classmethod
    def open(cls, name: Union[str, Path], fsync_on_write: bool = False) -> "QueueWriter":
        """
        Open a queue for writing, creating its files if absent.

        Args:
            name: Path of the log file; the index is the same path plus ".index"
            fsync_on_write: Whether to fsync after each append

        Returns:
            QueueWriter

        Raises:
            OpenFailure: If either file cannot be opened
        """
        log = open_for_append(log_path(name))
        try:
            index = open_for_append(index_path(name))
        except Exception:
            log.close()
            raise

        writer = cls(log, index, fsync_on_write=fsync_on_write)

        logger.info(
            "Opened queue writer",
            path=str(writer.path),
            records=writer.count(),
            log_size=log.size(),
            fsync_on_write=fsync_on_write,
        )

        return writer

    def write(self, payload: bytes) -> int:
        """
        Append a record to the queue.

        Args:
            payload: Record contents

        Returns:
            Number of payload bytes written

        Raises:
            TypeError: If payload is not bytes-like
            WriteFailure: If the record could not be appended
        """
        if not isinstance(payload, (bytes, bytearray, memoryview)):
            raise TypeError(f"Payload must be bytes, got {type(payload)}")

        data = bytes(payload)
        frame = encode_frame(data)

        with self._lock:
            if self._log.closed or self._index.closed:
                raise WriteFailure("frame", "writer is closed")

            try:
                current = self._log.seek(0, os.SEEK_END)
                index_end = self._index.seek(0, os.SEEK_END)
            except StorageError as e:
                raise WriteFailure("frame", str(e)) from e

            stage = "frame"
            try:
                self._log.write_exact(frame)
                if self.fsync_on_write:
                    self._log.sync()

                stage = "index"
                self._index.write_exact(encode_int64(current))
                if self.fsync_on_write:
                    self._index.sync()
            except (StorageError, OSError) as e:
                logger.error(
                    "Append failed, rolling back",
                    path=str(self.path),
                    stage=stage,
                    position=current,
                    error=str(e),
                )
                self._rollback(current, index_end)
                raise WriteFailure(stage, str(e)) from e

            logger.debug(
                "Appended record",
                path=str(self.path),
                sequence=index_end // INT64_SIZE,
                position=current,
                size=len(frame),
            )

        return len(data)

    def _rollback(self, log_size: int, index_size: int) -> None:
        """Truncate both files back to their size before a failed append."""
        for handle, size in ((self._log, log_size), (self._index, index_size)):
            try:
                handle.truncate(size)
            except OSError as e:
                logger.error(
                    "Rollback failed",
                    path=str(handle.path),
                    size=size,
                    error=str(e),
                )

    def count(self) -> int:
        """
        Get the number of records in the queue.

        Returns:
            Record count
        """
        with self._lock:
            return self._index.size() // INT64_SIZE

    def close(self) -> None:
        """Close both files. Safe to call more than once."""
        with self._lock:
            if self._log.closed and self._index.closed:
                return
            self._log.close()
            self._index.close()

        logger.info("Closed queue writer", path=str(self.path))

    def __enter__(self) -> "QueueWriter":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        return f"QueueWriter(path={str(self.path)!r}, fsync_on_write={self.fsync_on_write})"
