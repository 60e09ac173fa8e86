"""
Core queue storage implementation.

This package provides the two-file queue format:
- A log of length-prefixed records in write order
- An index of fixed-width log offsets, one per record
- A locked single writer and independent cursor-based readers
"""

from filequeue.core.errors import (
    CorruptFrame,
    EndOfStream,
    OpenFailure,
    QueueError,
    SeekFailure,
    ShortRead,
    ShortWrite,
    StorageError,
    WriteFailure,
)
from filequeue.core.reader import QueueReader
from filequeue.core.storage import StorageHandle, open_for_append, open_for_read
from filequeue.core.writer import QueueWriter

__all__ = [
    "CorruptFrame",
    "EndOfStream",
    "OpenFailure",
    "QueueError",
    "QueueReader",
    "QueueWriter",
    "SeekFailure",
    "ShortRead",
    "ShortWrite",
    "StorageError",
    "StorageHandle",
    "WriteFailure",
    "open_for_append",
    "open_for_read",
]
