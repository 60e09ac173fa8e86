"""
filequeue - A durable append-only message queue on two files.

Records are appended to a log file as length-prefixed frames while an index
file records where each frame starts, giving readers O(1) access to any record
by its sequence number. One writer per process appends; any number of readers
read independently.
"""

from pathlib import Path
from typing import Optional, Union

from filequeue.core import (
    CorruptFrame,
    EndOfStream,
    OpenFailure,
    QueueError,
    QueueReader,
    QueueWriter,
    WriteFailure,
)
from filequeue.utils.config import Config, get_config

__version__ = "0.1.0"


def open_writer(name: Union[str, Path], config: Optional[Config] = None) -> QueueWriter:
    """
    Open a queue for writing using configuration defaults.

    Relative names are resolved against ``queue.data_dir``.

    Args:
        name: Queue name (path of the log file)
        config: Configuration; the global configuration if None

    Returns:
        QueueWriter
    """
    config = config or get_config()
    path = config.resolve_queue_path(str(name))
    path.parent.mkdir(parents=True, exist_ok=True)
    return QueueWriter.open(
        path,
        fsync_on_write=bool(config.get("queue.fsync_on_write", False)),
    )


def open_reader(name: Union[str, Path], config: Optional[Config] = None) -> QueueReader:
    """
    Open a queue for reading.

    Relative names are resolved against ``queue.data_dir``.

    Args:
        name: Queue name (path of the log file)
        config: Configuration; the global configuration if None

    Returns:
        QueueReader
    """
    config = config or get_config()
    return QueueReader.open(config.resolve_queue_path(str(name)))


__all__ = [
    "CorruptFrame",
    "EndOfStream",
    "OpenFailure",
    "QueueError",
    "QueueReader",
    "QueueWriter",
    "WriteFailure",
    "open_reader",
    "open_writer",
]
