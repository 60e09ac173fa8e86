"""
Binary format of the queue files.

Log file: a concatenation of frames, each
    Length (8 bytes, big-endian signed) - Number of payload bytes
    Payload (variable)

Index file: a concatenation of 8-byte big-endian signed log offsets. Entry i
sits at byte 8*i and holds the position of frame i's length field.
"""

import struct
from pathlib import Path
from typing import Union

INT64_FORMAT = ">q"
INT64_SIZE = struct.calcsize(INT64_FORMAT)
INT64_MAX = 2 ** 63 - 1
INDEX_SUFFIX = ".index"

_INT64 = struct.Struct(INT64_FORMAT)


def encode_int64(value: int) -> bytes:
    """
    Encode a signed 64-bit integer big-endian.

    Raises:
        ValueError: If value does not fit in 64 bits
    """
    try:
        return _INT64.pack(value)
    except struct.error as e:
        raise ValueError(f"Value does not fit in int64: {value}") from e


def decode_int64(data: bytes) -> int:
    """
    Decode a big-endian signed 64-bit integer.

    Raises:
        ValueError: If data is not exactly 8 bytes
    """
    if len(data) != INT64_SIZE:
        raise ValueError(f"Expected {INT64_SIZE} bytes, got {len(data)}")
    return _INT64.unpack(data)[0]


def encode_frame(payload: bytes) -> bytes:
    """Prefix payload with its length in bytes."""
    data = bytes(payload)
    return encode_int64(len(data)) + data


def frame_size(payload_length: int) -> int:
    """Number of log bytes taken by a frame carrying payload_length bytes."""
    return INT64_SIZE + payload_length


def index_position(sequence: int) -> int:
    """Byte position of a sequence number's entry in the index file."""
    return INT64_SIZE * sequence


def log_path(name: Union[str, Path]) -> Path:
    """Path of a queue's log file."""
    return Path(name)


def index_path(name: Union[str, Path]) -> Path:
    """Path of a queue's index file, co-located with the log."""
    path = Path(name)
    return path.with_name(path.name + INDEX_SUFFIX)
