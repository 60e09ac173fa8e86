"""Tests for the queue file format."""

from pathlib import Path

import pytest

from filequeue.core.format import (
    INT64_SIZE,
    decode_int64,
    encode_frame,
    encode_int64,
    frame_size,
    index_path,
    index_position,
    log_path,
)


class TestInt64Codec:
    """Test fixed-width integer encoding."""
    
    def test_encode_is_big_endian(self):
        """Test that integers are encoded big-endian in 8 bytes."""
        assert encode_int64(1) == b"\x00\x00\x00\x00\x00\x00\x00\x01"
        assert encode_int64(0x0102030405060708) == bytes(range(1, 9))
    
    def test_encode_negative_is_signed(self):
        """Test that negative values use two's complement."""
        assert encode_int64(-1) == b"\xff" * 8
    
    def test_decode(self):
        """Test decoding known values."""
        assert decode_int64(b"\x00" * 7 + b"\x2a") == 42
        assert decode_int64(b"\xff" * 8) == -1
    
    def test_decode_invalid_size(self):
        """Test that wrong-sized input raises error."""
        with pytest.raises(ValueError, match="Expected 8 bytes"):
            decode_int64(b"short")
    
    def test_encode_out_of_range(self):
        """Test that values beyond int64 raise error."""
        with pytest.raises(ValueError, match="does not fit"):
            encode_int64(2 ** 63)


class TestFrame:
    """Test frame layout."""
    
    def test_encode_frame(self):
        """Test that a frame is the length followed by the payload."""
        frame = encode_frame(b"hello")
        
        assert frame[:INT64_SIZE] == encode_int64(5)
        assert frame[INT64_SIZE:] == b"hello"
        assert len(frame) == frame_size(5)
    
    def test_empty_frame(self):
        """Test that an empty payload still carries a length field."""
        assert encode_frame(b"") == b"\x00" * 8


class TestPaths:
    """Test index positions and file naming."""
    
    def test_index_position(self):
        """Test that entries are 8 bytes apart."""
        assert index_position(0) == 0
        assert index_position(3) == 24
    
    def test_file_paths(self, tmp_path):
        """Test that the index sits next to the log."""
        name = tmp_path / "events.log"
        
        assert log_path(name) == name
        assert index_path(name) == tmp_path / "events.log.index"
    
    def test_index_path_from_string(self):
        """Test index naming for a plain string name."""
        assert index_path("queue") == Path("queue.index")
