import io
import struct

import pytest

from gamebase.chunk import ChunkError, read_chunk, write_chunk


def test_round_trip_records():
    buf = io.BytesIO()
    records = [(1, 2, 3.5), (4, 5, -1.25)]
    write_chunk(buf, "msh0", records, "IIf")
    buf.seek(0)
    assert read_chunk(buf, "msh0", "IIf") == records


def test_raw_bytes_wire_format():
    buf = io.BytesIO()
    write_chunk(buf, "str0", b"abc", None)
    assert buf.getvalue() == b"str0" + struct.pack("=I", 3) + b"abc"
    buf.seek(0)
    assert read_chunk(buf, "str0", None) == b"abc"


def test_bare_values_are_single_field_records():
    buf = io.BytesIO()
    write_chunk(buf, "idx0", [7, 9], "I")
    buf.seek(0)
    assert read_chunk(buf, "idx0", "I") == [(7,), (9,)]


def test_empty_chunk():
    buf = io.BytesIO()
    write_chunk(buf, "cam0", [], "I4sfff")
    buf.seek(0)
    assert read_chunk(buf, "cam0", "I4sfff") == []
    assert buf.read() == b""


def test_consecutive_chunks_read_in_order():
    buf = io.BytesIO()
    write_chunk(buf, "str0", b"names", None)
    write_chunk(buf, "msh0", [(0, 0, 5)], "III")
    buf.seek(0)
    assert read_chunk(buf, "str0", None) == b"names"
    assert read_chunk(buf, "msh0", "III") == [(0, 0, 5)]
    assert buf.read() == b""


def test_magic_may_be_bytes():
    buf = io.BytesIO()
    write_chunk(buf, b"xfh0", [(3,)], "I")
    buf.seek(0)
    assert read_chunk(buf, "xfh0", "I") == [(3,)]


def test_wrong_magic_raises():
    buf = io.BytesIO()
    write_chunk(buf, "str0", b"abc", None)
    buf.seek(0)
    with pytest.raises(ChunkError):
        read_chunk(buf, "msh0", None)


def test_missing_header_raises():
    with pytest.raises(ChunkError):
        read_chunk(io.BytesIO(b"str"), "str0", None)


def test_size_not_divisible_raises():
    buf = io.BytesIO()
    write_chunk(buf, "idx0", b"abcde", None)
    buf.seek(0)
    with pytest.raises(ChunkError):
        read_chunk(buf, "idx0", "I")


def test_truncated_data_raises():
    data = b"idx0" + struct.pack("=I", 8) + b"\x00" * 4
    with pytest.raises(ChunkError):
        read_chunk(io.BytesIO(data), "idx0", "I")


def test_write_rejects_bad_magic_length():
    with pytest.raises(ValueError):
        write_chunk(io.BytesIO(), "abc", b"", None)