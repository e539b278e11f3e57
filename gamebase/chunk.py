"""Reading and writing of tagged binary chunks.

A chunk is a four-byte magic tag, a four-byte native-endian byte count,
and then that many bytes of packed fixed-size records.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, Iterable

_HEADER = struct.Struct("=4sI")
_BYTE_ORDER_CHARS = "@=<>!"


class ChunkError(ValueError):
    """Raised when a chunk cannot be read as expected."""


def _magic_bytes(magic) -> bytes:
    return magic.encode("latin-1") if isinstance(magic, str) else bytes(magic)


def _record_struct(fmt) -> struct.Struct:
    if isinstance(fmt, struct.Struct):
        record = fmt
    else:
        if not fmt or fmt[0] not in _BYTE_ORDER_CHARS:
            fmt = "=" + fmt
        record = struct.Struct(fmt)
    if record.size == 0:
        raise ValueError("record format has zero size")
    return record


def read_chunk(stream: BinaryIO, magic, fmt):
    """Read one chunk from a binary stream.

    ``fmt`` is a struct format for one record (standard sizes, no padding,
    native byte order unless the format says otherwise); the records are
    returned as a list of tuples. With ``fmt`` of None the payload is
    returned as raw bytes.
    """
    header = stream.read(_HEADER.size)
    if len(header) != _HEADER.size:
        raise ChunkError("Failed to read chunk header")
    found_magic, size = _HEADER.unpack(header)
    if found_magic != _magic_bytes(magic):
        raise ChunkError("Unexpected magic number in chunk")

    record = None if fmt is None else _record_struct(fmt)
    record_size = 1 if record is None else record.size
    if size % record_size != 0:
        raise ChunkError("Size of chunk not divisible by element size")

    payload = stream.read(size)
    if len(payload) != size:
        raise ChunkError("Failed to read chunk data.")
    if record is None:
        return payload
    return list(record.iter_unpack(payload))


def write_chunk(stream: BinaryIO, magic, records: Iterable, fmt) -> None:
    """Write ``records`` as one chunk in the format ``read_chunk`` expects.

    Each record is a tuple of fields (a bare value is taken as a single
    field). With ``fmt`` of None, ``records`` is written as raw bytes.
    """
    tag = _magic_bytes(magic)
    if len(tag) != 4:
        raise ValueError(f"chunk magic must be four bytes, got {tag!r}")

    if fmt is None:
        payload = bytes(records)
    else:
        record = _record_struct(fmt)
        payload = b"".join(
            record.pack(*item) if isinstance(item, tuple) else record.pack(item)
            for item in records
        )
    if len(payload) > 0xFFFFFFFF:
        raise ValueError("chunk payload too large")

    stream.write(_HEADER.pack(tag, len(payload)))
    stream.write(payload)