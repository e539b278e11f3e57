"""Formatted hexadecimal dumps of binary data, in the style of xxd."""

from __future__ import annotations

_ROW_BYTES = 16


def _printable(byte: int) -> str:
    return chr(byte) if 32 <= byte <= 126 else "."


def hex_dump(data) -> str:
    """Return an xxd-style dump of any bytes-like object.

    Each row shows an eight-digit address, sixteen bytes as hex in groups
    of two, and the printable ASCII form of those bytes. A final row is
    always emitted after the last full row, so empty input yields one
    blank row.
    """
    raw = bytes(memoryview(data))
    lines = []
    for ofs in range(0, len(raw) + 1, _ROW_BYTES):
        row = raw[ofs:ofs + _ROW_BYTES]
        cells = [f"{byte:02x}" for byte in row]
        cells.extend(["  "] * (_ROW_BYTES - len(row)))
        hex_part = "".join(
            " " + cells[i] + cells[i + 1] for i in range(0, _ROW_BYTES, 2)
        )
        text = "".join(_printable(byte) for byte in row).ljust(_ROW_BYTES)
        lines.append(f"{ofs & 0xFFFFFFFF:08x}:{hex_part}  {text}\n")
    return "".join(lines)