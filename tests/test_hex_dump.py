from array import array

from gamebase.hex_dump import hex_dump


def test_empty_input_gives_one_blank_row():
    out = hex_dump(b"")
    lines = out.splitlines()
    assert len(lines) == 1
    assert lines[0].startswith("00000000:")
    assert lines[0][len("00000000:"):].strip() == ""


def test_short_input_row_layout():
    out = hex_dump(b"Hello")
    line = out.splitlines()[0]
    assert line.startswith("00000000: 4865 6c6c 6f")
    assert line.endswith("  Hello" + " " * 11)


def test_all_rows_have_same_width():
    out = hex_dump(bytes(range(40)))
    lines = out.splitlines()
    assert len({len(line) for line in lines}) == 1
    assert len(lines[0]) == 67


def test_row_count_and_addresses():
    data = bytes(range(256)) * 2
    lines = hex_dump(data).splitlines()
    assert len(lines) == len(data) // 16 + 1
    assert lines[1].startswith("00000010:")
    assert all(line[8] == ":" for line in lines)


def test_full_row_is_followed_by_blank_row():
    lines = hex_dump(b"A" * 16).splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("A" * 16)
    assert lines[1][9:].strip() == ""


def test_non_printable_bytes_become_dots():
    line = hex_dump(b"\x00\x1fz\x7f\xff").splitlines()[0]
    assert line.rstrip().endswith("..z..")


def test_output_ends_with_newline():
    assert hex_dump(b"abc").endswith("\n")


def test_accepts_buffer_objects():
    values = array("B", [1, 2, 3])
    assert hex_dump(values) == hex_dump(bytes([1, 2, 3]))
    assert hex_dump(bytearray(b"xyz")) == hex_dump(b"xyz")