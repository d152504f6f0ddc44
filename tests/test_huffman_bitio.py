import pytest

from huffman_bitio import END_OF_STREAM, HuffmanInput, HuffmanOutput
from huffman_errors import FormatError


def test_bits_pack_msb_first_with_pad_count():
    out = HuffmanOutput()
    out.write_header("(.a.b)")
    for bit in (1, 0, 1):
        out.write_bit(bit)
    assert out.pad_bits == 5
    assert out.getvalue() == b"(.a.b)\x05\xa0"


def test_full_bytes_need_no_padding():
    out = HuffmanOutput()
    out.write_header(".a")
    for _ in range(16):
        out.write_bit(1)
    assert out.pad_bits == 0
    assert out.getvalue() == b".a\x00\xff\xff"


def test_empty_header_gives_empty_buffer():
    out = HuffmanOutput()
    out.write_header("")
    assert out.getvalue() == b""


def test_header_only_once_and_before_bits():
    out = HuffmanOutput()
    out.write_header(".a")
    with pytest.raises(ValueError):
        out.write_header(".b")

    late = HuffmanOutput()
    late.write_bit(0)
    with pytest.raises(ValueError):
        late.write_header(".a")


def test_rejects_non_bits():
    out = HuffmanOutput()
    out.write_header(".a")
    with pytest.raises(ValueError):
        out.write_bit(2)


def test_input_reads_header_and_bits_then_end():
    src = HuffmanInput(b"(.a.b)\x05\xa0")
    assert src.read_header() == "(.a.b)"
    assert [src.read_bit() for _ in range(4)] == [1, 0, 1, END_OF_STREAM]
    assert src.read_bit() == END_OF_STREAM


def test_input_round_trips_output():
    out = HuffmanOutput()
    out.write_header("(.\xff.\x00)")
    bits = [1, 1, 0, 1, 0, 0, 0, 1, 1, 0, 1]
    for bit in bits:
        out.write_bit(bit)
    src = HuffmanInput(out.getvalue())
    assert src.read_header() == "(.\xff.\x00)"
    assert [src.read_bit() for _ in bits] == bits
    assert src.read_bit() == END_OF_STREAM


def test_empty_buffer_is_empty_header():
    src = HuffmanInput(b"")
    assert src.read_header() == ""
    assert src.read_bit() == END_OF_STREAM


@pytest.mark.parametrize("data", [
    b".a",           # no pad byte
    b".a\x08\x00",   # pad count too large
    b".a\x03",       # pad bits with no payload
    b"(.a",          # header never closes
])
def test_malformed_containers(data):
    with pytest.raises(FormatError):
        HuffmanInput(data)
