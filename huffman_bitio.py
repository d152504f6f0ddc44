"""
In-memory bit sinks and sources for the codec.

Layout of a compressed buffer:
    header (latin-1) | pad count (1 byte, 0..7) | payload bits, MSB first

An empty input compresses to an empty buffer.
"""

from huffman_errors import FormatError
from huffman_header import measure_header

END_OF_STREAM = -1
HEADER_ENCODING = 'latin-1'


class HuffmanOutput:
    def __init__(self) -> None:
        self.header = None
        self.buf = bytearray()
        self.acc = 0
        self.acc_bits = 0
        self.bit_count = 0

    def write_header(self, header: str) -> None:
        if self.header is not None:
            raise ValueError("header already written")
        if self.bit_count:
            raise ValueError("header must be written before any bits")
        self.header = header

    def write_bit(self, bit: int) -> None:
        if bit not in (0, 1):
            raise ValueError(f"bit must be 0 or 1, got {bit!r}")
        self.acc = (self.acc << 1) | bit
        self.acc_bits += 1
        self.bit_count += 1
        if self.acc_bits == 8:
            self.buf.append(self.acc & 0xFF)
            self.acc = 0
            self.acc_bits = 0

    @property
    def pad_bits(self) -> int:
        return (8 - self.acc_bits) % 8

    def getvalue(self) -> bytes:
        if not self.header:
            if self.bit_count:
                raise ValueError("bits were written without a header")
            return b""

        out = bytearray(self.header.encode(HEADER_ENCODING))
        out.append(self.pad_bits)
        out += self.buf
        if self.acc_bits:
            out.append((self.acc << self.pad_bits) & 0xFF)
        return bytes(out)


class HuffmanInput:
    def __init__(self, data: bytes) -> None:
        self.bit_index = 0
        if not data:
            self.header = ""
            self.payload = b""
            self.total_bits = 0
            return

        header_end = measure_header(data)
        if header_end >= len(data):
            raise FormatError("compressed data has no pad byte after the header")
        pad_bits = data[header_end]
        if pad_bits > 7:
            raise FormatError(f"pad count {pad_bits} is out of range")

        self.header = data[:header_end].decode(HEADER_ENCODING)
        self.payload = data[header_end + 1:]
        if pad_bits and not self.payload:
            raise FormatError("pad count given for an empty payload")
        self.total_bits = len(self.payload) * 8 - pad_bits

    def read_header(self) -> str:
        return self.header

    def read_bit(self) -> int:
        if self.bit_index >= self.total_bits:
            return END_OF_STREAM
        byte = self.payload[self.bit_index >> 3]
        bit = (byte >> (7 - (self.bit_index & 7))) & 1
        self.bit_index += 1
        return bit
